"""Revision extraction, ordering and surplus selection.

Pure domain module. ZERO framework imports.

Given the CertificateRequests owned by a Certificate, the pruning decision is:
1. Parse each request's revision annotation, dropping requests without one
2. Stable-sort the survivors oldest revision first
3. Delete the first ``max(0, count - limit)`` entries

Ownership is a separate predicate applied before ranking so the sort stays
independent of ownership concerns.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from revision_manager.domain.models import (
    CERTIFICATE_GROUP,
    CERTIFICATE_KIND,
    CertificateConditionType,
    ConditionStatus,
    Revision,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from revision_manager.domain.models import Certificate, CertificateRequest

# ASCII digits only: no sign, whitespace or underscores
_REVISION_PATTERN = re.compile(r"[0-9]+")

# Revisions are signed 64-bit counters
_MAX_REVISION = 2**63 - 1
_MAX_REVISION_DIGITS = len(str(_MAX_REVISION))


def parse_revision(value: str | None) -> int | None:
    """Parse a revision annotation value as a base-10 non-negative integer.

    Total function: returns None for a missing, empty, non-numeric or
    out-of-range value instead of raising.
    """
    if value is None or _REVISION_PATTERN.fullmatch(value) is None:
        return None
    digits = value.lstrip("0") or "0"
    # Checked before int() so oversized values never reach the interpreter's
    # integer string conversion limit
    if len(digits) > _MAX_REVISION_DIGITS:
        return None
    rev = int(digits)
    if rev > _MAX_REVISION:
        return None
    return rev


def has_condition(
    certificate: Certificate,
    condition_type: CertificateConditionType,
    status: ConditionStatus,
) -> bool:
    """Check whether the certificate reports the condition with the given status."""
    return any(
        cond.type == condition_type and cond.status == status
        for cond in certificate.conditions
    )


def is_ready(certificate: Certificate) -> bool:
    return has_condition(certificate, CertificateConditionType.READY, ConditionStatus.TRUE)


def is_controlled_by(request: CertificateRequest, certificate: Certificate) -> bool:
    """Check whether ``certificate`` is the controller owner of ``request``.

    The controller reference must match the certificate's API group, kind,
    name and UID, and both must live in the same namespace.
    """
    if request.namespace != certificate.namespace:
        return False
    ref = request.controller_reference
    if ref is None:
        return False
    return (
        ref.group == CERTIFICATE_GROUP
        and ref.kind == CERTIFICATE_KIND
        and ref.name == certificate.name
        and ref.uid == certificate.uid
    )


def filter_owned_requests(
    requests: Iterable[CertificateRequest],
    certificate: Certificate,
) -> list[CertificateRequest]:
    """Keep only the requests controlled by ``certificate``, preserving order."""
    return [req for req in requests if is_controlled_by(req, certificate)]


def sort_requests_by_revision(requests: Iterable[CertificateRequest]) -> list[Revision]:
    """Extract revisions and order them oldest first.

    Requests without a parseable revision are dropped silently. The sort is
    stable: requests sharing a revision number keep their input order.
    """
    revisions: list[Revision] = []
    for request in requests:
        rev = parse_revision(request.revision)
        if rev is None:
            continue
        revisions.append(Revision(rev=rev, request=request))

    return sorted(revisions, key=lambda r: r.rev)


def compute_surplus(count: int, limit: int) -> int:
    """Number of revisions beyond the retention limit."""
    return max(0, count - limit)


def select_requests_to_prune(revisions: Sequence[Revision], limit: int) -> list[Revision]:
    """Return the oldest revisions that exceed ``limit``.

    Always a prefix of ``revisions``, which must already be sorted.
    """
    surplus = compute_surplus(len(revisions), limit)
    return list(revisions[:surplus])
