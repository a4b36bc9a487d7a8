"""Revision history pruning for a single Certificate.

One pass of the reconciler:
1. Resolve the ``namespace/name`` key to a Certificate
2. Skip Certificates that are not Ready or have no revision history limit
3. List the requests the Certificate controls
4. Order them by revision and delete the oldest beyond the limit

Every pass recomputes from freshly fetched state. Nothing is cached between
passes, so a pass that fails halfway is repaired by the next one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from revision_manager.domain.errors import InvalidKeyError, RequestNotFoundError
from revision_manager.domain.keys import split_key
from revision_manager.domain.revisions import (
    filter_owned_requests,
    is_ready,
    select_requests_to_prune,
    sort_requests_by_revision,
)

if TYPE_CHECKING:
    from revision_manager.domain.models import Certificate, Revision
    from revision_manager.ports.certificate_store import CertificateStore

log = structlog.get_logger(__name__)


@dataclass
class PrunePlan:
    """Outcome of the read-only half of a pass."""

    certificate: Certificate
    revisions: list[Revision] = field(default_factory=list)
    to_delete: list[Revision] = field(default_factory=list)


class Reconciler:
    """Deletes CertificateRequests beyond a Certificate's revision history limit.

    Not reentrant per Certificate: callers must ensure at most one pass per
    key runs at a time. Passes for different keys share no state.
    """

    def __init__(self, store: CertificateStore) -> None:
        self._store = store

    async def plan(self, key: str) -> PrunePlan | None:
        """Compute which requests a pass for ``key`` would delete.

        Returns None when the key is malformed or the Certificate does not
        exist. Store failures propagate.
        """
        try:
            namespace, name = split_key(key)
        except InvalidKeyError:
            log.warning("invalid_resource_key", key=key)
            return None

        if not name:
            return None

        crt = await self._store.get_certificate(namespace, name)
        if crt is None:
            log.debug("certificate_not_found", key=key)
            return None

        plan = PrunePlan(certificate=crt)

        if not is_ready(crt):
            log.debug("certificate_not_ready", key=key)
            return plan

        limit = crt.revision_history_limit
        if limit is None:
            log.debug("revision_history_limit_not_set", key=key)
            return plan

        requests = await self._store.list_owned_requests(crt.namespace, crt.uid)
        owned = filter_owned_requests(requests, crt)

        plan.revisions = sort_requests_by_revision(owned)
        plan.to_delete = select_requests_to_prune(plan.revisions, limit)

        if len(owned) != len(plan.revisions):
            log.debug(
                "requests_without_revision_skipped",
                key=key,
                skipped=len(owned) - len(plan.revisions),
            )
        return plan

    async def process_item(self, key: str) -> list[str]:
        """Run one pruning pass for ``key``.

        Returns the names of the requests deleted. Deletes run oldest first;
        the first failure propagates and leaves earlier deletes in place.
        """
        plan = await self.plan(key)
        if plan is None or not plan.to_delete:
            return []

        crt = plan.certificate
        log.info(
            "pruning_revisions",
            key=key,
            limit=crt.revision_history_limit,
            revisions=len(plan.revisions),
            surplus=len(plan.to_delete),
        )

        deleted: list[str] = []
        for revision in plan.to_delete:
            req = revision.request
            try:
                await self._store.delete_request(req.namespace, req.name)
            except RequestNotFoundError:
                log.debug("request_already_deleted", key=key, request=req.name)
                continue
            log.info(
                "request_deleted",
                key=key,
                request=req.name,
                revision=revision.rev,
            )
            deleted.append(req.name)

        return deleted
