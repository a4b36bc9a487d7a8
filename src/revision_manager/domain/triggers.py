"""Change trigger messages and their mapping to Certificate keys.

Pure domain module. ZERO framework imports.

A trigger is a flat ``dict[str, str]`` (a stream entry) announcing that a
Certificate or CertificateRequest changed. Request triggers carry the kind
and name of the request's controller so the owning Certificate can be
reconciled without another lookup.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from revision_manager.domain.keys import make_key
from revision_manager.domain.models import CERTIFICATE_KIND, CERTIFICATE_REQUEST_KIND

if TYPE_CHECKING:
    from revision_manager.domain.models import Certificate, CertificateRequest


def certificate_trigger(certificate: Certificate) -> dict[str, str]:
    return {
        "kind": CERTIFICATE_KIND,
        "namespace": certificate.namespace,
        "name": certificate.name,
    }


def request_trigger(request: CertificateRequest) -> dict[str, str]:
    fields = {
        "kind": CERTIFICATE_REQUEST_KIND,
        "namespace": request.namespace,
        "name": request.name,
    }
    ref = request.controller_reference
    if ref is not None:
        fields["owner_kind"] = ref.kind
        fields["owner_name"] = ref.name
    return fields


def keys_for_trigger(data: dict[str, str]) -> list[str]:
    """Map a trigger message to the Certificate keys it should enqueue.

    - Certificate: its own key
    - CertificateRequest controlled by a Certificate: the owner's key
    - Anything else: nothing
    """
    kind = data.get("kind", "")
    namespace = data.get("namespace", "")

    if kind == CERTIFICATE_KIND:
        name = data.get("name", "")
        return [make_key(namespace, name)] if name else []

    if kind == CERTIFICATE_REQUEST_KIND:
        if data.get("owner_kind") != CERTIFICATE_KIND:
            return []
        owner_name = data.get("owner_name", "")
        return [make_key(namespace, owner_name)] if owner_name else []

    return []
