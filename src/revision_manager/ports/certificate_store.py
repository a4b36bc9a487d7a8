"""Certificate store port interface.

Uses typing.Protocol for structural subtyping (not ABCs).
The Redis adapter implements this protocol.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from revision_manager.domain.models import Certificate, CertificateRequest


class CertificateStore(Protocol):
    """Protocol for reading Certificates and managing their requests."""

    async def get_certificate(self, namespace: str, name: str) -> Certificate | None:
        """Retrieve a Certificate, or None when it does not exist."""
        ...

    async def list_owned_requests(
        self,
        namespace: str,
        owner_uid: str,
    ) -> list[CertificateRequest]:
        """List requests in ``namespace`` that reference the owner UID.

        Callers must still apply their own ownership predicate: the store only
        guarantees that some owner reference carries ``owner_uid``.
        """
        ...

    async def delete_request(self, namespace: str, name: str) -> None:
        """Delete a single request.

        Raises RequestNotFoundError when the request does not exist.
        """
        ...

    async def close(self) -> None:
        """Release connections."""
        ...
