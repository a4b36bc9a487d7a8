"""Unit test conftest with an in-memory certificate store."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from revision_manager.domain.errors import RequestNotFoundError

if TYPE_CHECKING:
    from fastapi.testclient import TestClient

    from revision_manager.domain.models import Certificate, CertificateRequest


class InMemoryCertificateStore:
    """Minimal in-memory CertificateStore that satisfies the protocol for unit tests.

    Every call is appended to ``actions`` as a tuple so tests can assert
    exactly which reads and deletes a pass performed. Requests are listed in
    insertion order.
    """

    def __init__(self) -> None:
        self._certificates: dict[tuple[str, str], Certificate] = {}
        self._requests: dict[tuple[str, str], CertificateRequest] = {}
        self.actions: list[tuple[str, ...]] = []
        # name -> exception raised when deleting that request
        self.delete_errors: dict[str, Exception] = {}
        self.get_error: Exception | None = None
        self.list_error: Exception | None = None

    def add_certificate(self, certificate: Certificate) -> None:
        self._certificates[(certificate.namespace, certificate.name)] = certificate

    def add_requests(self, *requests: CertificateRequest) -> None:
        for request in requests:
            self._requests[(request.namespace, request.name)] = request

    def request_names(self) -> list[str]:
        return [name for (_ns, name) in self._requests]

    @property
    def deletes(self) -> list[str]:
        return [action[2] for action in self.actions if action[0] == "delete"]

    async def get_certificate(self, namespace: str, name: str) -> Certificate | None:
        self.actions.append(("get", namespace, name))
        if self.get_error is not None:
            raise self.get_error
        return self._certificates.get((namespace, name))

    async def list_owned_requests(
        self,
        namespace: str,
        owner_uid: str,
    ) -> list[CertificateRequest]:
        self.actions.append(("list", namespace, owner_uid))
        if self.list_error is not None:
            raise self.list_error
        # Returns every request in the namespace so tests exercise the
        # reconciler's own ownership predicate.
        return [req for (ns, _name), req in self._requests.items() if ns == namespace]

    async def delete_request(self, namespace: str, name: str) -> None:
        self.actions.append(("delete", namespace, name))
        if name in self.delete_errors:
            raise self.delete_errors[name]
        if (namespace, name) not in self._requests:
            raise RequestNotFoundError(namespace, name)
        del self._requests[(namespace, name)]

    async def close(self) -> None:
        pass


class _StubRedisClient:
    """Stub Redis client for health check PING."""

    def __init__(self, healthy: bool = True) -> None:
        self._healthy = healthy

    async def ping(self) -> bool:
        if not self._healthy:
            msg = "Redis unavailable"
            raise ConnectionError(msg)
        return True


@pytest.fixture()
def in_memory_store() -> InMemoryCertificateStore:
    """Return a fresh in-memory certificate store."""
    return InMemoryCertificateStore()


@pytest.fixture()
def test_client(in_memory_store: InMemoryCertificateStore) -> TestClient:
    """FastAPI TestClient wired to the in-memory store (no Redis needed)."""
    from fastapi import FastAPI
    from fastapi.responses import ORJSONResponse
    from fastapi.testclient import TestClient as _TestClient

    from revision_manager.api.middleware import register_middleware
    from revision_manager.api.routes.admin import router as admin_router
    from revision_manager.api.routes.health import router as health_router
    from revision_manager.worker.reconciler import Reconciler

    app = FastAPI(default_response_class=ORJSONResponse)
    register_middleware(app)
    app.include_router(health_router, prefix="/v1")
    app.include_router(admin_router, prefix="/v1")

    app.state.certificate_store = in_memory_store
    app.state.reconciler = Reconciler(in_memory_store)
    # Health check pings the store's Redis client
    in_memory_store.client = _StubRedisClient(healthy=True)  # type: ignore[attr-defined]

    return _TestClient(app, raise_server_exceptions=False)
