"""Redis CertificateStore adapter.

Implements the ``CertificateStore`` protocol with plain Redis commands:
- **Strings** holding orjson-encoded Certificate and CertificateRequest documents
- **Sets** indexing request names by owner UID
- **Streams** carrying change triggers for the revision manager worker

Key layout (``{p}`` is the configured key prefix):
- ``{p}certificate:{namespace}/{name}``
- ``{p}certificaterequest:{namespace}/{name}``
- ``{p}owner:{namespace}:{uid}``
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import orjson
import structlog
from redis.asyncio import Redis

from revision_manager.domain.errors import RequestNotFoundError
from revision_manager.domain.keys import make_key
from revision_manager.domain.models import Certificate, CertificateRequest
from revision_manager.domain.triggers import certificate_trigger, request_trigger

if TYPE_CHECKING:
    from revision_manager.settings import RedisSettings

log = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _decode(value: bytes | str) -> str:
    return value.decode() if isinstance(value, bytes) else value


def _deserialize_certificate(raw_json: bytes | str) -> Certificate:
    return Certificate.model_validate(orjson.loads(raw_json))


def _deserialize_request(raw_json: bytes | str) -> CertificateRequest:
    return CertificateRequest.model_validate(orjson.loads(raw_json))


# ---------------------------------------------------------------------------
# RedisCertificateStore
# ---------------------------------------------------------------------------


class RedisCertificateStore:
    """CertificateStore implementation backed by Redis.

    Satisfies the ``revision_manager.ports.certificate_store.CertificateStore``
    protocol.
    """

    def __init__(self, client: Redis, settings: RedisSettings) -> None:
        self._client = client
        self._settings = settings

    @property
    def client(self) -> Redis:
        """The underlying Redis connection, shared with stream consumers."""
        return self._client

    # -- lifecycle ----------------------------------------------------------

    @classmethod
    async def create(cls, settings: RedisSettings) -> RedisCertificateStore:
        """Factory: create a connected store from settings."""
        client = Redis(
            host=settings.host,
            port=settings.port,
            db=settings.db,
            password=settings.password,
            decode_responses=False,
        )
        await client.ping()
        log.info("redis_connected", host=settings.host, port=settings.port)
        return cls(client=client, settings=settings)

    async def close(self) -> None:
        """Release the Redis connection."""
        await self._client.aclose()
        log.info("redis_connection_closed")

    # -- key builders -------------------------------------------------------

    def _certificate_key(self, namespace: str, name: str) -> str:
        return f"{self._settings.key_prefix}certificate:{namespace}/{name}"

    def _request_key(self, namespace: str, name: str) -> str:
        return f"{self._settings.key_prefix}certificaterequest:{namespace}/{name}"

    def _owner_key(self, namespace: str, uid: str) -> str:
        return f"{self._settings.key_prefix}owner:{namespace}:{uid}"

    # -- triggers -----------------------------------------------------------

    async def _publish(self, fields: dict[str, str]) -> None:
        entry_id = await self._client.xadd(self._settings.trigger_stream, fields)  # type: ignore[arg-type]
        log.debug(
            "trigger_published",
            kind=fields["kind"],
            key=make_key(fields["namespace"], fields["name"]),
            entry_id=_decode(entry_id),
        )

    # -- write operations ---------------------------------------------------

    async def put_certificate(self, certificate: Certificate) -> None:
        """Create or replace a Certificate and publish a trigger."""
        await self._client.set(
            self._certificate_key(certificate.namespace, certificate.name),
            certificate.model_dump_json(),
        )
        await self._publish(certificate_trigger(certificate))

    async def put_request(self, request: CertificateRequest) -> None:
        """Create or replace a request, index it by owner UID, publish a trigger."""
        pipe = self._client.pipeline(transaction=True)
        pipe.set(
            self._request_key(request.namespace, request.name),
            request.model_dump_json(),
        )
        for ref in request.owner_references:
            pipe.sadd(self._owner_key(request.namespace, ref.uid), request.name)
        await pipe.execute()
        await self._publish(request_trigger(request))

    async def delete_request(self, namespace: str, name: str) -> None:
        """Delete a request and its owner index entries.

        Raises RequestNotFoundError when the request does not exist.
        """
        request = await self.get_request(namespace, name)
        if request is None:
            raise RequestNotFoundError(namespace, name)

        pipe = self._client.pipeline(transaction=True)
        pipe.delete(self._request_key(namespace, name))
        for ref in request.owner_references:
            pipe.srem(self._owner_key(namespace, ref.uid), name)
        results = await pipe.execute()
        if not results[0]:
            # Deleted concurrently between the read and the pipeline
            raise RequestNotFoundError(namespace, name)

        await self._publish(request_trigger(request))

    # -- read operations ----------------------------------------------------

    async def get_certificate(self, namespace: str, name: str) -> Certificate | None:
        raw = await self._client.get(self._certificate_key(namespace, name))
        if raw is None:
            return None
        return _deserialize_certificate(raw)

    async def get_request(self, namespace: str, name: str) -> CertificateRequest | None:
        raw = await self._client.get(self._request_key(namespace, name))
        if raw is None:
            return None
        return _deserialize_request(raw)

    async def list_owned_requests(
        self,
        namespace: str,
        owner_uid: str,
    ) -> list[CertificateRequest]:
        """List requests indexed under ``owner_uid``, sorted by name.

        Index entries whose document is gone are skipped.
        """
        members = await self._client.smembers(self._owner_key(namespace, owner_uid))
        names = sorted(_decode(m) for m in members)
        if not names:
            return []

        pipe = self._client.pipeline(transaction=False)
        for name in names:
            pipe.get(self._request_key(namespace, name))
        results = await pipe.execute()

        requests: list[CertificateRequest] = []
        for name, raw in zip(names, results, strict=True):
            if raw is None:
                log.debug("stale_owner_index_entry", namespace=namespace, request=name)
                continue
            requests.append(_deserialize_request(raw))
        return requests
