"""Domain exceptions."""

from __future__ import annotations


class InvalidKeyError(ValueError):
    """Raised when a work-queue key is not of the form ``namespace/name``."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"unexpected key format: {key!r}")


class RequestNotFoundError(LookupError):
    """Raised by a store when the request to delete does not exist."""

    def __init__(self, namespace: str, name: str) -> None:
        self.namespace = namespace
        self.name = name
        super().__init__(f"certificate request {namespace}/{name} not found")
