"""Work-queue key helpers.

Keys are ``namespace/name`` strings. A key without a slash addresses a
resource with an empty namespace.
"""

from __future__ import annotations

from revision_manager.domain.errors import InvalidKeyError


def make_key(namespace: str, name: str) -> str:
    """Build the key for a namespaced resource."""
    if namespace:
        return f"{namespace}/{name}"
    return name


def split_key(key: str) -> tuple[str, str]:
    """Split a key into ``(namespace, name)``.

    Raises InvalidKeyError when the key has more than one slash.
    """
    parts = key.split("/")
    if len(parts) == 1:
        return "", parts[0]
    if len(parts) == 2:
        return parts[0], parts[1]
    raise InvalidKeyError(key)
