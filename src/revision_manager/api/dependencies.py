"""FastAPI dependency injection helpers.

Extracts shared resources from ``app.state`` so route handlers can
declare them via ``Depends()``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request  # noqa: TCH002: runtime: FastAPI dependency injection

if TYPE_CHECKING:
    from revision_manager.worker.reconciler import Reconciler


def get_reconciler(request: Request) -> Reconciler:
    """Return the reconciler from app state."""
    return request.app.state.reconciler  # type: ignore[no-any-return]
