"""Admin endpoints for revision history pruning.

GET  /v1/admin/revisions/{namespace}/{name} : dry-run plan for a Certificate
POST /v1/admin/reconcile/{namespace}/{name} : run a pruning pass now
"""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from revision_manager.api.dependencies import get_reconciler
from revision_manager.domain.keys import make_key
from revision_manager.domain.revisions import is_ready
from revision_manager.worker.reconciler import Reconciler  # noqa: TCH001: runtime: Depends

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

ReconcilerDep = Annotated[Reconciler, Depends(get_reconciler)]


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class RevisionEntry(BaseModel):
    """One request in revision order."""

    name: str
    revision: int


class PlanResponse(BaseModel):
    """Dry-run result for a Certificate."""

    key: str
    ready: bool
    revision_history_limit: int | None = None
    revisions: list[RevisionEntry] = Field(default_factory=list)
    to_delete: list[str] = Field(default_factory=list)


class ReconcileResponse(BaseModel):
    """Result of a pruning pass."""

    key: str
    deleted: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.get("/revisions/{namespace}/{name}")
async def preview_revisions(
    namespace: str,
    name: str,
    reconciler: ReconcilerDep,
) -> PlanResponse:
    """Show the ordered revisions and what a pass would delete."""
    key = make_key(namespace, name)
    plan = await reconciler.plan(key)
    if plan is None:
        raise HTTPException(status_code=404, detail=f"certificate {key} not found")

    crt = plan.certificate
    return PlanResponse(
        key=key,
        ready=is_ready(crt),
        revision_history_limit=crt.revision_history_limit,
        revisions=[
            RevisionEntry(name=r.request.name, revision=r.rev) for r in plan.revisions
        ],
        to_delete=[r.request.name for r in plan.to_delete],
    )


@router.post("/reconcile/{namespace}/{name}")
async def reconcile(
    namespace: str,
    name: str,
    reconciler: ReconcilerDep,
) -> ReconcileResponse:
    """Run one pruning pass for a Certificate immediately."""
    key = make_key(namespace, name)
    deleted = await reconciler.process_item(key)
    logger.info("manual_reconcile_completed", key=key, deleted=len(deleted))
    return ReconcileResponse(key=key, deleted=deleted)
