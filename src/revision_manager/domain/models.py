"""Domain models for the certificate revision manager.

All models are pure Python + Pydantic v2. Zero framework imports.

A Certificate owns many CertificateRequests, one per issuance attempt.
Each request records which revision of the Certificate it was created for
in the ``cert-manager.io/certificate-revision`` annotation.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CERTIFICATE_GROUP = "cert-manager.io"
CERTIFICATE_API_VERSION = f"{CERTIFICATE_GROUP}/v1"
CERTIFICATE_KIND = "Certificate"
CERTIFICATE_REQUEST_KIND = "CertificateRequest"

# Annotation carrying the Certificate revision a request was created for
REVISION_ANNOTATION = f"{CERTIFICATE_GROUP}/certificate-revision"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ConditionStatus(enum.StrEnum):
    """Tri-state condition status."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class CertificateConditionType(enum.StrEnum):
    """Condition types a Certificate reports in its status."""

    READY = "Ready"
    ISSUING = "Issuing"


# ---------------------------------------------------------------------------
# Resources
# ---------------------------------------------------------------------------


class CertificateCondition(BaseModel):
    """A single status condition on a Certificate."""

    type: CertificateConditionType
    status: ConditionStatus = ConditionStatus.UNKNOWN
    reason: str | None = None
    message: str | None = None


class OwnerReference(BaseModel):
    """Reference from a dependent resource to the resource that owns it."""

    api_version: str = CERTIFICATE_API_VERSION
    kind: str = CERTIFICATE_KIND
    name: str
    uid: str
    controller: bool = False

    @property
    def group(self) -> str:
        """API group portion of ``api_version`` (empty for the core group)."""
        group, _, _version = self.api_version.rpartition("/")
        return group


class Certificate(BaseModel):
    """A long-lived certificate resource.

    ``revision_history_limit`` of ``None`` means unbounded retention; zero is
    a legal limit that keeps no historical requests at all.
    """

    namespace: str
    name: str
    uid: str
    revision_history_limit: int | None = Field(default=None, ge=0)
    conditions: list[CertificateCondition] = Field(default_factory=list)


class CertificateRequest(BaseModel):
    """Immutable record of one issuance attempt for a Certificate."""

    namespace: str
    name: str
    uid: str = ""
    annotations: dict[str, str] = Field(default_factory=dict)
    owner_references: list[OwnerReference] = Field(default_factory=list)

    @property
    def revision(self) -> str | None:
        """Raw revision annotation value, or None when it is not set."""
        return self.annotations.get(REVISION_ANNOTATION)

    @property
    def controller_reference(self) -> OwnerReference | None:
        """The owner reference flagged as controller, if any."""
        for ref in self.owner_references:
            if ref.controller:
                return ref
        return None


# ---------------------------------------------------------------------------
# Derived values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Revision:
    """A request paired with its parsed revision number.

    Computed fresh on every reconciliation pass and never persisted.
    """

    rev: int
    request: CertificateRequest
