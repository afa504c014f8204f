"""Deployment data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
import uuid

from shipctl.core.exceptions import ShipCtlError, TransferError


class DeploymentStatus(str, Enum):
    """Remote deployment status."""

    QUEUED = "QUEUED"
    RUNNING = "RUNNING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"

    @classmethod
    def parse(cls, value: str | None) -> "DeploymentStatus":
        """Normalize a status string reported by the build service.

        Unknown in-progress words (BUILDING, DEPLOYING, ...) map to RUNNING.
        """
        normalized = (value or "").strip().upper()
        normalized = _STATUS_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            return cls.RUNNING

    @property
    def is_terminal(self) -> bool:
        return self in (DeploymentStatus.SUCCESS, DeploymentStatus.FAILED, DeploymentStatus.CANCELLED)


_STATUS_ALIASES = {
    "PENDING": "QUEUED",
    "SUCCEEDED": "SUCCESS",
    "CANCELED": "CANCELLED",
}


@dataclass
class DeploymentRecord:
    """Locally observed lifecycle of a remote deployment."""

    deployment_id: str
    status: DeploymentStatus = DeploymentStatus.QUEUED
    history: list[DeploymentStatus] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.history:
            self.history.append(self.status)

    def transition(self, status: DeploymentStatus) -> None:
        """Record an observed status. Terminal states are final."""
        if status == self.status:
            return
        if self.status.is_terminal:
            raise ShipCtlError(
                f"Deployment {self.deployment_id} is already {self.status.value}",
                details={"requested": status.value},
            )
        self.status = status
        self.history.append(status)

    @property
    def is_complete(self) -> bool:
        return self.status.is_terminal

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "deployment_id": self.deployment_id,
            "status": self.status.value,
            "history": [s.value for s in self.history],
        }


@dataclass
class UploadSession:
    """A presigned upload slot for a source archive."""

    upload_id: str
    upload_url: str
    expires_at: str | None = None
    max_size: int | None = None
    size: int | None = None
    checksum: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UploadSession":
        return cls(
            upload_id=data.get("uploadId", ""),
            upload_url=data.get("uploadUrl", ""),
            expires_at=data.get("expiresAt") or None,
            max_size=data.get("maxSize") or None,
        )

    @property
    def finalized(self) -> bool:
        return self.checksum is not None

    def finalize(self, size: int, checksum: str) -> None:
        if self.finalized:
            raise TransferError(f"Upload {self.upload_id} was already finalized")
        self.size = size
        self.checksum = checksum


@dataclass
class DeploymentPhase:
    """One phase of a remote deployment (build, deploy, ...)."""

    name: str
    status: str = ""
    error: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeploymentPhase":
        return cls(
            name=data.get("name", ""),
            status=data.get("status", ""),
            error=data.get("error") or "",
        )


@dataclass
class DeploymentDetails:
    """Full deployment information used to explain failures."""

    id: str
    status: DeploymentStatus
    service_name: str = ""
    repo: str = ""
    branch: str = ""
    build_successful: bool = False
    phases: list[DeploymentPhase] = field(default_factory=list)
    error: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeploymentDetails":
        return cls(
            id=data.get("id", ""),
            status=DeploymentStatus.parse(data.get("status")),
            service_name=data.get("integrationName") or data.get("serviceName") or "",
            repo=data.get("repo") or "",
            branch=data.get("branch") or "",
            build_successful=bool(data.get("buildSuccessful", False)),
            phases=[DeploymentPhase.from_dict(p) for p in data.get("phases") or []],
            error=data.get("error") or "",
        )

    def failure_reason(self) -> str:
        """Most specific explanation available for a FAILED deployment."""
        if self.status != DeploymentStatus.FAILED:
            return ""

        if self.error:
            return self.error

        for phase in self.phases:
            if phase.status.upper() == "FAILED" or phase.error:
                if phase.error:
                    return f"{phase.name} phase failed: {phase.error}"
                return f"{phase.name} phase failed"

        if not self.phases:
            if not self.build_successful:
                return "Build failed to start - check if the source code was uploaded correctly"
            return "Deployment failed before build started"

        return "Deployment failed (no specific error available)"

    def suggestions(self) -> list[str]:
        """Remediation hints derived from phase errors."""
        suggestions: list[str] = []

        if not self.phases and not self.build_successful:
            suggestions.extend([
                "Verify the source archive was uploaded successfully",
                "Check if the build service is reachable",
                "Try running 'shipctl deploy up' again",
            ])

        for phase in self.phases:
            if not phase.error:
                continue
            error = phase.error.lower()
            if "dockerfile" in error:
                suggestions.extend([
                    "Ensure a Dockerfile exists in the root directory",
                    "Or use --builder=nixpacks for auto-detection",
                ])
            if "npm" in error or "node" in error:
                suggestions.extend([
                    "Check package.json for valid dependencies",
                    "Ensure node version is specified in package.json engines",
                ])
            if "memory" in error or "oom" in error:
                suggestions.append("Build may need more memory - contact support")

        if not suggestions:
            suggestions.extend([
                "Check the build logs for more details",
                "Verify your project builds locally",
                "Contact support if the issue persists",
            ])

        return suggestions


@dataclass
class LocalDeployment:
    """Result of deploying an artifact to a local platform."""

    name: str
    artifact_id: str
    platform: str
    state: str = "running"
    url: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    deployed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "artifact_id": self.artifact_id,
            "platform": self.platform,
            "state": self.state,
            "url": self.url,
            "metadata": self.metadata,
            "deployed_at": self.deployed_at.isoformat(),
        }
