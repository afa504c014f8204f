"""Deployment: local platforms and the remote build pipeline."""

from shipctl.deploy.models import (
    DeploymentDetails,
    DeploymentRecord,
    DeploymentStatus,
    LocalDeployment,
    UploadSession,
)

__all__ = [
    "DeploymentDetails",
    "DeploymentRecord",
    "DeploymentStatus",
    "LocalDeployment",
    "UploadSession",
]
