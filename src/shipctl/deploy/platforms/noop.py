"""Platform that records a deployment without starting anything."""

from shipctl.build.models import Artifact
from shipctl.core.logging import get_logger
from shipctl.deploy.models import LocalDeployment
from shipctl.deploy.platforms.base import Platform

logger = get_logger(__name__)


class NoopPlatform(Platform):
    @property
    def name(self) -> str:
        return "noop"

    async def deploy(self, app_name: str, artifact: Artifact) -> LocalDeployment:
        logger.info(f"Noop deploy of {artifact.full_image} for {app_name}")
        return LocalDeployment(
            name=app_name,
            artifact_id=artifact.id,
            platform=self.name,
            state="running",
            metadata={"image": artifact.full_image},
        )
