"""Runs an artifact as a local docker container."""

import asyncio
import shutil

from shipctl.build.models import Artifact
from shipctl.core.exceptions import ShipCtlError
from shipctl.core.logging import StructuredLogger
from shipctl.deploy.models import LocalDeployment
from shipctl.deploy.platforms.base import Platform


class DockerPlatform(Platform):
    """Starts a detached container publishing the artifact's ports.

    Configuration keys: `container_name`, `ports` (overrides detected ports).
    """

    def __init__(self) -> None:
        super().__init__()
        self._logger = StructuredLogger("deploy.platforms.docker")

    @property
    def name(self) -> str:
        return "docker"

    def run_args(self, app_name: str, artifact: Artifact) -> list[str]:
        container = self._config.get("container_name") or app_name
        ports = self._config.get("ports") or artifact.exposed_ports

        args = ["run", "-d", "--name", container]
        for port in ports:
            args.extend(["-p", f"{port}:{port}"])
        args.append(artifact.full_image)
        return args

    async def deploy(self, app_name: str, artifact: Artifact) -> LocalDeployment:
        args = self.run_args(app_name, artifact)
        self._logger.info("Starting container", image=artifact.full_image, app=app_name)

        try:
            proc = await asyncio.create_subprocess_exec(
                shutil.which("docker") or "docker",
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ShipCtlError(f"Failed to start docker: {e}")

        stdout, stderr = await proc.communicate()
        if proc.returncode != 0:
            raise ShipCtlError(
                f"docker run failed: {stderr.decode(errors='replace').strip()}",
                details={"returncode": proc.returncode},
            )

        container_id = stdout.decode(errors="replace").strip()
        url = None
        if artifact.primary_port:
            url = f"http://localhost:{artifact.primary_port}"

        return LocalDeployment(
            name=app_name,
            artifact_id=artifact.id,
            platform=self.name,
            state="running",
            url=url,
            metadata={"container_id": container_id, "image": artifact.full_image},
        )
