"""Base deploy platform."""

from abc import ABC, abstractmethod
from typing import Any

from shipctl.build.models import Artifact
from shipctl.deploy.models import LocalDeployment


class Platform(ABC):
    """Abstract base class for deploy platforms."""

    def __init__(self) -> None:
        self._config: dict[str, Any] = {}

    @property
    @abstractmethod
    def name(self) -> str:
        """Get platform name."""
        pass

    def get_configuration(self) -> dict[str, Any]:
        return dict(self._config)

    def set_configuration(self, config: dict[str, Any] | None) -> None:
        self._config = dict(config or {})

    @abstractmethod
    async def deploy(self, app_name: str, artifact: Artifact) -> LocalDeployment:
        """Deploy an artifact and return the resulting deployment."""
        pass
