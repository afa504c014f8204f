"""Local deploy platforms."""

from shipctl.deploy.platforms.base import Platform
from shipctl.deploy.platforms.docker import DockerPlatform
from shipctl.deploy.platforms.noop import NoopPlatform

__all__ = ["Platform", "DockerPlatform", "NoopPlatform"]
