"""API clients for external services."""

from shipctl.clients.remote import RemoteBuildClient

__all__ = ["RemoteBuildClient"]
