"""shipctl - build and deploy orchestration CLI."""

__version__ = "0.1.0"
