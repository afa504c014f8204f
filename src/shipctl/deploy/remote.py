"""Remote build orchestration: archive, upload, trigger, stream logs, poll."""

import time
from pathlib import Path
from typing import Any, Callable

from shipctl.core.exceptions import (
    DeploymentCancelledError,
    DeploymentFailedError,
    PollTransientError,
    ShipCtlError,
    TimeoutError,
)
from shipctl.core.logging import StructuredLogger
from shipctl.core.output import OutputFormatter, format_bytes, format_duration
from shipctl.deploy.archive import checksum, create_archive
from shipctl.deploy.models import DeploymentRecord, DeploymentStatus

DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_MAX_WAIT = 600.0


class RemoteBuildOrchestrator:
    """Drives a source upload through the remote build service.

    `client` is a RemoteBuildClient (or anything with the same methods).
    `sleep` and `clock` are injectable so polling can be tested without
    waiting.
    """

    def __init__(
        self,
        client: Any,
        output: OutputFormatter | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_wait: float = DEFAULT_MAX_WAIT,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.output = output
        self.poll_interval = poll_interval
        self.max_wait = max_wait
        self._sleep = sleep
        self._clock = clock
        self._logger = StructuredLogger("deploy.remote")

    def _say(self, message: str) -> None:
        if self.output is not None:
            self.output.print_info(message)

    def run(self, source_dir: str | Path, service_id: str) -> DeploymentRecord:
        """Upload `source_dir` and wait for the resulting deployment."""
        self._say("Creating source archive...")
        data = create_archive(source_dir)
        digest = checksum(data)
        self._logger.info("Archive ready", size=len(data), checksum=digest[:12])

        session = self.client.init_upload(service_id)
        if session.max_size and len(data) > session.max_size:
            raise ShipCtlError(
                f"Archive is {format_bytes(len(data))}, larger than the "
                f"{format_bytes(session.max_size)} upload limit"
            )

        self._say(f"Uploading {format_bytes(len(data))}...")
        self.client.upload_file(session.upload_url, data)

        self.client.complete_upload(session.upload_id, len(data), digest)
        session.finalize(len(data), digest)

        deployment_id = self.client.trigger_deploy(session.upload_id)
        self._say(f"Deployment {deployment_id} triggered")

        self.stream_logs(deployment_id)
        return self.wait_for_completion(deployment_id)

    def stream_logs(self, deployment_id: str) -> None:
        """Stream build logs. Failures here never fail the deployment."""
        sink = self.output.print_log if self.output is not None else (lambda line: None)
        try:
            count = self.client.stream_build_logs(deployment_id, sink)
            self._logger.debug("Log stream ended", deployment=deployment_id, lines=count)
        except ShipCtlError as e:
            self._logger.warning("Log streaming failed", deployment=deployment_id, error=str(e))

    def wait_for_completion(self, deployment_id: str) -> DeploymentRecord:
        """Poll until a terminal status or until max_wait elapses."""
        record = DeploymentRecord(deployment_id)
        started = self._clock()
        deadline = started + self.max_wait

        while True:
            try:
                status = self.client.get_deployment_status(deployment_id)
            except PollTransientError as e:
                self._logger.warning("Status poll failed, retrying", deployment=deployment_id, error=str(e))
            else:
                record.transition(status)
                if status == DeploymentStatus.SUCCESS:
                    self._logger.info(
                        "Deployment succeeded",
                        deployment=deployment_id,
                        elapsed=format_duration(self._clock() - started),
                    )
                    return record
                if status == DeploymentStatus.FAILED:
                    raise self._failure(deployment_id)
                if status == DeploymentStatus.CANCELLED:
                    raise DeploymentCancelledError(deployment_id)

            if self._clock() >= deadline:
                raise TimeoutError(
                    f"timeout waiting for deployment {deployment_id}",
                    timeout_seconds=int(self.max_wait),
                )
            self._sleep(self.poll_interval)

    def _failure(self, deployment_id: str) -> DeploymentFailedError:
        try:
            details = self.client.get_deployment_details(deployment_id)
        except ShipCtlError as e:
            self._logger.warning("Could not fetch deployment details", deployment=deployment_id, error=str(e))
            return DeploymentFailedError("could not fetch details", deployment_id=deployment_id)

        return DeploymentFailedError(
            details.failure_reason() or "unknown error",
            deployment_id=deployment_id,
            service_name=details.service_name or None,
            branch=details.branch or None,
            suggestions=details.suggestions(),
        )
