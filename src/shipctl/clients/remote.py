"""Remote build service API client using httpx."""

from typing import Any, Callable

import httpx

from shipctl.config import RemoteConfig
from shipctl.core.exceptions import ConfigError, PollTransientError, RemoteAPIError, TransferError
from shipctl.core.logging import get_logger
from shipctl.deploy.models import DeploymentDetails, DeploymentStatus, UploadSession
from shipctl.deploy.sse import iter_log_lines

logger = get_logger(__name__)

UPLOAD_OK_STATUSES = (200, 201, 204)


class RemoteBuildClient:
    """Client for the remote build service (uploads, deployments, build logs)."""

    def __init__(self, config: RemoteConfig, transport: httpx.BaseTransport | None = None):
        self._config = config
        self._transport = transport
        self._client: httpx.Client | None = None
        self._upload_client: httpx.Client | None = None

    @property
    def base_url(self) -> str:
        return self._config.get_api_url().rstrip("/")

    def _auth_headers(self) -> dict[str, str]:
        token = self._config.get_token()
        if not token:
            raise ConfigError("Remote build token not configured (set SHIPCTL_TOKEN)")
        return {"Authorization": f"Bearer {token}"}

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            headers = {**self._auth_headers(), "Content-Type": "application/json"}
            self._client = httpx.Client(
                base_url=self.base_url,
                headers=headers,
                timeout=self._config.timeout,
                transport=self._transport,
            )
            logger.debug(f"Created remote build client for {self.base_url}")
        return self._client

    @property
    def upload_client(self) -> httpx.Client:
        """Unauthenticated client for presigned upload URLs."""
        if self._upload_client is None:
            self._upload_client = httpx.Client(
                timeout=self._config.upload_timeout,
                transport=self._transport,
            )
        return self._upload_client

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Make an API request."""
        try:
            response = self.client.request(method, path, **kwargs)
            response.raise_for_status()

            if response.content:
                return response.json()
            return None

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            try:
                error_data = e.response.json()
                message = error_data.get("message") or error_data.get("error") or str(e)
            except Exception:
                message = e.response.text or str(e)
            raise RemoteAPIError(message, status_code=status_code)

        except httpx.RequestError as e:
            raise RemoteAPIError(f"Request failed: {e}")

        except ValueError as e:
            raise RemoteAPIError(f"Invalid JSON response from {path}: {e}")

    def _request_object(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        """Make an API request whose body must be a JSON object (or empty)."""
        data = self._request(method, path, **kwargs)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise RemoteAPIError(f"Unexpected response from {path}: expected an object")
        return data

    def init_upload(self, service_id: str) -> UploadSession:
        """Open an upload session and get a presigned URL."""
        if not service_id:
            raise ConfigError("service ID cannot be empty")
        data = self._request_object("POST", "/api/cli/uploads/init", json={"serviceId": service_id})
        session = UploadSession.from_dict(data)
        if not session.upload_id or not session.upload_url:
            raise TransferError("init upload returned no upload slot", details={"response": data})
        return session

    def upload_file(self, upload_url: str, data: bytes) -> None:
        """PUT the archive bytes to the presigned URL."""
        try:
            response = self.upload_client.put(
                upload_url,
                content=data,
                headers={"Content-Type": "application/x-tar"},
            )
        except httpx.RequestError as e:
            raise TransferError(f"upload request failed: {e}")

        if response.status_code not in UPLOAD_OK_STATUSES:
            raise TransferError(
                f"upload failed with status {response.status_code}: {response.text}",
                details={"status_code": response.status_code},
            )

    def complete_upload(self, upload_id: str, file_size: int, checksum: str) -> dict[str, Any]:
        if not upload_id:
            raise ConfigError("upload ID cannot be empty")
        return self._request_object(
            "POST",
            f"/api/cli/uploads/{upload_id}/complete",
            json={"fileSize": file_size, "checksum": checksum},
        )

    def trigger_deploy(self, upload_id: str) -> str:
        """Start a deployment from an uploaded archive; returns the deployment ID."""
        if not upload_id:
            raise ConfigError("upload ID cannot be empty")
        data = self._request_object("POST", f"/api/cli/uploads/{upload_id}/deploy")
        deployment_id = data.get("deploymentId")
        if not deployment_id:
            raise RemoteAPIError("trigger deploy returned no deployment ID")
        return deployment_id

    def get_deployment_status(self, deployment_id: str) -> DeploymentStatus:
        """Current status.

        Anything but a 4xx answer (network errors, 5xx, unreadable bodies)
        raises PollTransientError so the caller keeps polling.
        """
        if not deployment_id:
            raise ConfigError("deployment ID cannot be empty")
        try:
            data = self._request_object("GET", f"/api/v1/deployments/{deployment_id}")
        except RemoteAPIError as e:
            if e.status_code is not None and 400 <= e.status_code < 500:
                raise
            raise PollTransientError(e.message, status_code=e.status_code) from e
        return DeploymentStatus.parse(data.get("status"))

    def get_deployment_details(self, deployment_id: str) -> DeploymentDetails:
        if not deployment_id:
            raise ConfigError("deployment ID cannot be empty")
        data = self._request_object("GET", f"/api/v1/deployments/{deployment_id}")
        return DeploymentDetails.from_dict(data)

    def stream_build_logs(self, deployment_id: str, sink: Callable[[str], Any]) -> int:
        """Stream build log lines to `sink` until the end event. Returns line count."""
        url = f"{self.base_url}/build-logs/{deployment_id}"
        headers = {**self._auth_headers(), "Accept": "text/event-stream"}
        timeout = httpx.Timeout(self._config.timeout, read=None)

        count = 0
        try:
            with self.client.stream("GET", url, headers=headers, timeout=timeout) as response:
                if response.status_code != 200:
                    response.read()
                    raise RemoteAPIError(
                        f"unexpected status {response.status_code}: {response.text}",
                        status_code=response.status_code,
                    )
                for line in iter_log_lines(response.iter_lines()):
                    sink(line)
                    count += 1
        except httpx.RequestError as e:
            raise RemoteAPIError(f"Log stream failed: {e}")
        return count

    def close(self) -> None:
        """Close the HTTP clients."""
        if self._client:
            self._client.close()
            self._client = None
        if self._upload_client:
            self._upload_client.close()
            self._upload_client = None

    def __enter__(self) -> "RemoteBuildClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
