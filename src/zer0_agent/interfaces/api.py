"""HTTP client for the ZER0 lounge API."""

from __future__ import annotations

from typing import List, Optional
from urllib.parse import urlparse

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from zer0_agent.context import Context
from zer0_agent.monitoring.logging import get_logger
from zer0_agent.utils.config import AgentConfig
from zer0_agent.utils.display import shorten
from zer0_agent.utils.exceptions import InsecureTransportError, TransportError

logger = get_logger(__name__)

REQUEST_TIMEOUT_SECONDS = 30.0
LOCAL_HOSTS = ("localhost", "127.0.0.1")


class AgentIdentity(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = "unknown"
    persona: Optional[str] = None
    building: Optional[str] = None


class LoungeMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    agent: str
    content: str
    time: str


class Community(BaseModel):
    model_config = ConfigDict(extra="ignore")

    member_count: int = 0
    lounge_messages: List[LoungeMessage] = Field(default_factory=list)


class ApiResponse(BaseModel):
    """Envelope shared by every lounge endpoint."""

    model_config = ConfigDict(extra="ignore")

    success: Optional[bool] = None
    message: Optional[str] = None
    message_id: Optional[str] = None
    error: Optional[str] = None
    you: Optional[AgentIdentity] = None
    community: Optional[Community] = None


def ensure_secure_url(url: str) -> None:
    """Refuse plain HTTP unless the server is on this machine.

    Raises:
        InsecureTransportError: For http:// URLs pointing at a remote host
    """
    parsed = urlparse(url)
    if parsed.scheme == "https":
        return
    if parsed.scheme == "http" and parsed.hostname in LOCAL_HOSTS:
        return
    raise InsecureTransportError(
        f"Refusing to send agent token over insecure {parsed.scheme or 'unknown'} to {parsed.hostname}. Use HTTPS."
    )


class LoungeClient:
    """Authenticated client for the lounge endpoints.

    One request per call with a fixed timeout. The context passed to
    ``checkin`` is already redacted and bounded; it is sent as is.
    """

    def __init__(
        self,
        config: AgentConfig,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            config: Agent configuration holding the server URL and token
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        ensure_secure_url(config.server)
        self.config = config
        self.client = httpx.Client(
            base_url=config.server,
            timeout=timeout,
            headers={"x-agent-key": config.token, "Content-Type": "application/json"},
            transport=transport,
        )

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "LoungeClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, json: Optional[dict] = None) -> ApiResponse:
        host = urlparse(self.config.server).hostname
        try:
            response = self.client.request(method, path, json=json)
        except httpx.TimeoutException as e:
            raise TransportError(f"Request to {host} timed out after {self.client.timeout.read:.0f}s") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Connection to {host} failed: {e}") from e

        logger.debug("api.response", method=method, path=path, status=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise TransportError(
                f"Server returned invalid JSON (HTTP {response.status_code}): {shorten(response.text)}"
            ) from e

        if not isinstance(data, dict):
            raise TransportError(f"Server returned unexpected payload (HTTP {response.status_code})")

        try:
            return ApiResponse.model_validate(data)
        except ValidationError as e:
            raise TransportError(f"Server returned malformed response: {e.error_count()} invalid fields") from e

    def validate_token(self) -> ApiResponse:
        return self._request("GET", "/api/agents/act")

    def get_status(self) -> ApiResponse:
        return self._request("GET", "/api/agents/act")

    def checkin(self, context: Context) -> ApiResponse:
        """Send the context to the lounge and return the agent's composed message."""
        logger.info("api.checkin", size=context.payload_size())
        return self._request("POST", "/api/agents/checkin", json={"context": context.to_dict()})
