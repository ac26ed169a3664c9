"""Session-authenticated HTTP client for the LibreLinkUp backend.

Re-login policy:
- An authenticated call answered with HTTP 400 means the session expired
- The client logs in once with the stored credentials, then re-issues
  the original request once (2 attempts max, no backoff)
- A failing re-login propagates immediately as AuthenticationError
- A second 400 raises SessionExpiredError
- Unauthenticated calls (login itself) never re-login

Timeouts:
- response_header_timeout bounds every single read from the socket
- request_timeout is a deadline for the whole exchange, body included

Transport failures, deadline overruns and 5xx answers raise TransportError;
bodies that are not the expected JSON shape raise DecodeError.
"""

import time
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx
import structlog
from pydantic import BaseModel, ValidationError
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
)

from shared.config import Settings
from shared.exceptions import (
    AuthenticationError,
    DecodeError,
    SessionExpiredError,
    TransportError,
)
from shared.metrics import relogin_total, vendor_api_duration_seconds, vendor_api_requests_total
from librelinkup.adapters.codec import build_headers, encode_body
from librelinkup.adapters.log_transport import RedactingLogTransport, log_response_body
from librelinkup.domain.models import (
    ConnectionsResponse,
    GraphResponse,
    LoginResponse,
    PatientConnection,
)

logger = structlog.get_logger()

LOGIN_ENDPOINT = "/llu/auth/login"
CONNECTIONS_ENDPOINT = "/llu/connections"

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class Session:
    status: int = 0
    auth_token: str = ""


@dataclass(frozen=True)
class RawResponse:
    """Status and fully read, decoded body of one exchange."""

    status_code: int
    content: bytes


class SessionStore:
    """Current session of one client. Replaced wholesale on every login."""

    def __init__(self) -> None:
        self._session = Session()

    @property
    def current(self) -> Session:
        return self._session

    @property
    def token(self) -> str:
        return self._session.auth_token

    def replace(self, session: Session) -> None:
        self._session = session


def _relogin_before_retry(retry_state: RetryCallState) -> None:
    client: LibreLinkUpClient = retry_state.args[0]
    endpoint = retry_state.args[2]
    logger.warning("relogin_triggered", endpoint=endpoint)
    try:
        client.login()
    except AuthenticationError:
        relogin_total.labels(outcome="failed").inc()
        raise
    relogin_total.labels(outcome="succeeded").inc()


class LibreLinkUpClient:
    """Blocking client bound to one regional origin and one set of credentials."""

    def __init__(
        self,
        base_url: str,
        settings: Settings,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._email = settings.email
        self._password = settings.password.get_secret_value()
        self._version = settings.version
        self._product = settings.product
        self.request_timeout = settings.request_timeout
        self.sessions = SessionStore()
        self._http = httpx.Client(
            transport=RedactingLogTransport(transport or httpx.HTTPTransport()),
            timeout=httpx.Timeout(
                settings.request_timeout, read=settings.response_header_timeout
            ),
        )

    def __enter__(self) -> "LibreLinkUpClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._http.close()

    # ── Session ──────────────────────────────────────────────────

    def login(self, email: str | None = None, password: str | None = None) -> Session:
        """Log in and replace the stored session.

        Raises AuthenticationError when the backend reports a nonzero status;
        the stored session is left untouched in that case.
        """
        body = {
            "email": self._email if email is None else email,
            "password": self._password if password is None else password,
        }
        resp = self.call(LOGIN_ENDPOINT, "POST", body, requires_auth=False, target=LoginResponse)

        if resp.status != 0:
            logger.warning("login_rejected", status=resp.status)
            raise AuthenticationError()

        ticket = resp.data.auth_ticket if resp.data else None
        if ticket is None or not ticket.token:
            raise DecodeError(LOGIN_ENDPOINT, "missing authTicket token")

        session = Session(status=resp.status, auth_token=ticket.token)
        self.sessions.replace(session)
        logger.info("login_succeeded", expires=ticket.expires)
        return session

    # ── Endpoints ────────────────────────────────────────────────

    def get_connections(self) -> list[PatientConnection]:
        resp = self.call(CONNECTIONS_ENDPOINT, "GET", target=ConnectionsResponse)
        return resp.data

    def get_graph(self, patient_id: str) -> GraphResponse:
        return self.call(f"{CONNECTIONS_ENDPOINT}/{patient_id}/graph", "GET", target=GraphResponse)

    # ── Transport ────────────────────────────────────────────────

    def call(
        self,
        endpoint: str,
        method: str,
        body: dict[str, Any] | None = None,
        requires_auth: bool = True,
        *,
        target: type[ModelT],
    ) -> ModelT:
        """Send one request and decode the response body into target."""
        if requires_auth:
            response = self._send_authenticated(method, endpoint, body)
        else:
            response = self._send(method, endpoint, body, requires_auth=False)
        return self._decode(endpoint, response, target)

    @retry(
        retry=retry_if_exception_type(SessionExpiredError),
        stop=stop_after_attempt(2),
        before_sleep=_relogin_before_retry,
        reraise=True,
    )
    def _send_authenticated(
        self, method: str, endpoint: str, body: dict[str, Any] | None
    ) -> RawResponse:
        response = self._send(method, endpoint, body, requires_auth=True)
        if response.status_code == 400:
            raise SessionExpiredError(endpoint)
        return response

    def _send(
        self,
        method: str,
        endpoint: str,
        body: dict[str, Any] | None,
        requires_auth: bool,
    ) -> RawResponse:
        token = self.sessions.token if requires_auth else None
        request = self._http.build_request(
            method,
            f"{self.base_url}{endpoint}",
            headers=build_headers(self._version, self._product, token),
            content=encode_body(body),
        )

        try:
            with vendor_api_duration_seconds.labels(endpoint=_metric_endpoint(endpoint)).time():
                response = self._read_before_deadline(request, endpoint)
        except httpx.RequestError as exc:
            logger.warning("vendor_request_failed", endpoint=endpoint, error=str(exc))
            raise TransportError(f"request to {endpoint} failed: {exc}") from exc

        vendor_api_requests_total.labels(
            endpoint=_metric_endpoint(endpoint), status_code=str(response.status_code)
        ).inc()
        log_response_body(endpoint, response.content)

        if response.status_code >= 500:
            raise TransportError(f"HTTP {response.status_code} from {endpoint}")
        return response

    def _read_before_deadline(self, request: httpx.Request, endpoint: str) -> RawResponse:
        """Stream the response, failing once request_timeout has elapsed overall."""
        deadline = time.monotonic() + self.request_timeout
        response = self._http.send(request, stream=True)
        try:
            chunks: list[bytes] = []
            if time.monotonic() <= deadline:
                for chunk in response.iter_bytes():
                    chunks.append(chunk)
                    if time.monotonic() > deadline:
                        break
                else:
                    return RawResponse(response.status_code, b"".join(chunks))
        finally:
            response.close()

        logger.warning("vendor_request_timed_out", endpoint=endpoint, timeout=self.request_timeout)
        raise TransportError(
            f"request to {endpoint} exceeded the {self.request_timeout}s timeout"
        )

    @staticmethod
    def _decode(endpoint: str, response: RawResponse, target: type[ModelT]) -> ModelT:
        try:
            return target.model_validate_json(response.content)
        except ValidationError as exc:
            raise DecodeError(endpoint, f"{exc.error_count()} validation error(s)") from exc


def _metric_endpoint(endpoint: str) -> str:
    """Collapse patient ids out of endpoint labels."""
    if endpoint.startswith(CONNECTIONS_ENDPOINT + "/") and endpoint.endswith("/graph"):
        return CONNECTIONS_ENDPOINT + "/{patient_id}/graph"
    return endpoint
