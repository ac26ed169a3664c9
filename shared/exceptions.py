"""Collector error hierarchy.

Every failure of an init or gather step surfaces as a CollectorError
subclass. Like a problem detail, each carries a short title and a
human-readable detail that is reported verbatim to the operator.
"""


class CollectorError(Exception):
    title = "Collector Error"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class ConfigurationError(CollectorError):
    """Unknown region, ambiguous or unknown patient id."""

    title = "Configuration Error"


class AuthenticationError(CollectorError):
    title = "Authentication Error"

    def __init__(
        self,
        detail: str = "invalid login credentials. Please check your username/email and password",
    ):
        super().__init__(detail)


class SessionExpiredError(AuthenticationError):
    """The backend answered an authenticated call with HTTP 400."""

    title = "Session Expired"

    def __init__(self, endpoint: str):
        self.endpoint = endpoint
        super().__init__(f"session rejected by the backend for {endpoint}")


class TransportError(CollectorError):
    title = "Transport Error"


class DecodeError(CollectorError):
    title = "Decode Error"

    def __init__(self, endpoint: str, reason: str):
        self.endpoint = endpoint
        super().__init__(f"unexpected response from {endpoint}: {reason}")


class UpstreamEmptyError(CollectorError):
    title = "No Connection"

    def __init__(self):
        super().__init__("no LibreLinkUp connection found")
