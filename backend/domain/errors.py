"""Gateway error hierarchy."""


class GatewayError(Exception):
    """Base class for errors raised inside the gateway."""


class StoreUnavailableError(GatewayError):
    """The key-value store could not complete an operation."""


class MalformedRecordError(GatewayError):
    """A stored value does not have the expected JSON shape."""


class UnknownToolError(GatewayError):
    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class UpstreamError(GatewayError):
    """The SIM-management API returned an error or an unusable response."""

    def __init__(self, message: str, status_code=None):
        super().__init__(message)
        self.status_code = status_code
