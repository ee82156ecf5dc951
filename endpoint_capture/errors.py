"""
Errors Module

Exception taxonomy for the capture run. Configuration, authentication,
browser and file system errors end the run; navigation and interaction
errors are local to one target or one UI step and never do.
"""


class EndpointCaptureError(Exception):
    """Base class for all errors raised by the capture tool."""

    code = "CAPTURE_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ConfigurationError(EndpointCaptureError):
    """Bad or missing settings or navigation catalog."""

    code = "CONFIG_ERROR"


class AuthenticationError(EndpointCaptureError):
    """Login to the frontend failed."""

    code = "AUTHENTICATION_ERROR"


class BrowserError(EndpointCaptureError):
    """The browser session could not be started."""

    code = "BROWSER_ERROR"


class NavigationError(EndpointCaptureError):
    """A single navigation attempt failed (retried by the orchestrator)."""

    code = "NAVIGATION_ERROR"


class InteractionError(EndpointCaptureError):
    """A UI interaction step failed (degrades captured results only)."""

    code = "INTERACTION_ERROR"


class FileSystemError(EndpointCaptureError):
    """Reading or writing an artifact failed."""

    code = "FILE_SYSTEM_ERROR"
