"""Error types raised by the test orchestrator.

Boundary layers (an HTTP API, the CLI) map these onto their own status codes.
"""


class WebTestLabError(Exception):
    """Base class for all orchestrator errors."""


class InvalidRequestError(WebTestLabError):
    """Raised when a test request has a missing or invalid url, type or parameters."""


class RecordNotFoundError(WebTestLabError):
    """Raised when no test record exists for the given id."""

    def __init__(self, test_id: str) -> None:
        super().__init__(f"Test '{test_id}' not found")
        self.test_id = test_id


class ForbiddenError(WebTestLabError):
    """Raised when the caller is neither the record owner nor an administrator."""


class UnsupportedTestTypeError(WebTestLabError):
    """Raised when no runner is registered for a test type."""

    def __init__(self, test_type: str, available: list[str]) -> None:
        super().__init__(
            f"Test type '{test_type}' is not supported. Available types: {available}"
        )
        self.test_type = test_type


class RunnerError(WebTestLabError):
    """Raised when an engine fails to produce a result."""


class NavigationError(RunnerError):
    """Raised when a browser session cannot load the target page."""


class EvaluationError(RunnerError):
    """Raised when in-page script injection or evaluation fails."""


class InternalError(WebTestLabError):
    """Raised on persistence or otherwise unexpected failures."""
