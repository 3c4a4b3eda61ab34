"""Models for incoming test requests and the callers that submit them."""

import re
from collections.abc import Mapping, Sequence
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator

from webtest_lab.models.base import Model

type TestType = Literal["performance", "accessibility", "security", "seo", "browser", "all"]
type BrowserName = Literal["chromium", "firefox", "webkit"]

TEST_TYPES: tuple[TestType, ...] = (
    "performance",
    "accessibility",
    "security",
    "seo",
    "browser",
    "all",
)

URL_PATTERN = re.compile(
    r"^(https?://)?[\da-z.-]+\.[a-z.]{2,6}[/\w .-]*/?$", re.IGNORECASE
)


class Caller(Model):
    """Identity of whoever invokes an orchestrator operation."""

    id: str = Field(..., min_length=1, description="User identifier")
    role: Literal["user", "admin"] = Field(default="user", description="User role")

    @property
    def is_admin(self) -> bool:
        """Whether the caller may act on records owned by other users."""
        return self.role == "admin"


class NoParameters(Model):
    """Parameters for engines that accept none."""


class SecurityParameters(Model):
    """Parameters for the security engine."""

    # Legacy field kept on the record; the scoring API has a single scan mode.
    scan_type: Literal["baseline", "active", "full"] = Field(
        default="baseline", description="Requested scan depth"
    )


class BrowserParameters(Model):
    """Parameters for the browser-compatibility engine."""

    browsers: Sequence[BrowserName] = Field(
        default=("chromium",),
        min_length=1,
        description="Browser engines to render the page with",
    )


PARAMETER_MODELS: Mapping[TestType, type[Model]] = {
    "performance": NoParameters,
    "accessibility": NoParameters,
    "seo": NoParameters,
    "security": SecurityParameters,
    "browser": BrowserParameters,
    "all": NoParameters,
}


def parse_parameters(test_type: TestType, parameters: Mapping[str, Any]) -> Model:
    """Validate free-form parameters against the model for a test type."""
    return PARAMETER_MODELS[test_type].model_validate(dict(parameters))


def ensure_scheme(url: str) -> str:
    """Prepend https:// to URLs submitted without a scheme."""
    if url.lower().startswith(("http://", "https://")):
        return url
    return f"https://{url}"


class TestRequest(Model):
    """A validated request to test a URL."""

    __test__ = False

    owner_id: str = Field(..., min_length=1, description="Owning user identifier")
    url: str = Field(..., description="URL to test")
    test_type: TestType = Field(..., description="Kind of test to run")
    parameters: Mapping[str, Any] = Field(
        default_factory=dict, description="Engine-specific parameters"
    )

    @model_validator(mode="before")
    @classmethod
    def _normalize_parameters(cls, data: Any) -> Any:
        """Validate parameters for the requested type and store their full form."""
        if not isinstance(data, Mapping):
            return data
        test_type = data.get("test_type")
        parameters = data.get("parameters") or {}
        # Field validation reports a bad type or non-mapping parameters.
        if not isinstance(test_type, str) or test_type not in PARAMETER_MODELS:
            return data
        if not isinstance(parameters, Mapping):
            return data
        normalized = parse_parameters(test_type, parameters)
        return {**data, "parameters": normalized.model_dump(mode="json")}

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        value = value.strip()
        if not URL_PATTERN.match(value):
            raise ValueError("Please provide a valid URL")
        return value
