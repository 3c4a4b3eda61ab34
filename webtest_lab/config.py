"""Configuration for the browser sessions and the scanning engines."""

from collections.abc import Sequence
from typing import Literal

from pydantic import BaseModel, Field

# Flags for hosts where the browser sandbox cannot start (containers, CI).
NO_SANDBOX_ARGS: tuple[str, ...] = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
)


class BrowserConfig(BaseModel):
    """Configuration for headless browser sessions."""

    headless: bool = True
    no_sandbox: bool = False
    launch_args: Sequence[str] = ()
    navigation_timeout_ms: float = Field(default=30_000, gt=0)
    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = (
        "networkidle"
    )
    viewport_width: int = Field(default=1280, gt=0)
    viewport_height: int = Field(default=800, gt=0)

    def chromium_args(self) -> list[str]:
        """Launch arguments, including the sandbox flags when requested."""
        args = list(self.launch_args)
        if self.no_sandbox:
            args.extend(flag for flag in NO_SANDBOX_ARGS if flag not in args)
        return args


class AxeConfig(BaseModel):
    """Configuration for the axe-core accessibility rule engine."""

    script_url: str = "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.10.2/axe.min.js"
    wcag_tags: Sequence[str] = ("wcag2a", "wcag2aa", "wcag21a", "wcag21aa")


class LighthouseConfig(BaseModel):
    """Configuration for the Lighthouse CLI."""

    binary: str = "lighthouse"
    preset: Literal["desktop", "perf", "experimental"] | None = "desktop"
    timeout: float = Field(default=120, gt=0, description="Seconds per audit")
    extra_flags: Sequence[str] = ()


class ObservatoryConfig(BaseModel):
    """Configuration for the MDN HTTP Observatory API."""

    api_base_url: str = "https://observatory-api.mdn.mozilla.net"
    timeout: float = Field(default=60, gt=0, description="Seconds per scan")


class WebTestLabConfig(BaseModel):
    """Top-level configuration."""

    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    axe: AxeConfig = Field(default_factory=AxeConfig)
    lighthouse: LighthouseConfig = Field(default_factory=LighthouseConfig)
    observatory: ObservatoryConfig = Field(default_factory=ObservatoryConfig)
