"""
Configuration Module

Run settings for the capture tool. Values come from the command line, with
credentials and the API prefix also readable from the environment.
"""

import os
from dataclasses import dataclass, field, fields
from typing import Optional, Tuple

from .errors import ConfigurationError


ENV_USERNAME = "API_CAPTURE_USERNAME"
ENV_PASSWORD = "API_CAPTURE_PASSWORD"
ENV_API_PREFIX = "API_CAPTURE_PREFIX"

DEFAULT_ERROR_PAGE_PATTERNS = ("/error", "/404", "/not-found", "/500", "/unauthorized")


@dataclass(frozen=True)
class TimingPolicy:
    """
    Every wait the capture run performs, in seconds.

    Attributes:
        navigation_timeout: Timeout handed to the browser's own navigation call
        race_timeout: Outer timer raced against navigation; larger than
            navigation_timeout so a hung navigation call still resolves
        capture_window: How long the listener stays armed after a page loads
        interaction_window: Capture window after each export/print click
        interaction_timeout: Upper bound for waiting on a menu to appear
        settle_delay: Pause after clicks and before probing for controls
        retry_delay: Fixed backoff between navigation attempts
        target_pause: Pause between targets
        cleanup_delay: Pause after each cosmetic menu-closing action
    """

    navigation_timeout: float = 60.0
    race_timeout: float = 65.0
    capture_window: float = 15.0
    interaction_window: float = 5.0
    interaction_timeout: float = 5.0
    settle_delay: float = 1.0
    retry_delay: float = 2.0
    target_pause: float = 1.0
    cleanup_delay: float = 0.5

    @classmethod
    def instant(cls) -> "TimingPolicy":
        """Zero-delay policy for tests and dry runs."""
        return cls(
            navigation_timeout=1.0,
            race_timeout=1.0,
            capture_window=0,
            interaction_window=0,
            interaction_timeout=0,
            settle_delay=0,
            retry_delay=0,
            target_pause=0,
            cleanup_delay=0,
        )

    def validate(self) -> None:
        for item in fields(self):
            if getattr(self, item.name) < 0:
                raise ConfigurationError(f"{item.name} must not be negative")
        if self.navigation_timeout <= 0:
            raise ConfigurationError("navigation_timeout must be positive")
        if self.race_timeout < self.navigation_timeout:
            raise ConfigurationError(
                "race_timeout must be at least as large as navigation_timeout"
            )


@dataclass
class CaptureConfig:
    """Settings for one capture run."""

    catalog_path: str
    api_prefix: str
    output_dir: str = "data/api_endpoints"
    username: Optional[str] = None
    password: Optional[str] = None
    login_path: str = "/"
    dashboard_marker: str = "/dashboard"
    retry_attempts: int = 3
    interaction_retries: int = 2
    wait_for_network_idle: bool = False
    capture_export_print: bool = True
    headless: bool = True
    verbose: bool = False
    error_page_patterns: Tuple[str, ...] = DEFAULT_ERROR_PAGE_PATTERNS
    timing: TimingPolicy = field(default_factory=TimingPolicy)

    @classmethod
    def from_args(cls, args) -> "CaptureConfig":
        """
        Build a configuration from parsed command line arguments.

        Args:
            args: argparse namespace produced by cli.parse_arguments

        Returns:
            Validated CaptureConfig
        """
        timing = TimingPolicy(
            navigation_timeout=args.navigation_timeout,
            race_timeout=args.navigation_timeout + 5,
            capture_window=args.capture_timeout,
            interaction_window=args.interaction_timeout,
            interaction_timeout=args.interaction_timeout,
            retry_delay=args.retry_delay,
            target_pause=args.delay,
        )
        config = cls(
            catalog_path=args.catalog,
            api_prefix=args.api_prefix or os.environ.get(ENV_API_PREFIX, ""),
            output_dir=args.output_dir,
            username=args.username or os.environ.get(ENV_USERNAME),
            password=args.password or os.environ.get(ENV_PASSWORD),
            login_path=args.login_path,
            retry_attempts=args.retries,
            interaction_retries=args.interaction_retries,
            wait_for_network_idle=args.wait_for_network_idle,
            capture_export_print=not args.skip_export_print,
            headless=not args.headed,
            verbose=args.verbose,
            timing=timing,
        )
        config.validate()
        return config

    def validate(self) -> None:
        if not self.api_prefix:
            raise ConfigurationError(
                f"An API prefix is required (--api-prefix or ${ENV_API_PREFIX})"
            )
        if not self.api_prefix.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"API prefix must be an http(s) URL, got: {self.api_prefix}"
            )
        if not self.catalog_path:
            raise ConfigurationError("A navigation catalog path is required")
        if self.retry_attempts < 1:
            raise ConfigurationError("retries must be at least 1")
        if self.interaction_retries < 1:
            raise ConfigurationError("interaction retries must be at least 1")
        self.timing.validate()

    def as_settings(self) -> dict:
        """Settings echoed into the run summary artifact (no credentials)."""
        return {
            "catalog_path": self.catalog_path,
            "api_prefix": self.api_prefix,
            "output_dir": self.output_dir,
            "login_path": self.login_path,
            "retry_attempts": self.retry_attempts,
            "interaction_retries": self.interaction_retries,
            "wait_for_network_idle": self.wait_for_network_idle,
            "capture_export_print": self.capture_export_print,
            "headless": self.headless,
            "navigation_timeout": self.timing.navigation_timeout,
            "capture_window": self.timing.capture_window,
            "interaction_window": self.timing.interaction_window,
        }
