"""
Runner Module

Builds every component of a capture run from the configuration and runs the
pipeline: authenticate, visit targets, categorize, aggregate, write.
"""

import time
from typing import Optional

from .aggregator import ResultTree
from .authentication import Authenticator
from .catalog import NavigationCatalog
from .categorizer import Categorizer
from .config import CaptureConfig
from .interaction import ExportPrintDriver
from .models import RunSummary
from .navigator import NavigationOrchestrator
from .network_listener import RequestListener
from .output_formatter import OutputFormatter


class CaptureRun:
    """One end-to-end capture over a navigation catalog."""

    def __init__(
        self,
        catalog: NavigationCatalog,
        authenticator: Authenticator,
        orchestrator: NavigationOrchestrator,
        categorizer: Categorizer,
        formatter: OutputFormatter,
        settings: Optional[dict] = None,
        verbose: bool = False,
    ):
        self.catalog = catalog
        self.authenticator = authenticator
        self.orchestrator = orchestrator
        self.categorizer = categorizer
        self.formatter = formatter
        self.settings = settings or {}
        self.verbose = verbose
        self.tree = ResultTree()
        self.summary = RunSummary(targets_total=len(catalog))

    async def execute(self) -> RunSummary:
        """
        Run the capture.

        Authentication, persistence and browser errors propagate to the
        caller; ``self.summary`` is kept current either way.
        """
        start_time = time.time()
        try:
            if self.verbose:
                print("🔐 Authenticating...")
            await self.authenticator.login()

            if self.verbose:
                print(f"🎯 Capturing API endpoints from {len(self.catalog)} pages...")
            calls = await self.orchestrator.run(self.catalog.targets)

            if self.verbose:
                print(f"\n🏷️  Categorizing {len(calls)} unique API endpoints...")
            self.tree.extend(self.categorizer.categorize_all(calls, self.catalog.targets))

            if not self.tree and self.verbose:
                print("⚠️  No API endpoints were captured")

            self.formatter.write_results(
                self.tree,
                self.orchestrator.failures,
                self.orchestrator.export_print_results,
            )
        except BaseException as e:
            self.summary.error = f"{type(e).__name__}: {e}"
            raise
        finally:
            self._update_summary(time.time() - start_time)

        self.formatter.write_summary(self.summary, self.orchestrator.visits, self.settings)
        return self.summary

    def _update_summary(self, duration: float) -> None:
        visits = self.orchestrator.visits
        self.summary.targets_processed = len(visits)
        self.summary.succeeded = len([visit for visit in visits if visit.succeeded])
        self.summary.failed = len(self.orchestrator.failures)
        self.summary.endpoints_captured = len(self.orchestrator.captured_calls)
        self.summary.export_print_pages = len(self.orchestrator.export_print_results)
        self.summary.duration_seconds = duration


def build_run(config: CaptureConfig, page, catalog: NavigationCatalog) -> CaptureRun:
    """
    Construct every component for a run on ``page``.

    Args:
        config: Validated run configuration
        page: Browser page used for the whole run
        catalog: Loaded navigation catalog

    Returns:
        Ready-to-execute CaptureRun
    """
    timing = config.timing
    listener = RequestListener(page, config.api_prefix, verbose=config.verbose)

    interaction_driver = None
    if config.capture_export_print:
        interaction_driver = ExportPrintDriver(
            page,
            RequestListener(
                page, config.api_prefix, label="export/print", verbose=config.verbose
            ),
            timing=timing,
            retries=config.interaction_retries,
            wait_for_network_idle=config.wait_for_network_idle,
            verbose=config.verbose,
        )

    orchestrator = NavigationOrchestrator(
        page,
        listener,
        timing=timing,
        retry_attempts=config.retry_attempts,
        error_page_patterns=config.error_page_patterns,
        interaction_driver=interaction_driver,
        verbose=config.verbose,
    )
    authenticator = Authenticator(
        page,
        catalog.base_url,
        username=config.username,
        password=config.password,
        login_path=config.login_path,
        dashboard_marker=config.dashboard_marker,
        timing=timing,
        verbose=config.verbose,
    )

    return CaptureRun(
        catalog=catalog,
        authenticator=authenticator,
        orchestrator=orchestrator,
        categorizer=Categorizer(catalog.base_url, config.api_prefix),
        formatter=OutputFormatter(config.output_dir, verbose=config.verbose),
        settings=config.as_settings(),
        verbose=config.verbose,
    )
