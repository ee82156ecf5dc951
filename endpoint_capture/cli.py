"""
CLI Module - Command Line Interface for the API Endpoint Capture tool

Handles command-line argument parsing, builds the capture run and reports
its outcome.
"""

import argparse
import asyncio
import signal
import sys
import time

from .browser import BrowserSession
from .catalog import NavigationCatalog
from .config import ENV_API_PREFIX, ENV_PASSWORD, ENV_USERNAME, CaptureConfig
from .errors import EndpointCaptureError
from .models import RunSummary
from .runner import build_run


def parse_arguments(argv=None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Capture the backend API endpoints a web frontend calls",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  python main.py Input/erp_urls.json --api-prefix https://erp.example.com/erp-apis
  python main.py urls.json --api-prefix https://api.example.com --output-dir data/run1 -v
  python main.py urls.json --api-prefix https://api.example.com --skip-export-print --headed

Credentials and the API prefix can also be set with ${ENV_USERNAME},
${ENV_PASSWORD} and ${ENV_API_PREFIX}.
        """,
    )

    parser.add_argument("catalog", help="Navigation catalog JSON file")

    parser.add_argument(
        "--api-prefix",
        help="Only requests whose URL starts with this prefix are captured",
    )

    parser.add_argument(
        "--output-dir",
        "-o",
        default="data/api_endpoints",
        help="Directory for the JSON results (default: data/api_endpoints)",
    )

    parser.add_argument(
        "--capture-timeout",
        type=float,
        default=15,
        help="Seconds to keep capturing after each page loads (default: 15)",
    )

    parser.add_argument(
        "--navigation-timeout",
        type=float,
        default=60,
        help="Navigation timeout in seconds (default: 60)",
    )

    parser.add_argument(
        "--retries",
        type=int,
        default=3,
        help="Navigation attempts per page (default: 3)",
    )

    parser.add_argument(
        "--retry-delay",
        type=float,
        default=2,
        help="Delay between navigation attempts in seconds (default: 2)",
    )

    parser.add_argument(
        "--delay",
        type=float,
        default=1,
        help="Delay between pages in seconds (default: 1)",
    )

    parser.add_argument(
        "--interaction-timeout",
        type=float,
        default=5,
        help="Seconds to wait for menus and export/print calls (default: 5)",
    )

    parser.add_argument(
        "--interaction-retries",
        type=int,
        default=2,
        help="Attempts at opening the export menu (default: 2)",
    )

    parser.add_argument(
        "--wait-for-network-idle",
        action="store_true",
        help="Also wait for network idle after export/print clicks",
    )

    parser.add_argument(
        "--skip-export-print",
        action="store_true",
        help="Do not exercise export and print controls",
    )

    parser.add_argument(
        "--login-path",
        default="/",
        help="Path of the login page relative to the catalog base_url (default: /)",
    )

    parser.add_argument("--username", help="Login username")
    parser.add_argument("--password", help="Login password")

    parser.add_argument(
        "--headed", action="store_true", help="Show the browser window"
    )

    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    return parser.parse_args(argv)


async def run_capture(config: CaptureConfig, catalog: NavigationCatalog, summary_holder: list):
    """Open the browser, run the capture and close the browser again."""
    loop = asyncio.get_running_loop()
    task = asyncio.current_task()
    try:
        loop.add_signal_handler(signal.SIGTERM, task.cancel)
    except (NotImplementedError, RuntimeError):
        pass

    async with BrowserSession(headless=config.headless, verbose=config.verbose) as page:
        run = build_run(config, page, catalog)
        summary_holder.append(run.summary)
        return await run.execute()


def print_summary(summary: RunSummary, output_dir: str) -> None:
    print(f"\n{'=' * 60}")
    print("📋 API ENDPOINT CAPTURE SUMMARY")
    print("=" * 60)
    print(f"   • {summary.targets_processed}/{summary.targets_total} pages processed")
    print(f"   • {summary.succeeded} succeeded, {summary.failed} failed")
    print(f"   • {summary.endpoints_captured} unique API endpoints captured")
    print(f"   • {summary.export_print_pages} pages with export/print controls")
    print(f"   • Completed in {summary.duration_seconds:.2f} seconds")
    if summary.error:
        print(f"   • Stopped by: {summary.error}")
    else:
        print(f"   • Results saved to: {output_dir}")


def main(argv=None) -> None:
    """Main entry point for the CLI application."""
    args = parse_arguments(argv)
    start_time = time.time()
    summary_holder = []

    try:
        config = CaptureConfig.from_args(args)
        catalog = NavigationCatalog.load(config.catalog_path, verbose=config.verbose)

        if config.verbose:
            print(f"🚀 Starting API endpoint capture from: {catalog.base_url}")
            print(f"📊 Pages: {len(catalog)}")
            print(f"🎯 API prefix: {config.api_prefix}")
            print(f"💾 Output directory: {config.output_dir}")
            print("-" * 50)

        asyncio.run(run_capture(config, catalog, summary_holder))

    except KeyboardInterrupt:
        print("\n❌ Capture interrupted by user")
        _finish(summary_holder, args, start_time, "Interrupted by user")
        sys.exit(1)
    except asyncio.CancelledError:
        print("\n❌ Capture terminated")
        _finish(summary_holder, args, start_time, "Terminated")
        sys.exit(1)
    except EndpointCaptureError as e:
        print(f"❌ {type(e).__name__} [{e.code}]: {e}")
        _finish(summary_holder, args, start_time, str(e))
        sys.exit(1)
    except Exception as e:
        print(f"❌ Error during capture: {str(e)}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        _finish(summary_holder, args, start_time, str(e))
        sys.exit(1)

    summary = _finish(summary_holder, args, start_time)
    if summary.endpoints_captured == 0:
        print("⚠️  Run completed but no API endpoints were captured")
        sys.exit(1)


def _finish(summary_holder, args, start_time, error=None) -> RunSummary:
    if summary_holder:
        summary = summary_holder[0]
    else:
        summary = RunSummary(duration_seconds=time.time() - start_time)
    if error and not summary.error:
        summary.error = error
    print_summary(summary, args.output_dir)
    return summary


if __name__ == "__main__":
    main()
