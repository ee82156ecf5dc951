"""
Models Module

Immutable records passed between the capture components: captured calls,
navigation targets, categorized calls, failures and per-page results.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CapturedCall:
    """One observed outgoing API request."""

    url: str
    http_method: str
    source_page_url: str
    captured_at: datetime = field(default_factory=utc_now)

    @property
    def key(self) -> str:
        """Identity of the call: method and URL."""
        return make_call_key(self.http_method, self.url)

    def to_record(self) -> Dict:
        return {
            "method": self.http_method,
            "endpoint": self.url,
            "sourcePage": self.source_page_url,
            "timestamp": self.captured_at.isoformat(),
        }


def make_call_key(method: str, url: str) -> str:
    return f"{method}-{url}"


@dataclass(frozen=True)
class NavigationTarget:
    """A frontend page to visit, with its place in the navigation hierarchy."""

    module: str
    section: str
    sub_section: str
    url: str

    @property
    def path(self) -> Tuple[str, str, str]:
        return (self.module, self.section, self.sub_section)


@dataclass(frozen=True)
class CategorizedCall:
    """A captured call assigned to a (module, section, sub_section) leaf."""

    captured_call: CapturedCall
    module: str
    section: str
    sub_section: str

    @property
    def path(self) -> Tuple[str, str, str]:
        return (self.module, self.section, self.sub_section)


@dataclass(frozen=True)
class NavigationFailure:
    """A target whose navigation failed on every attempt."""

    url: str
    reason: str
    timestamp: datetime = field(default_factory=utc_now)

    def to_record(self) -> Dict:
        return {
            "url": self.url,
            "reason": self.reason,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class ExportPrintResult:
    """Calls provoked by the export and print controls of one page."""

    page_url: str
    excel: List[CapturedCall] = field(default_factory=list)
    pdf: List[CapturedCall] = field(default_factory=list)
    print: List[CapturedCall] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.excel) + len(self.pdf) + len(self.print)

    def to_record(self) -> Dict:
        return {
            "excel": [call.to_record() for call in self.excel],
            "pdf": [call.to_record() for call in self.pdf],
            "print": [call.to_record() for call in self.print],
        }


class TargetState(Enum):
    PENDING = "pending"
    NAVIGATING = "navigating"
    CAPTURE_WINDOW = "capture_window"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class PageVisit:
    """What happened while processing one navigation target."""

    target: NavigationTarget
    state: TargetState = TargetState.PENDING
    attempts: int = 0
    title: Optional[str] = None
    calls_captured: int = 0
    error: Optional[str] = None
    export_print: Optional[ExportPrintResult] = None

    @property
    def succeeded(self) -> bool:
        return self.state is TargetState.SUCCEEDED

    def to_record(self) -> Dict:
        return {
            "url": self.target.url,
            "module": self.target.module,
            "section": self.target.section,
            "subSection": self.target.sub_section,
            "title": self.title,
            "state": self.state.value,
            "attempts": self.attempts,
            "calls_captured": self.calls_captured,
            "export_print_calls": (
                self.export_print.total if self.export_print is not None else 0
            ),
            "error": self.error,
        }


@dataclass
class RunSummary:
    """Counters reported at the end of every run, successful or not."""

    targets_total: int = 0
    targets_processed: int = 0
    succeeded: int = 0
    failed: int = 0
    endpoints_captured: int = 0
    export_print_pages: int = 0
    duration_seconds: float = 0.0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.endpoints_captured > 0

    def to_record(self) -> Dict:
        return {
            "targets_total": self.targets_total,
            "targets_processed": self.targets_processed,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "endpoints_captured": self.endpoints_captured,
            "export_print_pages": self.export_print_pages,
            "duration_seconds": round(self.duration_seconds, 2),
            "error": self.error,
        }
