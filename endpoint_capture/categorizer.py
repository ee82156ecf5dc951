"""
Categorizer Module

Assigns each captured call a (module, section, sub_section) place in the
navigation hierarchy. The most specific catalog entry whose URL prefixes the
call's source page wins; otherwise the source page path is used.
"""

from typing import Iterable, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

from .models import CapturedCall, CategorizedCall, NavigationTarget


UNCATEGORIZED = "Uncategorized"

MODULE_NAMES = {
    "erp": "General_Settings",
    "accounting": "Accounting",
    "finance": "Finance",
    "purchase": "Purchase",
    "sales": "Sales",
    "inventory": "Inventory",
}

SECTION_NAMES = {
    "masterdata": "Master_data",
    "admin": "Adminstration",
}

# Endpoints called from many pages that belong to the dashboard, checked in order
DASHBOARD_SIGNATURES = (
    ("SideMenu", "SideMenu"),
    ("CurrentUserInfo", "CurrentUserInfo"),
    ("workflows/GetRequestsCount", "Workflows"),
)


def capitalize_first(value: str) -> str:
    return value[:1].upper() + value[1:]


class Categorizer:
    """Maps captured calls onto the navigation catalog."""

    def __init__(self, frontend_base_url: str, api_prefix: str):
        self.frontend_base_url = frontend_base_url.rstrip("/")
        self.api_prefix = api_prefix

    def categorize(
        self, call: CapturedCall, catalog: Sequence[NavigationTarget]
    ) -> CategorizedCall:
        """
        Categorize one call.

        Args:
            call: The captured call
            catalog: Navigation targets sorted by descending URL length

        Returns:
            CategorizedCall carrying the matched or inferred hierarchy path
        """
        target = self.match_target(call.source_page_url, catalog)
        if target is not None:
            module, section, sub_section = target.path
        else:
            module, section, sub_section = self.infer_path(call)

        return CategorizedCall(
            captured_call=call, module=module, section=section, sub_section=sub_section
        )

    def categorize_all(
        self, calls: Iterable[CapturedCall], catalog: Iterable[NavigationTarget]
    ) -> List[CategorizedCall]:
        ordered = sorted(catalog, key=lambda target: len(target.url), reverse=True)
        return [self.categorize(call, ordered) for call in calls]

    def match_target(self, source_page_url: str, catalog: Sequence[NavigationTarget]):
        for target in catalog:
            if source_page_url.startswith(target.url):
                return target
        return None

    def infer_path(self, call: CapturedCall) -> Tuple[str, str, str]:
        """Guess the hierarchy path from the source page path and the API URL."""
        segments = self._page_segments(call.source_page_url)

        module = normalize_module_name(segments[0]) if segments else UNCATEGORIZED
        if len(segments) > 1:
            section = normalize_section_name(segments[1])
            sub_section = capitalize_first(segments[2]) if len(segments) > 2 else "General"
        else:
            section, sub_section = "Dashboard", "General"

        api_path = self._api_path(call.url)
        for signature, label in DASHBOARD_SIGNATURES:
            if signature in api_path:
                return module, "Dashboard", label

        return module, section, sub_section

    def _relative_to_base(self, url: str) -> Optional[str]:
        base = self.frontend_base_url
        if not base or not url.startswith(base):
            return None
        relative = url[len(base):]
        # The base must end on a boundary, not inside a longer host name
        if relative[:1] not in ("", "/", "?", "#"):
            return None
        return relative

    def _page_segments(self, source_page_url: str) -> List[str]:
        relative = self._relative_to_base(source_page_url)
        if relative is None:
            relative = urlparse(source_page_url).path
        relative = relative.split("?")[0].split("#")[0]
        return [part for part in relative.split("/") if part]

    def _api_path(self, url: str) -> str:
        if url.startswith(self.api_prefix):
            url = url[len(self.api_prefix):]
        return url.split("?")[0]


def normalize_module_name(segment: str) -> str:
    return MODULE_NAMES.get(segment.lower(), capitalize_first(segment))


def normalize_section_name(segment: str) -> str:
    return SECTION_NAMES.get(segment.lower(), capitalize_first(segment))
