"""
Navigation Catalog Module

Loads the JSON catalog of frontend pages and flattens it into navigation
targets. The catalog has a ``base_url`` and a ``modules`` mapping whose
nested keys end in arrays of URL suffixes.
"""

import json
import re
from typing import Dict, Iterable, List, Optional
from urllib.parse import urlparse

from .errors import ConfigurationError
from .models import NavigationTarget


GENERAL_SECTION = "General"

# Collapse runs of slashes except the pair following the scheme colon
DUPLICATE_SLASHES = re.compile(r"([^:/])/{2,}")


def join_url(base_url: str, suffix: str) -> str:
    """
    Join a catalog suffix onto the base URL.

    Args:
        base_url: Frontend base URL from the catalog
        suffix: Page path as written in the catalog

    Returns:
        Absolute URL with duplicate slashes collapsed
    """
    if not suffix.startswith("/") and not base_url.endswith("/"):
        suffix = f"/{suffix}"
    return DUPLICATE_SLASHES.sub(r"\1/", f"{base_url}{suffix}")


def is_valid_page_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class NavigationCatalog:
    """Flattened navigation targets plus the catalog's base URL."""

    def __init__(
        self, base_url: str, targets: List[NavigationTarget], verbose: bool = False
    ):
        self.base_url = base_url.rstrip("/")
        self.verbose = verbose
        self.targets = self._drop_duplicates(targets)

    def __len__(self) -> int:
        return len(self.targets)

    def __iter__(self):
        return iter(self.targets)

    def _drop_duplicates(self, targets: Iterable[NavigationTarget]) -> List[NavigationTarget]:
        unique = []
        seen = set()
        for target in targets:
            if target.url in seen:
                if self.verbose:
                    print(f"  ⚠️  Duplicate catalog URL dropped: {target.url}")
                continue
            seen.add(target.url)
            unique.append(target)
        return unique

    def by_specificity(self) -> List[NavigationTarget]:
        """Targets ordered by descending URL length (most specific first)."""
        return sorted(self.targets, key=lambda target: len(target.url), reverse=True)

    @classmethod
    def from_dict(cls, data: Dict, verbose: bool = False) -> "NavigationCatalog":
        """
        Build a catalog from already-parsed JSON.

        Args:
            data: Mapping with ``base_url`` and ``modules``
            verbose: Enable verbose logging

        Returns:
            NavigationCatalog with targets in document order

        Raises:
            ConfigurationError: If the structure or any URL is malformed
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Navigation catalog must be a JSON object")

        base_url = data.get("base_url")
        modules = data.get("modules")
        if not base_url or modules is None:
            raise ConfigurationError(
                'Invalid catalog structure - missing "base_url" or "modules" property'
            )
        if not isinstance(base_url, str) or not is_valid_page_url(base_url):
            raise ConfigurationError(f"Invalid catalog base_url: {base_url!r}")
        if not isinstance(modules, dict):
            raise ConfigurationError('Catalog "modules" must be an object')

        targets = []
        for module_name, module_data in modules.items():
            targets.extend(_flatten_module(base_url, module_name, module_data))

        return cls(base_url, targets, verbose=verbose)

    @classmethod
    def load(cls, path: str, verbose: bool = False) -> "NavigationCatalog":
        """Read and flatten the catalog file at ``path``."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise ConfigurationError(f"Navigation catalog not found at: {path}")
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Navigation catalog is not valid JSON: {e}")
        except OSError as e:
            raise ConfigurationError(f"Failed to read navigation catalog {path}: {e}")

        catalog = cls.from_dict(data, verbose=verbose)
        if verbose:
            print(f"📥 Loaded {len(catalog)} navigation targets from {path}")
        return catalog


def _flatten_module(
    base_url: str, module_name: str, module_data, keys: Optional[List[str]] = None
) -> List[NavigationTarget]:
    keys = keys or []

    if isinstance(module_data, list):
        if keys:
            section, sub_section = keys[0], keys[-1]
        else:
            section = sub_section = GENERAL_SECTION
        return [
            _make_target(base_url, module_name, section, sub_section, suffix)
            for suffix in module_data
        ]

    if isinstance(module_data, dict):
        targets = []
        for key, value in module_data.items():
            targets.extend(_flatten_module(base_url, module_name, value, keys + [key]))
        return targets

    location = "/".join([module_name] + keys)
    raise ConfigurationError(
        f"Catalog entry {location!r} must be an object or an array of URL suffixes"
    )


def _make_target(
    base_url: str, module: str, section: str, sub_section: str, suffix
) -> NavigationTarget:
    if not isinstance(suffix, str):
        raise ConfigurationError(
            f"URL suffix under {module}/{section} must be a string, got {suffix!r}"
        )
    url = join_url(base_url, suffix)
    if not is_valid_page_url(url):
        raise ConfigurationError(f"Malformed catalog URL under {module}/{section}: {url}")
    return NavigationTarget(module=module, section=section, sub_section=sub_section, url=url)
