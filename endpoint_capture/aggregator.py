"""
Aggregator Module

Folds categorized calls into a module -> section -> sub_section tree and
exposes read views of it for the output writer.
"""

from typing import Dict, Iterable, List

from .models import CategorizedCall


class ResultTree:
    """Nested mapping of categorized calls; leaf lists keep capture order."""

    def __init__(self):
        self._tree: Dict[str, Dict[str, Dict[str, List[CategorizedCall]]]] = {}

    def add(self, categorized: CategorizedCall) -> None:
        sections = self._tree.setdefault(categorized.module, {})
        sub_sections = sections.setdefault(categorized.section, {})
        sub_sections.setdefault(categorized.sub_section, []).append(categorized)

    def extend(self, categorized_calls: Iterable[CategorizedCall]) -> None:
        for categorized in categorized_calls:
            self.add(categorized)

    def modules(self) -> List[str]:
        return list(self._tree)

    def sections(self, module: str) -> List[str]:
        return list(self._tree.get(module, {}))

    def sub_sections(self, module: str, section: str) -> List[str]:
        return list(self._tree.get(module, {}).get(section, {}))

    def calls(self, module: str, section: str, sub_section: str) -> List[CategorizedCall]:
        return list(self._tree.get(module, {}).get(section, {}).get(sub_section, []))

    def __len__(self) -> int:
        return sum(
            len(self.calls(module, section, sub_section))
            for module in self.modules()
            for section in self.sections(module)
            for sub_section in self.sub_sections(module, section)
        )

    def __bool__(self) -> bool:
        return bool(self._tree)

    def module_view(self, module: str) -> Dict[str, Dict[str, List[Dict]]]:
        """
        Serializable view of one module.

        Returns:
            {section: {sub_section: [{method, endpoint, sourcePage, timestamp}]}}
        """
        return {
            section: {
                sub_section: [
                    categorized.captured_call.to_record()
                    for categorized in self.calls(module, section, sub_section)
                ]
                for sub_section in self.sub_sections(module, section)
            }
            for section in self.sections(module)
        }

    def to_dict(self) -> Dict[str, Dict]:
        return {module: self.module_view(module) for module in self.modules()}
