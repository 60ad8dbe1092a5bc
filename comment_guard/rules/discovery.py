"""
Locating rule classes on disk.

Every rule lives in a module under one of the category packages
(format, tech_debt, documentation, analysis, accessibility).
Dropping a new module with a concrete BaseRule subclass into one of
those packages is all it takes for the engine to pick it up.
"""

import importlib
import importlib.util
import inspect
import logging
from collections.abc import Iterator
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .base import BaseRule

logger = logging.getLogger(__name__)

PACKAGE_RULES_DIR = Path(__file__).parent


def _rule_classes_in(module: ModuleType) -> Iterator[type["BaseRule"]]:
    """Yield concrete rule classes defined (not imported) by a module."""
    from .base import BaseRule

    for _, candidate in inspect.getmembers(module, inspect.isclass):
        if candidate is BaseRule or not issubclass(candidate, BaseRule):
            continue
        if candidate.__module__ != module.__name__ or inspect.isabstract(candidate):
            continue
        yield candidate


class RuleDiscovery:
    """Collects rule classes from the category directories.

    Layout that is scanned::

        comment_guard/rules/
            format/          TODO formats, spacing, length, capitalization
            tech_debt/       commented code, obvious comments, banned words
            documentation/   JSDoc, TSDoc, file headers, explanations
            analysis/        ratio, aging, stale references, issue tracker
            accessibility/   JSX alt text and screen reader context

    Modules whose name starts with an underscore are skipped.
    """

    RULE_CATEGORIES = ["format", "tech_debt", "documentation", "analysis", "accessibility"]

    def __init__(self, rules_base_path: Path | None = None):
        self.rules_base_path = rules_base_path or PACKAGE_RULES_DIR
        self._found: dict[str, type[BaseRule]] = {}
        self._errors: list[str] = []

    @property
    def _is_builtin_tree(self) -> bool:
        return self.rules_base_path.resolve() == PACKAGE_RULES_DIR.resolve()

    def discover_all(self) -> dict[str, type["BaseRule"]]:
        """Scan every category and return rule_id -> rule class."""
        self._found = {}
        self._errors = []

        for category in self.RULE_CATEGORIES:
            self.discover_category(category)

        if self._errors:
            logger.warning(
                f"{len(self._errors)} rule module(s) failed to load from "
                f"{self.rules_base_path}"
            )
        return self._found

    def discover_category(self, category: str) -> dict[str, type["BaseRule"]]:
        """Scan a single category directory.

        Args:
            category: Directory name under the rules path, e.g. 'format'.

        Returns:
            Mapping of rule_id to rule class for that category only. An
            absent directory yields an empty mapping.
        """
        directory = self.rules_base_path / category
        if not directory.is_dir():
            logger.debug(f"No rules directory for category '{category}' at {directory}")
            return {}

        found: dict[str, type[BaseRule]] = {}
        for path in sorted(directory.glob("*.py")):
            if path.stem.startswith("_"):
                continue
            try:
                module = self._import(category, path)
            except Exception as e:
                problem = f"Failed to import rule module {path}: {e}"
                logger.warning(problem)
                self._errors.append(problem)
                continue
            if module is not None:
                found.update(self._register(module, path))

        self._found.update(found)
        return found

    def _import(self, category: str, path: Path) -> ModuleType | None:
        """Import a rule module by dotted name, or from file when external."""
        dotted = f"comment_guard.rules.{category}.{path.stem}"
        if self._is_builtin_tree:
            return importlib.import_module(dotted)

        spec = importlib.util.spec_from_file_location(dotted, path)
        if spec is None or spec.loader is None:
            logger.warning(f"No import spec for {path}; skipping")
            return None
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module

    def _register(self, module: ModuleType, path: Path) -> dict[str, type["BaseRule"]]:
        registered: dict[str, type[BaseRule]] = {}
        for rule_class in _rule_classes_in(module):
            # rule_id may be set in __init__, so an instance is needed
            try:
                rule_id = rule_class().rule_id
            except Exception as e:
                logger.warning(f"Skipping {rule_class.__name__} in {path}: {e}")
                continue
            registered[rule_id] = rule_class
            logger.debug(f"Registered rule '{rule_id}' ({rule_class.__name__})")
        return registered

    @property
    def discovery_errors(self) -> list[str]:
        """Import failures from the last scan."""
        return list(self._errors)

    @property
    def discovered_rule_ids(self) -> list[str]:
        return list(self._found)

    def get_rule_class(self, rule_id: str) -> type["BaseRule"] | None:
        return self._found.get(rule_id)


def discover_rules(
    rules_path: Path | None = None,
    categories: list[str] | None = None,
) -> dict[str, type["BaseRule"]]:
    """Discover rules in one call.

    Args:
        rules_path: Alternate rules directory; the built-in one by default.
        categories: Restrict the scan to these categories.
    """
    discovery = RuleDiscovery(rules_path)
    if categories is None:
        return discovery.discover_all()

    merged: dict[str, type[BaseRule]] = {}
    for category in categories:
        merged.update(discovery.discover_category(category))
    return merged
