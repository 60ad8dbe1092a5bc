"""
Running comment rules over source files.

Each file is parsed once and walked once. Node-type visitors from all
active rules fire during the walk; "program:exit" handlers run after it
and may be coroutines. Batches of files are spread over a thread pool,
one tree-sitter parser per call.
"""

import asyncio
import inspect
import logging
import time
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..analysis.parser import SourceParser, detect_language
from ..analysis.processors import Processor, get_processor
from ..analysis.source import SourceFile
from .base import BaseRule, RuleConfigurationError, RuleContext, Severity, Violation
from .config import LintConfig, LintConfigLoader, RuleSetting
from .discovery import RuleDiscovery
from .fix import MAX_FIX_PASSES, apply_fixes

logger = logging.getLogger(__name__)

PROGRAM_EXIT = "program:exit"


@dataclass
class RuleError:
    """A rule that raised while linting a file."""

    rule_id: str
    error_message: str
    exception_type: str | None = None

    def to_dict(self) -> dict:
        return {
            "ruleId": self.rule_id,
            "errorMessage": self.error_message,
            "exceptionType": self.exception_type,
        }


@dataclass
class LintResult:
    """Result of linting one file."""

    file_path: str | None = None
    violations: list[Violation] = field(default_factory=list)
    errors: list[RuleError] = field(default_factory=list)
    execution_time_ms: float = 0.0
    rules_executed: int = 0
    output: str | None = None  # Fixed text when fixes were applied

    def should_block(self, severity_threshold: Severity = Severity.ERROR) -> bool:
        """Check if any violations meet or exceed the threshold."""
        return any(v.severity >= severity_threshold for v in self.violations)

    @property
    def error_count(self) -> int:
        return sum(1 for v in self.violations if v.severity == Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for v in self.violations if v.severity == Severity.WARN)

    @property
    def fixable_count(self) -> int:
        return sum(1 for v in self.violations if v.fix is not None)

    def get_violations_by_rule(self, rule_id: str) -> list[Violation]:
        """Get violations filtered by rule ID."""
        return [v for v in self.violations if v.rule_id == rule_id]

    def get_violations_by_message(self, message_id: str) -> list[Violation]:
        """Get violations filtered by message ID."""
        return [v for v in self.violations if v.message_id == message_id]

    def to_dict(self) -> dict:
        """camelCase form used by --format json."""
        return {
            "filePath": self.file_path,
            "violations": [v.to_dict() for v in self.violations],
            "errors": [e.to_dict() for e in self.errors],
            "executionTimeMs": self.execution_time_ms,
            "rulesExecuted": self.rules_executed,
            "errorCount": self.error_count,
            "warningCount": self.warning_count,
        }


@dataclass
class _ActiveRule:
    rule: BaseRule
    context: RuleContext
    visitors: dict[str, Any]
    failed: bool = False


class RuleEngine:
    """Runs registered rules over parsed JavaScript and TypeScript sources.

    Rules are keyed by rule_id; which of them run, and with what severity
    and options, comes from the LintConfig (or a per-call settings map).

    Example usage:
        engine = create_rule_engine(LintConfig.from_preset("strict", registry))
        result = engine.lint_text("// TODO: tidy\\nlet x = 1;")
    """

    def __init__(
        self,
        config: LintConfig | None = None,
        config_loader: LintConfigLoader | None = None,
    ):
        if config is None:
            config = config_loader.load() if config_loader else LintConfig()
        self.config = config
        self._rules: dict[str, BaseRule] = {}

    def load_rules(self, discovery: RuleDiscovery | None = None) -> int:
        """Instantiate and register every discovered rule class.

        Returns:
            How many rules were registered.
        """
        discovered = (discovery or RuleDiscovery()).discover_all()
        count = 0
        for rule_id, rule_class in discovered.items():
            try:
                rule = rule_class()
            except Exception as e:
                logger.warning(f"Skipping rule {rule_id}, constructor failed: {e}")
                continue
            self.register(rule)
            count += 1
        logger.debug(f"{count} of {len(discovered)} discovered rules registered")
        return count

    def register(self, rule: BaseRule) -> None:
        """Add a rule, replacing any rule already registered under its id."""
        self._rules[rule.rule_id] = rule
        logger.debug(f"Rule '{rule.rule_id}' registered ({rule.category})")

    def unregister(self, rule_id: str) -> bool:
        return self._rules.pop(rule_id, None) is not None

    def get_rule(self, rule_id: str) -> BaseRule | None:
        return self._rules.get(rule_id)

    def get_rules_by_category(self, category: str) -> list[BaseRule]:
        return [rule for rule in self._rules.values() if rule.category == category]

    def get_all_rules(self) -> list[BaseRule]:
        return list(self._rules.values())

    # Linting

    def _select_rules(
        self,
        source: SourceFile,
        settings: Mapping[str, RuleSetting] | None,
    ) -> list[tuple[BaseRule, RuleSetting]]:
        effective = settings if settings is not None else self.config.rules
        selected = []
        for rule_id, setting in effective.items():
            if not setting.enabled:
                continue
            rule = self._rules.get(rule_id)
            if rule is None:
                logger.debug(f"No rule registered for configured id {rule_id}")
                continue
            supported = rule.supported_languages
            if supported is not None and source.language not in supported:
                continue
            selected.append((rule, setting))
        return selected

    def _record_failure(
        self, active: _ActiveRule, error: Exception, errors: list[RuleError]
    ) -> None:
        active.failed = True
        errors.append(
            RuleError(
                rule_id=active.rule.rule_id,
                error_message=str(error),
                exception_type=type(error).__name__,
            )
        )
        logger.warning(f"Rule {active.rule.rule_id} failed: {error}")

    def _create(
        self,
        rule: BaseRule,
        setting: RuleSetting,
        source: SourceFile,
        errors: list[RuleError],
    ) -> _ActiveRule:
        severity = rule.get_severity(setting)
        context = RuleContext(rule, source, severity=severity)
        active = _ActiveRule(rule=rule, context=context, visitors={})

        try:
            context.options = rule.parse_options(setting.options)
            active.visitors = rule.create(context) or {}
        except ValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'options'}: {err['msg']}"
                for err in e.errors()
            )
            context.report("invalidOptions", data={"rule": rule.rule_id, "errors": details})
        except RuleConfigurationError as e:
            context.report(e.message_id, data=e.data)
        except Exception as e:
            self._record_failure(active, e, errors)
        return active

    async def lint_source_async(
        self,
        source: SourceFile,
        settings: Mapping[str, RuleSetting] | None = None,
    ) -> LintResult:
        """Run the configured rules over a parsed source.

        Visitors run during a single pre-order traversal; "program:exit"
        handlers run afterwards and are awaited when they are coroutines.

        Args:
            source: Parsed source file
            settings: Optional rule settings overriding the engine config

        Returns:
            LintResult with violations sorted by position
        """
        start_time = time.time()
        errors: list[RuleError] = []

        active_rules = [
            self._create(rule, setting, source, errors)
            for rule, setting in self._select_rules(source, settings)
        ]

        listeners: dict[str, list[_ActiveRule]] = {}
        for active in active_rules:
            for node_type in active.visitors:
                listeners.setdefault(node_type, []).append(active)

        for node in source.walk():
            # Keyword tokens share type names with declarations ("function", "class")
            if not node.is_named:
                continue
            for active in listeners.get(node.type, ()):
                if active.failed:
                    continue
                try:
                    active.visitors[node.type](node)
                except Exception as e:
                    self._record_failure(active, e, errors)
            if errors and not self.config.continue_on_error:
                break

        for active in listeners.get(PROGRAM_EXIT, ()):
            if active.failed or (errors and not self.config.continue_on_error):
                continue
            handler = active.visitors[PROGRAM_EXIT]
            try:
                outcome = handler(source.root)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as e:
                self._record_failure(active, e, errors)

        violations = [v for active in active_rules for v in active.context.violations]
        violations.sort(key=lambda v: (v.loc.start_line, v.loc.start_column, v.rule_id))

        return LintResult(
            file_path=str(source.file_path) if source.file_path else None,
            violations=violations,
            errors=errors,
            execution_time_ms=(time.time() - start_time) * 1000,
            rules_executed=len(active_rules),
        )

    def lint_source(
        self,
        source: SourceFile,
        settings: Mapping[str, RuleSetting] | None = None,
    ) -> LintResult:
        """Synchronous wrapper around lint_source_async."""
        return asyncio.run(self.lint_source_async(source, settings))

    def lint_text(
        self,
        text: str,
        language: str = "javascript",
        file_path: Path | None = None,
        settings: Mapping[str, RuleSetting] | None = None,
        parser: SourceParser | None = None,
    ) -> LintResult:
        """Parse and lint source text."""
        parser = parser or SourceParser()
        source = parser.parse(text, language=language, file_path=file_path)
        return self.lint_source(source, settings)

    def fix_text(
        self,
        text: str,
        language: str = "javascript",
        file_path: Path | None = None,
        settings: Mapping[str, RuleSetting] | None = None,
    ) -> LintResult:
        """Lint and apply fixes repeatedly until the text is stable.

        Returns:
            LintResult for the final text, with `output` set to it
        """
        lint = partial(
            self.lint_text,
            language=language,
            file_path=file_path,
            settings=settings,
            parser=SourceParser(),
        )
        return self._fix_until_stable(text, lint)

    def _fix_until_stable(self, text: str, lint: Callable[[str], LintResult]) -> LintResult:
        output = text
        result = lint(output)
        for _ in range(MAX_FIX_PASSES):
            fixed = apply_fixes(output, result.violations)
            if not fixed.changed:
                break
            output = fixed.output
            result = lint(output)
        result.output = output
        return result

    def lint_processed(
        self,
        text: str,
        processor: Processor,
        file_path: Path | None = None,
        settings: Mapping[str, RuleSetting] | None = None,
        parser: SourceParser | None = None,
    ) -> LintResult:
        """Lint each block a processor extracts and merge the findings.

        Positions and messages are rewritten by the block that produced
        them, so the result reads as if the whole file had been linted.
        """
        parser = parser or SourceParser()
        merged = LintResult(file_path=str(file_path) if file_path else None)
        for block in processor.blocks(text):
            result = self.lint_text(block.text, block.language, file_path, settings, parser)
            merged.violations.extend(block.adopt(v) for v in result.violations)
            merged.errors.extend(result.errors)
            merged.execution_time_ms += result.execution_time_ms
            merged.rules_executed = max(merged.rules_executed, result.rules_executed)
        merged.violations.sort(key=lambda v: (v.loc.start_line, v.loc.start_column, v.rule_id))
        return merged

    def processor_for(self, file_path: Path) -> Processor | None:
        """The configured processor, if it handles this file."""
        processor = get_processor(self.config.processor)
        if processor is None or not processor.can_handle(file_path):
            return None
        return processor

    def lint_file(self, file_path: Path, fix: bool = False) -> LintResult:
        """Lint a file on disk, optionally writing fixes back.

        Files without a JS/TS grammar go through the configured processor.

        Raises:
            ValueError: If neither a grammar nor the processor handles the file
        """
        language = detect_language(file_path)
        processor = self.processor_for(file_path) if language is None else None
        if language is None and processor is None:
            raise ValueError(f"Unsupported file type: {file_path}")
        text = file_path.read_text(encoding="utf-8")

        if processor is not None:
            lint = partial(
                self.lint_processed, processor=processor, file_path=file_path, parser=SourceParser()
            )
        else:
            lint = partial(self.lint_text, language=language, file_path=file_path)

        if not fix:
            return lint(text)

        result = self._fix_until_stable(text, lint)
        if result.output is not None and result.output != text:
            file_path.write_text(result.output, encoding="utf-8")
            logger.info(f"Applied fixes to {file_path}")
        return result

    def lint_files(
        self,
        file_paths: list[Path],
        fix: bool = False,
        parallel: bool | None = None,
    ) -> list[LintResult]:
        """Lint many files, in parallel when configured.

        Args:
            file_paths: Files to lint
            fix: Write autofixes back to disk
            parallel: True or False to force a mode; None follows the config

        Returns:
            LintResults in the order of file_paths
        """
        use_parallel = (
            parallel if parallel is not None else self.config.performance.parallel_execution
        )
        if not use_parallel or len(file_paths) < 2:
            return [self.lint_file(path, fix=fix) for path in file_paths]

        workers = min(self.config.performance.max_parallel_workers, len(file_paths))
        by_path: dict[Path, LintResult] = {}
        with ThreadPoolExecutor(max_workers=workers) as pool:
            pending = {pool.submit(self.lint_file, path, fix): path for path in file_paths}
            for done in as_completed(pending):
                by_path[pending[done]] = done.result()
        return [by_path[path] for path in file_paths]


def create_rule_engine(
    config: LintConfig | None = None,
    project_path: Path | None = None,
    registry: Any = None,
    auto_load: bool = True,
) -> RuleEngine:
    """Build an engine with the built-in rules loaded.

    Without an explicit config, one is loaded from project_path (if given)
    using registry to resolve presets.
    """
    loader = LintConfigLoader(project_path, registry) if config is None and project_path else None
    engine = RuleEngine(config=config, config_loader=loader)
    if auto_load:
        engine.load_rules()
    return engine
