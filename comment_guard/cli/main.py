"""Click-based command line interface for comment-guard."""

import sys
from pathlib import Path

import click

from .. import __version__
from ..analysis.parser import detect_language
from ..analysis.processors import PROCESSORS, Processor, get_processor
from ..guard_logging import LogCategory, get_category_logger, setup_logging
from ..presets import PresetNotFoundError, PresetRegistry, build_default_registry
from ..rules.config import LintConfig, LintConfigLoader, get_default_config
from ..rules.engine import create_rule_engine
from .errors import (
    CLIError,
    ConfigExistsError,
    ConfigurationError,
    LintPathError,
    UnknownPresetError,
    handle_exception,
)
from .output import OutputConfig, OutputManager

logger = get_category_logger(LogCategory.CLI)

# Directories never descended into when expanding a directory argument
SKIP_DIRS = {"node_modules", "dist", "build", "coverage", "__pycache__"}


def _fail(ctx: click.Context, error: Exception) -> None:
    output: OutputManager = ctx.obj["output"]
    message, exit_code = handle_exception(
        error, use_color=output.config.use_color, verbose=output.config.verbose
    )
    click.echo(message, err=True)
    sys.exit(exit_code)


def _resolve_preset(registry: PresetRegistry, name: str) -> LintConfig:
    try:
        return LintConfig.from_preset(name, registry)
    except PresetNotFoundError as e:
        raise UnknownPresetError(name, registry.names()) from e


def collect_files(
    paths: tuple[Path, ...],
    processor: Processor | None = None,
) -> list[Path]:
    """Expand files and directories into the lintable files they hold.

    JS/TS files are always lintable; files the processor handles
    (Vue, Svelte, Markdown) are too when one is given.

    Raises:
        LintPathError: If a path holds no lintable files
    """

    def lintable(path: Path) -> bool:
        if detect_language(path) is not None:
            return True
        return processor is not None and processor.can_handle(path)

    files: list[Path] = []
    for path in paths:
        if path.is_file():
            if not lintable(path):
                raise LintPathError(str(path), "Unsupported file type")
            files.append(path)
            continue

        found = [
            candidate
            for candidate in sorted(path.rglob("*"))
            if candidate.is_file()
            and lintable(candidate)
            and not any(
                part in SKIP_DIRS or part.startswith(".")
                for part in candidate.relative_to(path).parts[:-1]
            )
        ]
        if not found:
            raise LintPathError(str(path))
        files.extend(found)

    # Keep first occurrence order when paths overlap
    return list(dict.fromkeys(files))


def load_lint_config(
    registry: PresetRegistry,
    preset: str | None,
    config_file: Path | None,
) -> LintConfig:
    """Work out the configuration for a lint run.

    An explicit --preset starts from that preset and --config is merged
    over it. Without either, project config files are loaded from the
    current directory, falling back to the recommended preset.
    """
    loader = LintConfigLoader(Path.cwd(), registry)
    base = _resolve_preset(registry, preset) if preset else None

    try:
        if config_file is not None:
            loaded = loader.load_file(config_file)
            if loaded is None:
                raise ConfigurationError(
                    f"Could not read config file: {config_file}", config_file=str(config_file)
                )
        elif base is not None:
            return base
        else:
            loaded = loader.load()
    except PresetNotFoundError as e:
        raise UnknownPresetError(e.name, registry.names()) from e
    except ValueError as e:
        raise ConfigurationError(str(e), config_file=str(config_file or "")) from e

    config = base.merge(loaded) if base is not None else loaded
    if config.processor is not None and config.processor not in PROCESSORS:
        raise ConfigurationError(
            f"Unknown processor: {config.processor}",
            config_file=str(config_file or ""),
            suggestion=f"Use one of: {', '.join(PROCESSORS)}",
        )
    if not config.rules:
        logger.debug("No rules configured, using the recommended preset")
        return get_default_config(registry).merge(config)
    return config


@click.group()
@click.version_option(version=__version__, prog_name="comment-guard")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, no_color: bool) -> None:
    """comment-guard - lint rules for source-code comments."""
    if verbose and quiet:
        raise click.UsageError("--quiet and --verbose are mutually exclusive")

    setup_logging(quiet=quiet, verbose=verbose)
    ctx.ensure_object(dict)
    ctx.obj["output"] = OutputManager(
        OutputConfig.from_flags(verbose=verbose, quiet=quiet, no_color=no_color)
    )
    ctx.obj.setdefault("registry", build_default_registry())


@cli.command()
@click.option("--preset", default="recommended", show_default=True, help="Preset to start from")
@click.option(
    "--flat/--no-flat",
    default=True,
    help="Reference the preset by name, or write its expanded rule map",
)
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
@click.option(
    "--path",
    "project_path",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    help="Project directory",
)
@click.pass_context
def init(ctx: click.Context, preset: str, flat: bool, force: bool, project_path: Path) -> None:
    """Write a starter guard.config.json."""
    output: OutputManager = ctx.obj["output"]
    registry: PresetRegistry = ctx.obj["registry"]

    try:
        resolved = _resolve_preset(registry, preset)
        loader = LintConfigLoader(project_path, registry)
        target = project_path / loader.CONFIG_FILENAME
        if target.exists() and not force:
            raise ConfigExistsError(str(target))

        if flat:
            config = LintConfig(preset=preset)
        else:
            config = LintConfig(rules=resolved.rules, processor=resolved.processor)
        written = loader.save(config, expand=not flat)
    except CLIError as e:
        _fail(ctx, e)
        return

    logger.info(f"Wrote {written} (preset={preset}, flat={flat})")
    output.success(f"Created {written} using the '{preset}' preset")
    if flat:
        chain = " -> ".join(registry.inheritance_chain(preset))
        output.info(f"Inherits: {chain}")


@cli.command()
@click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, path_type=Path),
)
@click.option("--preset", default=None, help="Preset to lint with")
@click.option("--fix", is_flag=True, help="Write autofixes back to disk")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Output format",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Configuration file path",
)
@click.pass_context
def lint(
    ctx: click.Context,
    paths: tuple[Path, ...],
    preset: str | None,
    fix: bool,
    output_format: str,
    config_file: Path | None,
) -> None:
    """Lint JavaScript and TypeScript files, or files the preset's processor handles."""
    output: OutputManager = ctx.obj["output"]
    registry: PresetRegistry = ctx.obj["registry"]

    try:
        config = load_lint_config(registry, preset, config_file)
        files = collect_files(paths, get_processor(config.processor))
    except CLIError as e:
        _fail(ctx, e)
        return

    logger.debug(f"Linting {len(files)} file(s) with {len(config.rules)} configured rule(s)")
    engine = create_rule_engine(config)
    results = engine.lint_files(files, fix=fix)

    if output_format == "json":
        output.lint_json(results)
    else:
        output.lint_report(results)

    if any(result.should_block() for result in results):
        sys.exit(1)


@cli.command()
@click.pass_context
def presets(ctx: click.Context) -> None:
    """List presets and what they extend."""
    output: OutputManager = ctx.obj["output"]
    registry: PresetRegistry = ctx.obj["registry"]

    output.header("Presets")
    for preset in registry:
        parent = registry.parent(preset.name) or "-"
        output.plain(f"{preset.name:<18} extends {parent:<12} {preset.description}", force=True)


@cli.command()
@click.pass_context
def rules(ctx: click.Context) -> None:
    """List available rules."""
    output: OutputManager = ctx.obj["output"]
    engine = create_rule_engine(LintConfig())

    output.header("Rules")
    for rule in sorted(engine.get_all_rules(), key=lambda r: (r.category, r.rule_id)):
        fixable = " (fixable)" if rule.fixable else ""
        output.plain(
            f"{rule.rule_id:<28} {rule.category:<14} {rule.description}{fixable}", force=True
        )


if __name__ == "__main__":
    cli()
