"""Command-line interface for lau."""

import logging
import signal
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import NoReturn

import click
from rich.logging import RichHandler

from lau import __version__
from lau.config.loader import (
    get_home_config_path,
    get_local_config_path,
    home_config_exists,
    load_config,
    load_yaml_config,
    local_config_exists,
    resolve_corpus_root,
    save_config,
)
from lau.config.schema import LauConfig
from lau.console import console, err_console
from lau.deploy import (
    CONFLICT_POLICIES,
    DeploymentEngine,
    DeploymentResult,
    ResolutionRequest,
)
from lau.errors import DeploymentIOError, LauError
from lau.providers import (
    DEFAULT_PROVIDER,
    PROVIDERS,
    MarkerDetector,
    get_provider_by_key,
)
from lau.templates import Template, TemplateRegistry, ValidationWarning

logger = logging.getLogger(__name__)

REASON_LABELS = {
    "explicit": "requested with --provider",
    "detected": "detected from project markers or config",
    "default": "no provider match, using default",
}


def _setup_logging(verbose: bool) -> None:
    """Send lau log records to stderr through rich."""
    package_logger = logging.getLogger("lau")
    for handler in list(package_logger.handlers):
        if isinstance(handler, RichHandler):
            package_logger.removeHandler(handler)
    package_logger.addHandler(
        RichHandler(console=err_console, show_time=False, show_path=False)
    )
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _fail(error: LauError) -> NoReturn:
    """Report a lau error and exit with its code."""
    console.print(f"[red]Error:[/red] {error}")
    raise SystemExit(error.exit_code)


def _get_registry(ctx: click.Context) -> TemplateRegistry:
    config: LauConfig = ctx.obj["config"]
    root = resolve_corpus_root(config, ctx.obj.get("corpus"))
    logger.debug("Using corpus %s", root)
    return TemplateRegistry(root)


def _normalize_provider(name: str) -> str:
    """Map a known provider name to its key; custom names keep their case."""
    known = get_provider_by_key(name)
    if known is not None:
        return known.key
    if name.lower() == DEFAULT_PROVIDER:
        return DEFAULT_PROVIDER
    return name


def _print_warnings(warnings: list[ValidationWarning]) -> None:
    for warning in warnings:
        console.print(f"[yellow]Warning:[/yellow] skipped {warning}")


@contextmanager
def _cancel_on_signal(engine: DeploymentEngine) -> Iterator[None]:
    """Route SIGINT/SIGTERM to engine.cancel() for the duration."""

    def handler(signum: int, _frame: object) -> None:
        logger.warning("Received signal %d, stopping deployment", signum)
        engine.cancel()

    previous = {
        sig: signal.signal(sig, handler) for sig in (signal.SIGINT, signal.SIGTERM)
    }
    try:
        yield
    finally:
        for sig, old in previous.items():
            signal.signal(sig, old)


def version_callback(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    """Print version and exit."""
    if not value or ctx.resilient_parsing:
        return
    console.print(f"lau [bold cyan]{__version__}[/bold cyan]")
    ctx.exit()


@click.group(invoke_without_command=True)
@click.option(
    "--version",
    is_flag=True,
    callback=version_callback,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
@click.option(
    "--corpus",
    type=click.Path(file_okay=False, path_type=Path),
    help="Template corpus root (overrides config).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, corpus: Path | None, verbose: bool) -> None:
    """lau - deploy persona templates into your project."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config"] = load_config()
    ctx.obj["corpus"] = corpus
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.command("list")
@click.option("--verbose", "-v", is_flag=True, help="Show providers per template.")
@click.pass_context
def list_templates(ctx: click.Context, verbose: bool) -> None:
    """List available templates with their descriptions."""
    registry = _get_registry(ctx)
    try:
        listing = registry.list_templates()
        templates = list(listing)
    except LauError as e:
        _fail(e)

    if not templates:
        console.print("[yellow]No templates found.[/yellow]")
        console.print(f"[dim]Corpus: {registry.corpus_root}[/dim]")
    else:
        console.print("[bold]Available Templates:[/bold]\n")
        for template in templates:
            console.print(f"  [cyan]{template.identifier}[/cyan]")
            if template.description:
                console.print(f"    {template.description}")
            if verbose:
                providers = ", ".join(sorted(registry.providers_of(template)))
                console.print(f"    [dim]Providers: {providers}[/dim]")

    if listing.warnings:
        console.print()
        _print_warnings(listing.warnings)


def _print_template(template: Template, registry: TemplateRegistry) -> None:
    console.print(f"[bold cyan]{template.identifier}[/bold cyan]")
    if template.description:
        console.print(f"  {template.description}")
    console.print(f"  [dim]Source: {template.source}[/dim]")
    console.print("\n[bold]Providers:[/bold]")
    for key in sorted(registry.providers_of(template)):
        subtree = template.subtree(key)
        if subtree is None:
            continue
        console.print(f"  [green]{key}[/green] ({len(subtree.files)} files)")
        for relative_path in subtree.relative_paths:
            console.print(f"    [dim]{relative_path}[/dim]")


@main.command()
@click.argument("template_name")
@click.pass_context
def info(ctx: click.Context, template_name: str) -> None:
    """Show a template's description, source and provider files."""
    registry = _get_registry(ctx)
    try:
        template = registry.resolve(template_name)
    except LauError as e:
        _fail(e)
    _print_template(template, registry)


def _print_result(result: DeploymentResult) -> None:
    reason = REASON_LABELS[result.reason]
    console.print(
        f"[bold]{result.template}[/bold] -> {result.destination} "
        f"(provider: [cyan]{result.provider}[/cyan], {reason})"
    )

    conflicts = set(result.conflicts)
    written = set(result.written)
    for relative_path in result.files:
        exists = relative_path in conflicts
        if result.dry_run:
            mark = "[yellow]~[/yellow]" if exists else "[green]+[/green]"
            note = " [yellow](exists)[/yellow]" if exists else ""
        elif relative_path in written:
            mark = "[yellow]~[/yellow]" if exists else "[green]+[/green]"
            note = " [yellow](overwritten)[/yellow]" if exists else ""
        else:
            mark, note = "[dim]·[/dim]", " [dim](not written)[/dim]"
        console.print(f"  {mark} {relative_path}{note}")
    for relative_path in result.skipped:
        console.print(f"  [dim]- {relative_path} (skipped, exists)[/dim]")

    console.print()
    if result.dry_run:
        console.print(
            f"[yellow]Dry run:[/yellow] {len(result.files)} files would be written, "
            f"{len(result.conflicts)} already exist."
        )
    elif result.cancelled:
        console.print(
            f"[yellow]Cancelled:[/yellow] wrote {len(result.written)} of "
            f"{len(result.files)} files."
        )
    else:
        console.print(
            f"[green]Wrote {len(result.written)} files[/green] "
            f"({len(result.overwritten)} overwritten, {len(result.skipped)} skipped)."
        )


@main.command()
@click.argument("template_name")
@click.option("--provider", "-p", help="Provider subtree to deploy (no fallback).")
@click.option(
    "--dry-run",
    is_flag=True,
    help="Show what would be written without writing anything.",
)
@click.option(
    "--on-conflict",
    type=click.Choice(CONFLICT_POLICIES),
    help="What to do with files that already exist (default: overwrite).",
)
@click.option(
    "--dest",
    "-d",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    help="Destination project directory (default: current directory).",
)
@click.option("--parallel", type=click.IntRange(min=1), help="Concurrent copies.")
@click.pass_context
def add(
    ctx: click.Context,
    template_name: str,
    provider: str | None,
    dry_run: bool,
    on_conflict: str | None,
    dest: Path,
    parallel: int | None,
) -> None:
    """Deploy a template's files into a project.

    The provider subtree is chosen in order: --provider, the provider
    detected from marker files in the destination, then default.
    """
    config: LauConfig = ctx.obj["config"]
    registry = _get_registry(ctx)
    request = ResolutionRequest(
        identifier=template_name,
        destination=dest,
        provider=_normalize_provider(provider) if provider else None,
        detected_provider=config.provider,
        dry_run=dry_run,
    )
    engine = DeploymentEngine(
        detector=MarkerDetector(),
        on_conflict=on_conflict or config.on_conflict or "overwrite",
        max_workers=parallel or config.parallel or 1,
    )

    try:
        template = registry.resolve(request.identifier)
        with _cancel_on_signal(engine):
            result = engine.deploy(template, request)
    except DeploymentIOError as e:
        if e.written:
            console.print(f"[dim]Written before failure: {', '.join(e.written)}[/dim]")
        _fail(e)
    except LauError as e:
        _fail(e)

    _print_result(result)
    if result.cancelled:
        raise SystemExit(130)


@main.command()
@click.pass_context
def validate(ctx: click.Context) -> None:
    """Check every template in the corpus for problems."""
    registry = _get_registry(ctx)
    try:
        warnings = registry.validate()
    except LauError as e:
        _fail(e)

    if warnings:
        _print_warnings(warnings)
        console.print(f"\n[bold red]{len(warnings)} invalid template(s).[/bold red]")
        raise SystemExit(1)
    console.print(f"[bold green]Corpus {registry.corpus_root} is valid.[/bold green]")


@main.command()
@click.argument(
    "directory",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
)
def detect(directory: Path) -> None:
    """Show which provider marker files are present in a project."""
    console.print(f"[bold]Provider markers in {directory.resolve()}:[/bold]\n")
    for p in PROVIDERS:
        markers = ", ".join(p.markers)
        if p.is_present(directory):
            console.print(f"  [green]✓[/green] {p.name} ([cyan]{p.key}[/cyan])")
        else:
            console.print(f"  [dim]✗[/dim] {p.name} - [dim]{markers}[/dim]")

    detected = MarkerDetector().detect(directory)
    if detected:
        console.print(f"\n[green]✓[/green] Would deploy provider: {detected}")
    else:
        console.print("\n[dim]No provider detected, would deploy: default[/dim]")


@main.group(invoke_without_command=True)
@click.pass_context
def config(ctx: click.Context) -> None:
    """Show or change lau configuration.

    Config locations:
      - Global: ~/.lau/config.yaml (user defaults)
      - Local: ./.lau/config.yaml (project overrides)
    """
    if ctx.invoked_subcommand is not None:
        return

    cfg: LauConfig = ctx.obj["config"]
    console.print("\n[bold]Current Effective Configuration:[/bold]")
    console.print(f"  [dim]Global: {get_home_config_path()}[/dim]")
    console.print(f"  [dim]Local: {get_local_config_path()}[/dim]")
    console.print()
    for key, value in cfg.to_dict().items():
        console.print(f"  {key}: {value}")
    console.print(f"  corpus (resolved): {resolve_corpus_root(cfg, ctx.obj['corpus'])}")

    console.print()
    if home_config_exists():
        console.print("  [green]Global config: exists[/green]")
    else:
        console.print("  [dim]Global config: not found[/dim]")
    if local_config_exists():
        console.print("  [green]Local config: exists[/green]")
    else:
        console.print("  [dim]Local config: not found[/dim]")


@config.command("set")
@click.argument(
    "key", type=click.Choice(["corpus_root", "provider", "on_conflict", "parallel"])
)
@click.argument("value")
@click.option(
    "--global",
    "-g",
    "global_config",
    is_flag=True,
    help="Write to the global config instead of ./.lau/config.yaml.",
)
def config_set(key: str, value: str, global_config: bool) -> None:
    """Set one configuration value."""
    path = get_home_config_path() if global_config else get_local_config_path()
    update = LauConfig.from_dict({key: value})
    if update.to_dict().get(key) is None:
        console.print(f"[red]Error:[/red] invalid value for {key}: {value}")
        raise SystemExit(2)

    existing = LauConfig.from_dict(load_yaml_config(path) or {})
    save_config(existing.merge(update), path)
    console.print(f"[green]Set {key} = {value}[/green] [dim]({path})[/dim]")
