"""Command-line entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Open the plugin for one command
- Print results, or the error envelope of an HttpImportError
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
import structlog

from httpimport import __version__
from httpimport.config import Settings
from httpimport.errors import HttpImportError
from httpimport.paths import artifact_path
from httpimport.plugin import open_plugin
from httpimport.project import (
    ensure_compiler_paths,
    ensure_preload,
    link_global,
    read_status,
    write_status,
)
from httpimport.resolver import resolve_specifier

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from httpimport.plugin import HttpImportPlugin

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [*shared_processors, structlog.processors.JSONRenderer()]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # Logs go to stderr, stdout carries command output
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def _run_with_plugin(
    settings: Settings,
    action: Callable[[HttpImportPlugin], Awaitable[None]],
) -> None:
    async def _main() -> None:
        async with open_plugin(settings) as plugin:
            await action(plugin)

    try:
        asyncio.run(_main())
    except HttpImportError as exc:
        log.warning("command_failed", code=exc.code, message=exc.message)
        click.echo(json.dumps(exc.to_dict()), err=True)
        sys.exit(1)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(__version__, prog_name="httpimport")
@click.option(
    "--scope",
    type=click.Choice(["local", "global"]),
    default=None,
    help="Cache root to use (overrides configuration).",
)
@click.pass_context
def cli(ctx: click.Context, scope: str | None) -> None:
    """Fetch and cache modules addressed by URL."""
    settings = Settings()
    if scope is not None:
        settings.cache.scope = scope  # type: ignore[assignment]
    _setup_logging(settings)
    ctx.obj = settings


@cli.command()
@click.argument("url")
@click.pass_obj
def load(settings: Settings, url: str) -> None:
    """Load URL into the cache and print where it landed."""

    async def action(plugin: HttpImportPlugin) -> None:
        result = await plugin.load(url)
        click.echo(f"{result.kind}\t{result.path}")

    _run_with_plugin(settings, action)


@cli.command()
@click.argument("url")
@click.pass_obj
def types(settings: Settings, url: str) -> None:
    """Crawl a declaration file and everything it references."""

    async def action(plugin: HttpImportPlugin) -> None:
        for visited in await plugin.crawl_types(url):
            click.echo(visited)

    _run_with_plugin(settings, action)


@cli.command()
@click.argument("specifier")
@click.argument("importer")
def resolve(specifier: str, importer: str) -> None:
    """Resolve SPECIFIER as imported from the module at IMPORTER."""
    resolved = resolve_specifier(specifier, importer)
    if resolved is None:
        raise click.ClickException(f"Not an http(s) import: {specifier!r} from {importer!r}")
    click.echo(resolved)


@cli.command()
@click.argument("url")
@click.pass_obj
def path(settings: Settings, url: str) -> None:
    """Print the cache path URL maps to (no network access)."""
    click.echo(artifact_path(url, settings.cache.cache_dir))


@cli.command()
@click.option("--force", is_flag=True, help="Rewrite tsconfig path mappings even if present.")
@click.option(
    "--preload",
    "preload_module",
    default=None,
    help="Module to list in bunfig.toml preload.",
)
@click.pass_obj
def init(settings: Settings, force: bool, preload_module: str | None) -> None:
    """Initialise the cache root and project configuration."""
    cwd = Path.cwd()
    status = read_status(settings.cache.status_path)
    if status is not None and not force:
        click.echo(f"already initialised ({status.version}, {status.date})")
        return

    try:
        if preload_module:
            ensure_preload(cwd / "bunfig.toml", preload_module)
        ensure_compiler_paths(cwd / "tsconfig.json", settings.cache.cache_dir, cwd, force=force)
        status = write_status(settings, __version__)
    except HttpImportError as exc:
        click.echo(json.dumps(exc.to_dict()), err=True)
        sys.exit(1)
    click.echo(status.model_dump_json(indent=4))


@cli.command()
@click.pass_obj
def link(settings: Settings) -> None:
    """Symlink the project-local cache root to the global one."""
    global_root = Path(settings.cache.global_root).expanduser()
    local_root = Path(settings.cache.local_root).expanduser()
    if not link_global(global_root, local_root):
        raise click.ClickException(f"Failed to link {local_root} -> {global_root}")
    click.echo(f"{local_root} -> {global_root}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
