"""ngaudit CLI — find out which Angular dependencies are ready for Ivy."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.progress import Progress

from ngaudit import __version__
from ngaudit.config import AuditConfig
from ngaudit.models import RunState
from ngaudit.npm.manifest import ManifestError, load_dependencies
from ngaudit.pipeline import Auditor
from ngaudit.report.renderers import RENDERERS, write_report

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger("ngaudit")

EPILOG = """\
\b
Classification:
  may need upgrading   the package depends on @angular/core and ships Ivy
                       compatible output (or is an @angular/* package that
                       is behind its latest release)
  review for removal   the package still ships View Engine .metadata.json
                       files next to its type declarations
  unknown              no @angular/core dependency, or the registry lookup
                       failed

\b
Environment variables:
  NGAUDIT_REGISTRY_URL  npm registry (default: https://registry.npmjs.org)
  NGAUDIT_MAX_RETRIES   registry attempts per package (default: 3)
  NGAUDIT_RETRY_DELAY   first backoff delay in seconds (default: 1.0)
  NGAUDIT_HTTP_TIMEOUT  HTTP timeout in seconds (default: 30)
  NGAUDIT_WORK_DIR      where tarballs are unpacked (default: system temp)
  NGAUDIT_LOG_LEVEL     log level (default: WARNING)
  NGAUDIT_LOG_FILE      also write logs to this file

\b
Examples:
  ngaudit
  ngaudit --style=table --skip-ng
  ngaudit --style=markdown --output=angular-audit.md -pb
"""


def _setup_logging(level: str, log_path: Path | None = None) -> None:
    """Configure stderr (+ optional file) logging for the ngaudit loggers."""
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.setLevel(level)
    logger.propagate = False


async def _audit(config: AuditConfig, manifest: Path) -> RunState:
    specs = load_dependencies(manifest)

    with Progress(console=err_console, transient=True) as progress:
        task = progress.add_task("[green]Checking dependencies...", total=len(specs))

        def on_progress(processed: int, total: int) -> None:
            progress.update(task, completed=processed, total=total)

        async with Auditor(config, on_progress=on_progress) as auditor:
            return await auditor.run(specs)


@click.command(
    epilog=EPILOG,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.version_option(__version__, "--version", "-v", prog_name="ngaudit")
@click.option(
    "--style",
    type=click.Choice(sorted(RENDERERS)),
    default="line",
    show_default=True,
    help="Report style",
)
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the report to this file instead of the console",
)
@click.option(
    "--skip-ng", "-ng", "skip_ng", is_flag=True,
    help="Leave @angular/* packages out of the audit",
)
@click.option(
    "--package-boundary", "-pb", "package_boundary", is_flag=True,
    help="Only accept packages declaring @angular/core as a peer dependency",
)
@click.option(
    "--manifest",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path("package.json"),
    show_default=True,
    help="package.json to audit",
)
@click.option("--verbose", is_flag=True, help="Log debug output to stderr")
def main(
    style: str,
    output: Path | None,
    skip_ng: bool,
    package_boundary: bool,
    manifest: Path,
    verbose: bool,
) -> None:
    """Audit package.json dependencies for Angular Ivy compatibility.

    Looks up the latest release of every dependency on the npm registry and
    sorts them into packages that may need upgrading, packages to review
    for removal, and packages whose status is unknown.
    """
    config = AuditConfig.from_env()
    config.skip_framework = skip_ng
    config.enforce_boundary = package_boundary
    _setup_logging("DEBUG" if verbose else config.log_level, config.log_file)

    try:
        state = asyncio.run(_audit(config, manifest))
    except ManifestError as e:
        err_console.print(f"[red]{e}[/]")
        sys.exit(1)

    write_report(state, style=style, output=output, console=console)
    if output is not None:
        err_console.print(f"[green]Report written to {output}[/]")
