"""modkit CLI - main entry point.

Commands:
    import   - Import every package under the packages directory
    order    - Show the package processing order
    inspect  - Per-package validity, reasons and session fingerprint
    graph    - Export the dependency graph as DOT
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__, __cli_name__
from .utils.colors import (
    success, error, warning, info, dim,
    section, kv, badge, bullet, table,
    _ARROW, _CHECK, _CROSS,
)
from ..config import ConfigError, ConfigLoader, ModkitConfig
from ..fingerprint import FingerprintGenerator
from ..importer import ImportReport, PackageImporter

DEFAULT_CONFIG_FILES = ("modkit.yaml", "modkit.yml", "modkit.json")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("modkit").setLevel(getattr(logging, level, logging.INFO))


@click.group()
@click.version_option(version=__version__, prog_name=__cli_name__)
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
@click.option('--quiet', '-q', is_flag=True, help='Minimal output')
@click.option('--config', 'config_path', type=click.Path(dir_okay=False), help='Config file (YAML or JSON)')
@click.option('--env-file', type=click.Path(dir_okay=False), default='.env', show_default=True, help='.env file with MODKIT_* keys')
@click.pass_context
def cli(ctx, verbose: bool, quiet: bool, config_path: Optional[str], env_file: str):
    """Load content packages, resolve dependencies and import assets.

    \b
    Quick start:
      modkit import --dir mods
      modkit order --dir mods
      modkit inspect --dir mods --json-output
    """
    ctx.ensure_object(dict)

    level = None
    if verbose:
        level = "DEBUG"
    elif quiet:
        level = "ERROR"

    paths = [config_path] if config_path else list(DEFAULT_CONFIG_FILES)
    try:
        config = ConfigLoader.load(
            paths=paths,
            env_file=env_file,
            overrides={"log_level": level},
        )
    except ConfigError as exc:
        error(f"{_CROSS} {exc}")
        sys.exit(2)

    _configure_logging(config.log_level)
    ctx.obj['config'] = config
    ctx.obj['verbose'] = verbose
    ctx.obj['quiet'] = quiet


def _importer(ctx, directory: Optional[str], workers: Optional[int] = None) -> PackageImporter:
    config: ModkitConfig = ctx.obj['config']
    overrides = config.to_dict()
    if directory:
        overrides['packages_dir'] = directory
    if workers:
        overrides['workers'] = workers
    return PackageImporter(ModkitConfig(**overrides))


def _silence_logs() -> None:
    logging.getLogger("modkit").setLevel(logging.CRITICAL)


def _print_report(report: ImportReport) -> None:
    section("Import")
    kv("Discovered", report.discovered)
    kv("Constructed", report.constructed)
    kv("Imported", report.imported)
    kv("Assets", report.asset_count)

    if report.processing_order:
        click.echo()
        section("Processing order")
        for i, name in enumerate(report.processing_order, 1):
            click.echo(f"  {i}. {name}")

    if report.failed:
        click.echo()
        section("Failed packages", fg="red")
        for name, exc in report.failed.items():
            bullet(f"{name}: {exc.message}", fg="red")

    if report.invalid:
        click.echo()
        section("Invalid packages", fg="yellow")
        for name, reasons in report.invalid.items():
            for reason in reasons:
                bullet(f"{name}: {reason}", fg="yellow")

    if report.failed_files:
        click.echo()
        section("Failed files", fg="red")
        for path, exc in report.failed_files.items():
            bullet(f"{path}: {exc.message}", fg="red")


# ============================================================================
# Commands
# ============================================================================

@cli.command('import')
@click.option('--dir', 'directory', type=click.Path(file_okay=False), help='Packages directory')
@click.option('--workers', type=click.IntRange(min=1), help='Threads used to read manifests')
@click.option('--json-output', is_flag=True, help='Print the report as JSON')
@click.pass_context
def import_cmd(ctx, directory: Optional[str], workers: Optional[int], json_output: bool):
    """
    Import every package and report the outcome.

    Exits with status 1 if any package or file failed.

    Examples:
      modkit import --dir mods
      modkit import --dir mods --workers 4 --json-output
    """
    if json_output:
        _silence_logs()
    importer = _importer(ctx, directory, workers)
    report = importer.import_all()

    if json_output:
        click.echo(json.dumps(report.to_dict(), indent=2, sort_keys=True))
    elif not ctx.obj['quiet']:
        _print_report(report)
        click.echo()
        if report.ok:
            success(f"  {_CHECK} Import completed")
        else:
            warning("  ! Import completed with problems")

    sys.exit(0 if report.ok else 1)


@cli.command('order')
@click.option('--dir', 'directory', type=click.Path(file_okay=False), help='Packages directory')
@click.pass_context
def order_cmd(ctx, directory: Optional[str]):
    """
    Show the package processing order.

    One package name per line, dependencies first.
    """
    _silence_logs()
    importer = _importer(ctx, directory)
    report = importer.import_all()
    for name in report.processing_order:
        click.echo(name)
    sys.exit(0 if report.ok else 1)


@cli.command('inspect')
@click.option('--dir', 'directory', type=click.Path(file_okay=False), help='Packages directory')
@click.option('--json-output', is_flag=True, help='Print diagnostics as JSON')
@click.pass_context
def inspect_cmd(ctx, directory: Optional[str], json_output: bool):
    """
    Show every package with its validity, problems and counts.
    """
    _silence_logs()
    importer = _importer(ctx, directory)
    report = importer.import_all()
    fingerprint = FingerprintGenerator().generate(importer.packages, importer.assets)

    if json_output:
        data = {
            "fingerprint": fingerprint,
            "report": report.to_dict(),
            "packages": [p.to_dict() for p in importer.packages.all()],
        }
        click.echo(json.dumps(data, indent=2, sort_keys=True))
        sys.exit(0 if report.ok else 1)

    section("Packages")
    rows = []
    for package in importer.packages.all():
        order = "-" if package.load_order is None else package.load_order + 1
        rows.append([
            order,
            package.name,
            str(package.version),
            package.dependency_count,
            package.asset_count,
            "valid" if package.valid else "invalid",
        ])
    table(["#", "Package", "Version", "Deps", "Assets", "State"], rows)

    for package in importer.packages.all():
        if package.valid:
            continue
        click.echo()
        click.echo(f"  {badge(package.name, style='fail')}")
        for problem in package.problems:
            dim(f"    {_ARROW} {problem.message}")

    click.echo()
    kv("Fingerprint", fingerprint)
    sys.exit(0 if report.ok else 1)


@cli.command('graph')
@click.option('--dir', 'directory', type=click.Path(file_okay=False), help='Packages directory')
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Write DOT to a file')
@click.option('--json-output', is_flag=True, help='Print the graph as a JSON adjacency map')
@click.pass_context
def graph_cmd(ctx, directory: Optional[str], output: Optional[str], json_output: bool):
    """
    Export the dependency graph of every package as DOT.

    Examples:
      modkit graph --dir mods | dot -Tpng > deps.png
      modkit graph --json-output
    """
    _silence_logs()
    importer = _importer(ctx, directory)
    importer.import_all()
    graph = importer.resolver.build_graph()

    if json_output:
        click.echo(json.dumps(graph.to_dict(), indent=2))
        return

    dot = graph.to_dot()

    if output:
        Path(output).write_text(dot + "\n")
        if not ctx.obj['quiet']:
            info(f"  {_CHECK} Graph written to {output}")
    else:
        click.echo(dot)


def main():
    """Entry point for `modkit` command."""
    cli(obj={})


if __name__ == '__main__':
    main()
