# cli.py - Command line interface for siqpack
"""
siqpack CLI - Normalize and shrink quiz packages

COMMANDS:
    siqpack optimize PACKAGE [--workers N]     Repackage PACKAGE(.siq) next to itself
    siqpack normalize DESCRIPTOR [--output F]  Print normalized JSON for a content.xml
    siqpack config [--template]                Show resolved settings
    siqpack version                            Show version information

EXAMPLES:
    # Produce quiz-optimized.siq from quiz.siq
    siqpack optimize quiz

    # Inspect the normalized model of an extracted package
    siqpack normalize quiz-temp/content.xml --output quiz.json
"""

import dataclasses
import sys
from pathlib import Path
from typing import Optional

import click
import yaml

from siqpack import __version__
from siqpack.config_utils import create_config_template, describe_config, get_config
from siqpack.descriptor import parse_descriptor
from siqpack.errors import SiqpackError
from siqpack.normalizer import normalize
from siqpack.pipeline import run


class SiqpackContext:
    """Shared context for CLI commands"""

    def __init__(self):
        self.base_dir = Path.cwd()
        self._config = None

    @property
    def config(self):
        # Loaded lazily so `siqpack version` works with a broken siqpack.yaml
        if self._config is None:
            self._config = get_config(self.base_dir)
        return self._config


def _fail(error: SiqpackError):
    click.echo(str(error), err=True)
    sys.exit(1)


# ============================================================================
# Click Group Setup
# ============================================================================

@click.group()
@click.pass_context
def cli(ctx):
    """
    siqpack - Normalize and shrink quiz packages

    Converts a .siq package into normalized JSON plus optimized media
    and writes a new, smaller package next to the original.
    """
    ctx.obj = SiqpackContext()


# ============================================================================
# Commands
# ============================================================================

@cli.command()
@click.argument('package')
@click.option('--workers', type=click.IntRange(min=1), help='Threads for extraction and image optimization')
@click.option('--jpeg-quality', type=click.IntRange(1, 95), help='JPEG re-encode quality')
@click.pass_obj
def optimize(ctx: SiqpackContext, package: str, workers: Optional[int], jpeg_quality: Optional[int]):
    """
    Repackage PACKAGE into <name>-optimized.siq

    The extension may be omitted. The pipeline runs these steps in order:
    extract, parse, normalize, write content.json, optimize images,
    prune descriptor and text files, archive, report, clean up.

    Examples:
        siqpack optimize quiz.siq
        siqpack optimize quiz --workers 8
    """
    try:
        config = ctx.config
        overrides = {}
        if workers:
            overrides["workers"] = workers
        if jpeg_quality:
            overrides["jpeg_quality"] = jpeg_quality
        if overrides:
            config = dataclasses.replace(config, **overrides)

        report = run(package, config=config, cwd=ctx.base_dir)
    except SiqpackError as e:
        _fail(e)
    except KeyboardInterrupt:
        click.echo("\n[x] Interrupted - run again to start from a fresh working directory", err=True)
        sys.exit(130)

    click.echo(f"\n[v] Done! {report.summary()}")
    click.echo(f"    {report.output_path}")


@cli.command('normalize')
@click.argument('descriptor', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--output', '-o', type=click.Path(dir_okay=False, path_type=Path), help='Write JSON here instead of stdout')
@click.pass_obj
def normalize_command(ctx: SiqpackContext, descriptor: Path, output: Optional[Path]):
    """
    Print the normalized model of an extracted DESCRIPTOR (content.xml)

    Warnings about unknown media or question types go to stderr.
    """
    def warn(message: str):
        click.echo(f"[normalize:warn] {message}", err=True)

    try:
        config = ctx.config
        package = normalize(
            parse_descriptor(descriptor),
            on_warning=warn,
            images_root=config.images_dir,
            audio_root=config.audio_dir,
            marker=config.media_marker,
        )
    except SiqpackError as e:
        _fail(e)

    text = package.to_json()
    if output:
        output.write_text(text, encoding="utf-8")
        click.echo(f"[v] Wrote {output}")
    else:
        click.echo(text, nl=False)


@cli.command('config')
@click.option('--template', is_flag=True, help='Print a siqpack.yaml template instead')
@click.pass_obj
def show_config(ctx: SiqpackContext, template: bool):
    """Show resolved settings and where each value came from"""
    if template:
        click.echo(create_config_template(), nl=False)
        return

    try:
        rows = describe_config(ctx.config)
    except SiqpackError as e:
        _fail(e)

    for key, row in rows.items():
        click.echo(f"  {key:<16} {row['value']!s:<22} ({row['source']})")
    if ctx.config.extra:
        click.echo("\nUnrecognized keys:")
        click.echo(yaml.safe_dump(ctx.config.extra, allow_unicode=True, sort_keys=True).rstrip())


@cli.command()
def version():
    """Show siqpack version"""
    click.echo(f"siqpack v{__version__}")
    click.echo("Quiz package normalizer and optimizer")


# ============================================================================
# Entry Point
# ============================================================================

if __name__ == '__main__':
    cli()
