# phenoattr/cli.py
"""
phenoattr CLI -- Click commands with a Rich terminal UI.

Provides the ``phenoattr`` console entry-point declared in pyproject.toml as
``phenoattr.cli:cli``:

- encode:   tagged JSON (or plain JSON with --plain) -> wire bytes
- decode:   wire bytes -> Rich tree, tagged JSON or plain JSON
- inspect:  shape summary (depth, node count, kind histogram)
- config:   PhenoattrConfig display
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import click
from rich.console import Console

from . import __version__
from . import cli_theme as theme
from .attributes import (
    AttributeCodec,
    AttributeValue,
    collect_stats,
    from_python,
    from_tagged,
    to_python,
    to_tagged,
)
from .cli_display import build_tree, render_stats
from .config import CodecLimits, get_config
from .errors import PhenoattrError
from .utils.logging import get_logger, setup_logging

console = Console()
_logger = get_logger(__name__)


def _print_version(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    theme.print_version(__version__, console)
    ctx.exit()


def _limit_options(func):
    """Shared --max-depth / --max-collection-size overrides."""
    func = click.option(
        "--max-collection-size",
        type=click.IntRange(min=0),
        default=None,
        help="Largest list/map accepted (default: PHENOATTR_MAX_COLLECTION_SIZE).",
    )(func)
    func = click.option(
        "--max-depth",
        type=click.IntRange(min=1),
        default=None,
        help="Deepest container nesting accepted (default: PHENOATTR_MAX_DEPTH).",
    )(func)
    return func


def _make_codec(max_depth: Optional[int], max_collection_size: Optional[int]) -> AttributeCodec:
    limits = CodecLimits.from_config()
    overrides: dict[str, int] = {}
    if max_depth is not None:
        overrides["max_depth"] = max_depth
    if max_collection_size is not None:
        overrides["max_collection_size"] = max_collection_size
    if overrides:
        limits = limits.model_copy(update=overrides)
    return AttributeCodec(limits=limits)


def _read_value(path: Path, codec: AttributeCodec) -> AttributeValue:
    try:
        return codec.decode(path.read_bytes())
    except PhenoattrError as exc:
        raise click.ClickException(f"{path.name}: {exc}")


# ---------------------------------------------------------------------------
# Main CLI group
# ---------------------------------------------------------------------------


@click.group(invoke_without_command=True)
@click.option(
    "--version",
    is_flag=True,
    callback=_print_version,
    expose_value=False,
    is_eager=True,
    help="Show version and exit.",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log to stderr at DEBUG level.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """phenoattr -- recursive attribute values for phenopacket records."""
    if verbose:
        setup_logging(level="DEBUG", console_output=True)
    else:
        setup_logging()
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# ---------------------------------------------------------------------------
# encode / decode / inspect
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), required=True, help="Binary output file.")
@click.option("--plain", is_flag=True, default=False, help="Read plain JSON instead of tagged JSON.")
@_limit_options
def encode(
    source: Path,
    output: Path,
    plain: bool,
    max_depth: Optional[int],
    max_collection_size: Optional[int],
) -> None:
    """Encode a JSON document to the binary wire format.

    \b
    Examples:
      phenoattr encode sample.json -o sample.bin
      phenoattr encode plain.json --plain -o sample.bin
    """
    codec = _make_codec(max_depth, max_collection_size)
    try:
        document: Any = json.loads(source.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"{source.name}: invalid JSON ({exc.msg}, line {exc.lineno})")
    try:
        if plain:
            value = from_python(document, max_depth=codec.limits.max_depth)
        else:
            value = from_tagged(document, max_depth=codec.limits.max_depth)
        data = codec.encode(value)
    except (PhenoattrError, TypeError, ValueError) as exc:
        raise click.ClickException(f"{source.name}: {exc}")
    output.write_bytes(data)
    _logger.info(f"Encoded {source} -> {output} ({len(data)} bytes)")
    console.print(theme.ok(f"Wrote {len(data)} bytes to {output}"))


@cli.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, default=False, help="Print tagged JSON instead of a tree.")
@click.option("--plain", is_flag=True, default=False, help="Print plain JSON (integer widths are lost).")
@_limit_options
def decode(
    source: Path,
    as_json: bool,
    plain: bool,
    max_depth: Optional[int],
    max_collection_size: Optional[int],
) -> None:
    """Decode a binary file and print its contents.

    \b
    Examples:
      phenoattr decode sample.bin
      phenoattr decode sample.bin --json
    """
    codec = _make_codec(max_depth, max_collection_size)
    value = _read_value(source, codec)
    if plain:
        click.echo(json.dumps(to_python(value, max_depth=codec.limits.max_depth), indent=2, default=_record_json))
    elif as_json:
        click.echo(json.dumps(to_tagged(value, max_depth=codec.limits.max_depth), indent=2, allow_nan=False))
    else:
        console.print(build_tree(value, title=source.name, max_depth=codec.limits.max_depth))


@cli.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_limit_options
def inspect(source: Path, max_depth: Optional[int], max_collection_size: Optional[int]) -> None:
    """Summarise the shape of a binary file."""
    codec = _make_codec(max_depth, max_collection_size)
    value = _read_value(source, codec)
    stats = collect_stats(value, max_depth=codec.limits.max_depth)
    render_stats(stats, source.stat().st_size, console)


def _record_json(obj: Any) -> Any:
    dump = getattr(obj, "model_dump", None)
    if dump is None:
        raise TypeError(f"{type(obj).__name__} is not JSON serializable")
    return dump(mode="json", exclude_defaults=True)


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


@cli.group()
def config() -> None:
    """View phenoattr configuration."""


@config.command("show")
def config_show() -> None:
    """Show current configuration.

    \b
    Examples:
      phenoattr config show
    """
    cfg = get_config()

    theme.section("Codec Limits", console, "01")
    t = theme.make_kv_table()
    t.add_row("max_depth", str(cfg.max_depth))
    t.add_row("max_collection_size", str(cfg.max_collection_size))
    t.add_row("max_payload_bytes", str(cfg.max_payload_bytes))
    console.print(t)

    theme.section("Paths", console, "02")
    t = theme.make_kv_table()
    t.add_row("home_dir", str(cfg.home_dir))
    t.add_row("log_dir", str(cfg.log_dir))
    console.print(t)


if __name__ == "__main__":
    cli()
