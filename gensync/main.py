"""
gensync — CLI entrypoint (diagnostics).

Usage:
    python -m gensync.main --help
    python -m gensync.main config check
    python -m gensync.main trace show src-gen/A.java._trace
    python -m gensync.main trace smap src-gen/A.java._trace
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from gensync import __version__
from gensync.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="gensync")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to gensync.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """gensync — inspect generated output, trace files and source maps."""
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("GENSYNC_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("GENSYNC_LOG_FILE"),
        log_file_level=os.environ.get("GENSYNC_LOG_FILE_LEVEL"),
    )


# ── config ──────────────────────────────────────────────────────────


@cli.group()
def config() -> None:
    """Configuration commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate gensync.yml and list output configurations."""
    from gensync.core.config.loader import ConfigError, load_settings

    try:
        settings = load_settings(ctx.obj.get("config_path"))
    except ConfigError as e:
        if as_json:
            click.echo(json.dumps({"valid": False, "errors": [str(e)]}, indent=2))
        else:
            click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps({"valid": True, "settings": settings.model_dump(mode="json")}, indent=2))
        return

    click.secho("✅ Configuration is valid", fg="green", bold=True)
    click.echo(f"   Project root: {settings.project_root}")
    click.echo(f"   Debug extensions: {', '.join(settings.debug_extensions)}")
    click.secho(f"   Outputs: {len(settings.outputs)}", fg="white", bold=True)
    for out in settings.outputs:
        flags = []
        if out.create_output_directory:
            flags.append("create")
        if out.override_existing_resources:
            flags.append("override")
        if out.set_derived_property:
            flags.append("derived")
        click.echo(f"     • {out.name} → {out.output_directory}  [{', '.join(flags)}]")
    click.echo()


# ── trace ───────────────────────────────────────────────────────────


@cli.group()
def trace() -> None:
    """Trace file commands."""


def _load_trace(path: str):
    from gensync.core.services.trace.serializer import TraceFormatError, TraceRegionSerializer

    try:
        return TraceRegionSerializer().read(Path(path).read_bytes())
    except (OSError, TraceFormatError) as e:
        click.secho(f"❌ Cannot read trace file {path}: {e}", fg="red", err=True)
        sys.exit(1)


@trace.command("show")
@click.argument("trace_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def trace_show(ctx: click.Context, trace_file: str, as_json: bool) -> None:
    """Decode a ._trace file."""
    region = _load_trace(trace_file)

    if as_json:
        click.echo(json.dumps(region.model_dump(mode="json"), indent=2))
        return

    if not ctx.obj.get("quiet"):
        click.secho(f"\n🧭 {trace_file}", fg="cyan", bold=True)
        click.echo(f"   Regions: {region.node_count()}")
        click.echo(f"   Sources: {len(region.source_uris())}")
        click.echo()

    stack = [(region, 0)]
    while stack:
        node, depth = stack.pop()
        indent = "   " + "  " * depth
        span = f"lines {node.start_line}-{node.end_line} @{node.offset}+{node.length}"
        click.echo(f"{indent}• {span}")
        for loc in node.locations:
            click.echo(f"{indent}    ← {loc.source_uri or '?'}:{loc.start_line}-{loc.end_line}")
        stack.extend((child, depth + 1) for child in reversed(node.children))


@trace.command("smap")
@click.argument("trace_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--name", "generated_name", default=None, help="Generated file name (default: derived from TRACE_FILE).")
@click.option("--stratum", default=None, help="Stratum name written into the SMAP.")
def trace_smap(trace_file: str, generated_name: str | None, stratum: str | None) -> None:
    """Derive the SMAP of a generated file from its ._trace file."""
    from gensync.core.services.sync.synchronizer import TRACE_FILE_EXTENSION
    from gensync.core.services.trace.smap import DEFAULT_STRATUM, SmapBuilder

    region = _load_trace(trace_file)
    if generated_name is None:
        generated_name = Path(trace_file).name.removesuffix(TRACE_FILE_EXTENSION)

    smap = SmapBuilder(stratum or DEFAULT_STRATUM).build(region, generated_name)
    if smap is None:
        click.secho("No line data — no source map", fg="yellow", err=True)
        sys.exit(1)
    click.echo(smap, nl=False)


# ── markers ─────────────────────────────────────────────────────────


@cli.command()
@click.argument("source")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False),
    default=".",
    help="Store root holding .state/trace_markers.json.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def markers(source: str, root: str, as_json: bool) -> None:
    """List the trace files generated from SOURCE (a store path)."""
    from gensync.adapters.markers import JsonMarkerStore

    found = JsonMarkerStore(Path(root)).markers_for(source)

    if as_json:
        click.echo(json.dumps(found, indent=2))
        return

    if not found:
        click.echo(f"No trace markers on {source}")
        return

    click.secho(f"\n📌 {source}", fg="cyan", bold=True)
    for generator, trace_paths in sorted(found.items()):
        click.secho(f"   {generator}", fg="white", bold=True)
        for trace_path in trace_paths:
            click.echo(f"     • {trace_path}")
    click.echo()


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
