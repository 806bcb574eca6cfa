"""
Command-line interface for contexts.

Provides a thin Click front end over ContextManager: YAML files become
layers, and the commands print scoped lookups or the collapsed view.
Option defaults come from Settings (CONTEXTS_* environment variables)
through Click's default_map; explicit options always win.
"""

import json as _json
import logging as _logging
import typing as _typing

import click as _click
import pydantic as _pydantic
import yaml as _yaml

import contexts
import contexts.config as config
import contexts.constants as constants
import contexts.manager as manager
import contexts.sources as sources

_logger = _logging.getLogger(__name__)

CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}

_files_argument = _click.argument(
    "files", nargs=-1, required=True, type=_click.Path(dir_okay=False)
)
_format_option = _click.option(
    "--format",
    "output_format",
    type=_click.Choice(constants.OUTPUT_FORMATS),
    default=constants.DEFAULT_OUTPUT_FORMAT,
    show_default=True,
    help="Output format.",
)
_base_first_option = _click.option(
    "--base-first/--local-first",
    default=False,
    help="Whether the first file is the least local layer (default: local first).",
)


def _format(value: _typing.Any, output_format: str) -> str:
    """Render a value as YAML or JSON text (no trailing newline)."""
    if isinstance(value, manager.FrozenMapping):
        value = dict(value)
    if output_format == "json":
        return _json.dumps(value, indent=2, default=str)
    text = _yaml.safe_dump(value, sort_keys=False, default_flow_style=False)
    # Bare scalars come back with an explicit document end marker
    text = text.removesuffix("...\n")
    return text.rstrip("\n")


def _load(
    files: _typing.Sequence[str],
    base_first: bool,
) -> manager.ContextManager[_typing.Any, _typing.Any]:
    """Load files into a manager, turning load errors into Click errors."""
    try:
        return sources.load_manager(files, base_first=base_first)
    except sources.LayerFileError as e:
        raise _click.ClickException(str(e)) from e


def _default_map(settings: config.Settings) -> dict[str, dict[str, _typing.Any]]:
    """Build per-command option defaults from settings."""
    common = {"output_format": settings.output_format, "base_first": settings.base_first}
    return {
        "collapse": {**common, "ordered": settings.ordered},
        "get": dict(common),
        "layers": {"base_first": settings.base_first},
    }


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(contexts.__version__, "--version", prog_name="contexts")
@_click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr.")
@_click.pass_context
def cli(ctx: _click.Context, verbose: bool) -> None:
    """Layered key-value lookups over YAML files.

    FILES are layers. By default the first file is the local layer and
    wins over the files after it; use --base-first (or
    CONTEXTS_BASE_FIRST=1) to list the least local file first.
    """
    try:
        settings = config.Settings()
    except _pydantic.ValidationError as e:
        raise _click.ClickException(f"invalid settings: {e}") from e

    level = _logging.DEBUG if verbose else settings.log_level_number
    _logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    _logger.debug("Settings: %s", settings.model_dump())

    # Subcommand contexts are created after this callback, so they pick these up
    ctx.default_map = _default_map(settings)


@cli.command()
@_files_argument
@_format_option
@_click.option("--ordered/--unordered", default=True, help="Sort keys in the collapsed view.")
@_base_first_option
def collapse(
    files: tuple[str, ...],
    output_format: str,
    ordered: bool,
    base_first: bool,
) -> None:
    """Print the collapsed view of FILES, most local values winning."""
    mgr = _load(files, base_first)

    if ordered:
        try:
            view = mgr.collapse_ordered()
        except TypeError as e:
            raise _click.ClickException(f"cannot sort keys: {e}") from e
    else:
        view = mgr.collapse()

    _click.echo(_format(view, output_format))


@cli.command()
@_click.argument("key")
@_files_argument
@_click.option("--from", "start", type=_click.IntRange(min=0), default=0, help="Depth to start at.")
@_click.option("--local", "local_only", is_flag=True, help="Search the local layer only.")
@_click.option("--all", "all_values", is_flag=True, help="Print every value, local first.")
@_format_option
@_base_first_option
@_click.pass_context
def get(
    ctx: _click.Context,
    key: str,
    files: tuple[str, ...],
    start: int,
    local_only: bool,
    all_values: bool,
    output_format: str,
    base_first: bool,
) -> None:
    """Print the value visible for KEY across FILES."""
    if local_only and (start or all_values):
        raise _click.UsageError("--local cannot be combined with --from or --all")

    mgr = _load(files, base_first)

    if all_values:
        scoped = mgr.fork_from(start)
        values = scoped.get_all(key) if scoped is not None else []
        if not values:
            _click.echo(f"key not found: {key}", err=True)
            ctx.exit(1)
        _click.echo(_format(values, output_format))
        return

    if local_only:
        found = mgr.contains_key_local(key)
        value = mgr.get_local(key)
    else:
        found = mgr.contains_key_from(start, key)
        value = mgr.get_from(start, key)

    if not found:
        _click.echo(f"key not found: {key}", err=True)
        ctx.exit(1)
    _click.echo(_format(value, output_format))


@cli.command()
@_files_argument
@_base_first_option
def layers(files: tuple[str, ...], base_first: bool) -> None:
    """List the layers built from FILES with their keys."""
    ordered_files = sources.local_first(files, base_first=base_first)
    loaded = []
    for path in ordered_files:
        try:
            loaded.append(sources.load_layer_with_lines(path))
        except sources.LayerFileError as e:
            raise _click.ClickException(str(e)) from e

    _click.echo(f"{len(loaded)} layer(s), local first:")
    for depth, (path, (layer, lines)) in enumerate(zip(ordered_files, loaded)):
        _click.echo(f"[{depth}] {path}")
        for key in layer:
            line = lines.get((key,))
            where = f" (line {line[0]})" if line else ""
            _click.echo(f"    {key}{where}")


def run_demo(echo: _typing.Callable[[str], None]) -> None:
    """Walk through the basic operations on a colour table, echoing each step."""
    mgr: manager.ContextManager[str, int] = manager.ContextManager.with_empty()

    mgr.insert("red", 255)  # [{"red": 255}]

    echo("red in context" if mgr.contains_key("red") else "red not in context")
    echo("green in context" if mgr.get("green") is not None else "green not in context")

    mgr.push({"red": 63})  # [{"red": 63}, {"red": 255}]
    mgr.push_empty()  # [{}, {"red": 63}, {"red": 255}]

    echo(f"red = {mgr['red']}")

    non_local = mgr.get_from(1, "red")
    if non_local is None:
        echo("no value set for red in non-local contexts")
    else:
        echo(f"non-local red = {non_local}")

    local = mgr.get_local("red")
    if local is None:
        echo("no value set for red in local context")
    else:
        echo(f"locally red = {local}")

    mgr.pop()  # [{"red": 63}, {"red": 255}]

    echo(f"after pop red = {mgr['red']}")
    echo(f"after pop non-local red = {mgr.get_from(1, 'red')}")
    echo(f"after pop locally red = {mgr.get_local('red')}")

    mgr.push_local()  # [{"red": 63}, {"red": 63}, {"red": 255}]
    slot = mgr.get_mut("red")
    if slot is not None:
        slot.value = 192  # [{"red": 192}, {"red": 63}, {"red": 255}]

    echo(f"after mut red = {mgr['red']}")

    mgr.remove("red")  # [{}, {"red": 63}, {"red": 255}]

    echo(f"after remove red = {mgr['red']}")
    if mgr.get_local("red") is None:
        echo("after remove no value set for red in local context")

    fork = mgr.fork()
    second_fork = mgr.fork_from(1)
    assert fork is not None and second_fork is not None

    echo(f"# of contexts in manager = {len(mgr)}")
    echo(f"# of contexts in fork = {len(fork)}")
    echo(f"# of contexts in second fork = {len(second_fork)}")

    mgr.remove_all("red")  # [{}, {}, {}]

    value = mgr.get("red")
    if value is None:
        echo("after remove all no value set for red")
    else:
        echo(f"after remove all red = {value}")


@cli.command()
def demo() -> None:
    """Run a short walkthrough of push, pop, fork and removal."""
    run_demo(_click.echo)


def main() -> None:
    """Console script entry point."""
    cli()
