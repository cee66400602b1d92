"""
Main CLI entry point for dotstore.

Provides the command-line interface using Click. Every command takes the
snapshot FILE to operate on; the store name defaults to the file name up
to its first dot and can be forced with ``--name``.
"""

import json as _json
import logging as _logging
import os as _os
import pathlib as _pathlib
import sys as _sys
import typing as _typing

import click as _click
import pydantic as _pydantic
import rich.console as _rich_console
import rich.syntax as _rich_syntax
import rich.table as _rich_table
import yaml as _yaml

import dotstore
import dotstore.config as config
import dotstore.store as store
import dotstore.store.snapshot as snapshot
import dotstore.tree as tree

# Custom Click context settings for better help formatting
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}

_SNAPSHOT_FILE = _click.Path(dir_okay=False, path_type=_pathlib.Path)


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(dotstore.__version__, "-v", "--version", prog_name="dotstore")
@_click.option(
    "--name",
    type=str,
    default=None,
    help="Store name (defaults to the snapshot file name up to its first dot)",
)
@_click.pass_context
def cli(ctx: _click.Context, name: str | None) -> None:
    """dotstore - hierarchical key/value stores persisted as YAML snapshots.

    Keys are dotted paths. A trailing ':' reads a branch raw (primary
    values included), a trailing '.' reads it clean.

    \b
    Examples:
        dotstore set prefs.yaml ui.theme dark
        dotstore get prefs.yaml ui:
        dotstore flatten prefs.yaml
    """
    try:
        settings = config.Settings()
    except _pydantic.ValidationError as e:
        raise _click.ClickException(f"Invalid DOTSTORE_ settings: {e}") from e

    _logging.basicConfig(
        level=settings.log_level_number,
        format="%(levelname)s %(name)s: %(message)s",
    )

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["name"] = name
    ctx.obj["logger"] = _logging.getLogger("dotstore.cli")


def _open_store(ctx: _click.Context, path: _pathlib.Path, *, autosave: bool = False) -> store.PersistentStore:
    """Open the store at ``path`` with the CLI settings.

    Raises:
        click.ClickException: If the snapshot cannot be loaded.
    """
    settings: config.Settings = ctx.obj["settings"]
    try:
        opened = settings.open_store(path, ctx.obj["name"], logger=ctx.obj["logger"])
    except store.StoreError as e:
        raise _click.ClickException(str(e)) from e
    return opened.set_autosave(autosave)


def _should_use_color() -> bool:
    """Use color only on a terminal, and never when NO_COLOR is set."""
    if _os.environ.get("NO_COLOR") is not None:
        return False
    return _sys.stdout.isatty()


def _print_yaml(data: _typing.Any) -> None:
    """Print data as YAML, with syntax highlighting on a terminal."""
    yaml_text = _yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)
    if not _should_use_color():
        _click.echo(yaml_text, nl=False)
        return

    console = _rich_console.Console()
    syntax = _rich_syntax.Syntax(
        yaml_text,
        "yaml",
        theme="monokai",
        background_color="default",
    )
    console.print(syntax)


def _print_json(data: _typing.Any) -> None:
    _click.echo(_json.dumps(data, indent=2, ensure_ascii=False, default=str))


def _print_value(value: _typing.Any, as_json: bool) -> None:
    """Print a single value: scalars bare, containers as YAML or JSON."""
    if as_json:
        _print_json(value)
    elif isinstance(value, dict | list):
        _print_yaml(value)
    else:
        _click.echo(value)


# =============================================================================
# Read Commands
# =============================================================================


@cli.command()
@_click.argument("path", type=_SNAPSHOT_FILE)
@_click.option(
    "--raw/--clean",
    default=True,
    help="Include primary value markers (default) or strip them",
)
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.pass_context
def show(ctx: _click.Context, path: _pathlib.Path, raw: bool, as_json: bool) -> None:
    """Show the whole store."""
    data = _open_store(ctx, path).to_dict(raw=raw)
    if as_json:
        _print_json(data)
    else:
        _print_yaml(data)


@cli.command()
@_click.argument("path", type=_SNAPSHOT_FILE)
@_click.argument("key")
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.pass_context
def get(ctx: _click.Context, path: _pathlib.Path, key: str, as_json: bool) -> None:
    """Print the value at KEY.

    \b
    Examples:
        dotstore get prefs.yaml ui.theme
        dotstore get prefs.yaml ui:      # raw branch
        dotstore get prefs.yaml ui.      # clean branch
    """
    opened = _open_store(ctx, path)
    try:
        value = opened[key]
    except tree.EmptyKeyError as e:
        raise _click.BadParameter(str(e), param_hint="KEY") from e
    except KeyError:
        raise _click.ClickException(f"Key not found: {key}") from None
    _print_value(value, as_json)


@cli.command()
@_click.argument("path", type=_SNAPSHOT_FILE)
@_click.option("-d", "--delimiter", default=".", show_default=True, help="Delimiter of the output keys")
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.pass_context
def flatten(ctx: _click.Context, path: _pathlib.Path, delimiter: str, as_json: bool) -> None:
    """List every leaf of the store under its full path."""
    if not delimiter:
        raise _click.BadParameter("Delimiter cannot be empty.", param_hint="--delimiter")

    flat = _open_store(ctx, path).flatten(delimiter)
    if as_json:
        _print_json(flat)
        return

    table = _rich_table.Table(title=str(path))
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value")
    for key, value in flat.items():
        table.add_row(key, repr(value))

    console = _rich_console.Console(no_color=not _should_use_color())
    console.print(table)


@cli.command()
@_click.argument("path", type=_SNAPSHOT_FILE)
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def info(path: _pathlib.Path, as_json: bool) -> None:
    """Show the metadata of a snapshot file."""
    if not path.is_file():
        raise _click.ClickException(f"No snapshot at {path}")

    try:
        loaded = snapshot.parse(path.read_text(encoding="utf-8"), path)
    except (OSError, store.StoreError) as e:
        raise _click.ClickException(str(e)) from e

    metadata = loaded.model_dump(exclude={"data"})
    metadata["keys"] = len(loaded.data)
    metadata["verified"] = loaded.verify()

    if as_json:
        _print_json(metadata)
        return
    for field, value in metadata.items():
        _click.echo(f"{field + ':':<11}{value}")


# =============================================================================
# Write Commands
# =============================================================================


@cli.command(name="set")
@_click.argument("path", type=_SNAPSHOT_FILE)
@_click.argument("key")
@_click.argument("value")
@_click.pass_context
def set_(ctx: _click.Context, path: _pathlib.Path, key: str, value: str) -> None:
    """Set KEY to VALUE and save.

    VALUE is read as YAML, so numbers, booleans and flow collections
    keep their type.

    \b
    Examples:
        dotstore set prefs.yaml ui.theme dark
        dotstore set prefs.yaml ui.size 12
        dotstore set prefs.yaml ui.fonts "[mono, sans]"
    """
    try:
        parsed = _yaml.safe_load(value)
    except _yaml.YAMLError as e:
        raise _click.BadParameter(f"Not a YAML value: {e}", param_hint="VALUE") from e

    try:
        with _open_store(ctx, path, autosave=True) as opened:
            opened.set(key, parsed)
    except tree.EmptyKeyError as e:
        raise _click.BadParameter(str(e), param_hint="KEY") from e
    except store.StoreError as e:
        raise _click.ClickException(str(e)) from e
    _click.echo(f"Set {key} in {path}")


@cli.command()
@_click.argument("path", type=_SNAPSHOT_FILE)
@_click.argument("keys", nargs=-1, required=True)
@_click.pass_context
def delete(ctx: _click.Context, path: _pathlib.Path, keys: tuple[str, ...]) -> None:
    """Delete one or more KEYS and save."""
    if not path.is_file():
        raise _click.ClickException(f"No snapshot at {path}")

    opened = _open_store(ctx, path)
    try:
        opened.delete(list(keys))
    except tree.EmptyKeyError as e:
        raise _click.BadParameter(str(e), param_hint="KEYS") from e

    try:
        saved = opened.save()
    except store.StoreError as e:
        raise _click.ClickException(str(e)) from e
    _click.echo(f"Deleted {len(keys)} key(s) from {path}" if saved else "Nothing to delete")


def main() -> None:
    """Main entry point with correct program name."""
    cli(prog_name="dotstore")


if __name__ == "__main__":
    main()
