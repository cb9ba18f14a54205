"""
yttkit command line.

Commands:

- parse: print a template's AST as JSON
- fmt: re-serialize templates in canonical layout
- annotations: list annotations with their owning key paths
- update: rewrite annotation text (e.g. a multi-line data assignment)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated

import typer

from yttkit._version import __version__
from yttkit.core.config import ParseOptions, StringifyOptions, YttkitConfig, find_config, load_config
from yttkit.core.errors import ParseError, YttError
from yttkit.core.ir import AnnotationKind, DocumentNode
from yttkit.core.parser import parse_template
from yttkit.core.query import format_code_assignment, iter_annotations, replace_annotation_text
from yttkit.core.stringifier import stringify_document

app = typer.Typer(
    help="Parse, format and edit ytt templates without losing #@ annotations.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print the version and exit."""
    if value:
        typer.echo(f"yttkit {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version and exit"),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output to stderr")] = False,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="yttkit.toml to use (default: nearest one)"),
    ] = None,
) -> None:
    """yttkit - ytt template toolkit."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        ctx.obj = load_config(config or find_config(Path.cwd()))
    except YttError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


def _config(ctx: typer.Context) -> YttkitConfig:
    if isinstance(ctx.obj, YttkitConfig):
        return ctx.obj
    return YttkitConfig()


def _parse_options(ctx: typer.Context, strict: bool | None) -> ParseOptions:
    options = _config(ctx).parse
    if strict is not None:
        options = options.model_copy(update={"strict": strict})
    return options


def _format_options(ctx: typer.Context, indent: int | None = None) -> StringifyOptions:
    options = _config(ctx).format
    if "trailing_newline" not in options.model_fields_set:
        # Files written by the CLI end with a newline unless configured otherwise
        options = options.model_copy(update={"trailing_newline": True})
    if indent is not None:
        options = options.model_copy(update={"indent": indent})
    return options


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        typer.echo(f"Error: cannot read {path}: {e}", err=True)
        raise typer.Exit(code=1)


def _load(ctx: typer.Context, path: Path, strict: bool | None) -> DocumentNode:
    try:
        return parse_template(_read(path), _parse_options(ctx, strict), file=path)
    except ParseError as e:
        typer.echo(f"Parse error: {e}", err=True)
        raise typer.Exit(code=1)


StrictOption = Annotated[
    bool | None,
    typer.Option("--strict/--no-strict", help="Fail on invalid YAML instead of using the fallback parser"),
]


@app.command("parse")
def parse_command(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Template to parse")],
    strict: StrictOption = None,
) -> None:
    """Print the parsed AST of a template as JSON."""
    document = _load(ctx, file, strict)
    typer.echo(document.model_dump_json(indent=2))


@app.command("fmt")
def fmt_command(
    ctx: typer.Context,
    files: Annotated[list[Path], typer.Argument(help="Templates to format")],
    indent: Annotated[int | None, typer.Option("--indent", "-i", min=1, help="Spaces per level")] = None,
    check: Annotated[bool, typer.Option("--check", help="Exit 1 if any file would change")] = False,
    write: Annotated[bool, typer.Option("--write", "-w", help="Rewrite files in place")] = False,
    strict: StrictOption = None,
) -> None:
    """Re-serialize templates in canonical layout."""
    options = _format_options(ctx, indent)
    changed: list[Path] = []

    for path in files:
        original = _read(path)
        formatted = stringify_document(_load(ctx, path, strict), options)
        if not (write or check):
            typer.echo(formatted, nl=not formatted.endswith("\n"))
        if formatted == original:
            continue
        changed.append(path)

        if write:
            path.write_text(formatted, encoding="utf-8")
            typer.echo(f"✓ Formatted {path}")

    if check and changed:
        for path in changed:
            typer.echo(f"Would reformat {path}", err=True)
        raise typer.Exit(code=1)


@app.command("annotations")
def annotations_command(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Template to inspect")],
    kind: Annotated[
        AnnotationKind | None, typer.Option("--kind", "-k", help="Only list annotations of this kind")
    ] = None,
    strict: StrictOption = None,
) -> None:
    """List annotations with the key path that owns them."""
    document = _load(ctx, file, strict)
    found = list(iter_annotations(document, kind))

    if not found:
        typer.echo("No annotations found.")
        return

    for path, annotation in found:
        owner = ".".join(path) if path else "(document)"
        first_line, *rest = annotation.text.split("\n")
        suffix = f"  (+{len(rest)} lines)" if rest else ""
        typer.echo(f"  {owner:30s} [{annotation.kind.value}] {first_line}{suffix}")


@app.command("update")
def update_command(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Template to edit")],
    match: Annotated[str, typer.Option("--match", "-m", help="Substring identifying the annotation")],
    value: Annotated[str | None, typer.Option("--value", help="New annotation text")] = None,
    json_file: Annotated[
        Path | None, typer.Option("--json-file", help="JSON data for a `NAME = {...}` assignment")
    ] = None,
    name: Annotated[str | None, typer.Option("--name", help="Assignment name used with --json-file")] = None,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Write here instead of stdout")] = None,
    strict: StrictOption = None,
) -> None:
    """Replace the text of matching annotations and print the result."""
    if (value is None) == (json_file is None):
        typer.echo("Error: pass exactly one of --value or --json-file", err=True)
        raise typer.Exit(code=1)

    if json_file is not None:
        try:
            data = json.loads(_read(json_file))
        except json.JSONDecodeError as e:
            typer.echo(f"Error: invalid JSON in {json_file}: {e}", err=True)
            raise typer.Exit(code=1)
        value = format_code_assignment(name or match, data)

    document = _load(ctx, file, strict)
    count = replace_annotation_text(document, match, value or "")
    if count == 0:
        typer.echo(f"Error: no annotation contains {match!r}", err=True)
        raise typer.Exit(code=1)

    text = stringify_document(document, _format_options(ctx))
    if output is not None:
        output.write_text(text, encoding="utf-8")
        typer.echo(f"✓ Updated {count} annotation(s), saved to {output}")
    else:
        typer.echo(text, nl=not text.endswith("\n"))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
