from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
import yaml  # type: ignore[import-untyped]

from schemakit.accessor import (
    InvalidPathError,
    PathIndexOutOfBounds,
    get_value,
    set_value,
)
from schemakit.inference import imply_type
from schemakit.log_utils import error_records, write_jsonl
from schemakit.pointer import InvalidPointerError
from schemakit.resolver import schema_for
from schemakit.schema.codec import SchemaDecodeError, encode_schema, load_schema
from schemakit.schema.model import Schema
from schemakit.schema.types import type_to_names
from schemakit.settings import EngineSettings, SettingsError, load_settings
from schemakit.validation import (
    SchemaValidationError,
    collect_errors,
    iter_json_files,
    validate_json_file,
    write_report,
)
from schemakit.values import UNSET, decode_value, encode_value, load_document

app = typer.Typer(
    help="Validate JSON documents and edit them through a JSON Schema",
)


def _settings(config: Path | None, **overrides: Any) -> EngineSettings:
    try:
        return load_settings(config).with_overrides(**overrides)
    except SettingsError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _schema(path: Path) -> Schema:
    try:
        return load_schema(path)
    except (SchemaDecodeError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise typer.BadParameter(f"{path}: {exc}") from exc


def _document(path: Path) -> Any:
    try:
        return load_document(path)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"{path}: Invalid JSON: {exc}") from exc
    except yaml.YAMLError as exc:
        raise typer.BadParameter(f"{path}: Invalid YAML: {exc}") from exc


def _echo_json(value: Any, indent: int) -> None:
    typer.echo(encode_value(value, indent=indent or None))


def _write_errors(
    report: Path,
    settings: EngineSettings,
    results: dict[str, list[SchemaValidationError]],
) -> None:
    if settings.report_format == "jsonl":
        records = []
        for document, errors in results.items():
            records.extend(error_records(document, errors))
        write_jsonl(report, records)
    else:
        write_report(
            report,
            {
                document: [
                    {"path": e.path, "message": e.message, "detail": e.describe()}
                    for e in errors
                ]
                for document, errors in results.items()
            },
        )


@app.command()
def validate(
    schema_path: Path = typer.Argument(..., help="Schema file (.json/.yaml)"),
    documents: list[Path] = typer.Argument(
        ..., help="Documents or directories of documents to validate"
    ),
    report: Path | None = typer.Option(
        None, help="Write every error to this file (jsonl or json)"
    ),
    max_errors: int | None = typer.Option(
        None, help="Stop after this many errors per document"
    ),
    config: Path | None = typer.Option(
        None, help="Settings YAML (defaults to $SCHEMAKIT_CONFIG)"
    ),
) -> None:
    """Validate documents against a schema; exits 1 if any is invalid."""

    settings = _settings(config, max_errors=max_errors)
    schema = _schema(schema_path)
    results: dict[str, list[SchemaValidationError]] = {}
    for doc_path in iter_json_files(documents):
        errors = validate_json_file(
            doc_path, schema, max_errors=settings.max_errors
        )
        results[str(doc_path)] = errors
        if not errors:
            typer.echo(f"{doc_path}: OK")
            continue
        for error in errors:
            typer.echo(f"{doc_path}: {error.path}: {error.describe()}", err=True)

    if not results:
        raise typer.BadParameter("No .json/.yaml documents found")
    if report is not None:
        _write_errors(report, settings, results)
        typer.echo(f"Wrote validation report to {report}")
    if any(results.values()):
        raise typer.Exit(code=1)


@app.command()
def get(
    schema_path: Path = typer.Argument(..., help="Schema file"),
    document: Path = typer.Argument(..., help="Document to read from"),
    pointer: str = typer.Argument(..., help="Pointer such as '#/a/0/b'"),
    config: Path | None = typer.Option(None, help="Settings YAML"),
) -> None:
    """Print the value stored at POINTER."""

    settings = _settings(config)
    schema = _schema(schema_path)
    missing = object()
    found = get_value(schema, pointer, _document(document), default=missing)
    if found is missing:
        typer.echo(f"Nothing at {pointer}", err=True)
        raise typer.Exit(code=1)
    _echo_json(found, settings.indent)


@app.command("set")
def set_command(
    schema_path: Path = typer.Argument(..., help="Schema file"),
    document: Path = typer.Argument(..., help="Document to update"),
    pointer: str = typer.Argument(..., help="Pointer such as '#/a/0/b'"),
    value: str = typer.Argument(..., help="New value as JSON text"),
    out: Path | None = typer.Option(
        None, help="Write the result here instead of printing it"
    ),
    check: bool = typer.Option(
        False, help="Validate the updated document and list errors by path"
    ),
    config: Path | None = typer.Option(None, help="Settings YAML"),
) -> None:
    """Store VALUE at POINTER, creating missing containers."""

    settings = _settings(config)
    schema = _schema(schema_path)
    try:
        new_value = decode_value(value)
    except ValueError as exc:
        raise typer.BadParameter(f"VALUE is not valid JSON: {exc}") from exc

    try:
        updated = set_value(schema, pointer, new_value, _document(document))
    except (InvalidPointerError, InvalidPathError, PathIndexOutOfBounds) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    if out is None:
        _echo_json(updated, settings.indent)
    else:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(
            encode_value(updated, indent=settings.indent or None) + "\n",
            encoding="utf-8",
        )
        typer.echo(f"Wrote {out}")

    if check:
        errors = collect_errors(updated, schema, max_errors=settings.max_errors)
        for path, message in errors.items():
            typer.echo(f"{path}: {message}", err=True)
        if errors:
            raise typer.Exit(code=1)


@app.command()
def infer(
    schema_path: Path = typer.Argument(..., help="Schema file"),
    pointer: str = typer.Argument("#", help="Pointer into the schema"),
    document: Path | None = typer.Option(
        None, help="Document whose value at POINTER breaks ties"
    ),
) -> None:
    """Show the concrete type the schema implies at POINTER."""

    schema = _schema(schema_path)
    value = _document(document) if document is not None else UNSET
    implied = imply_type(value, schema, pointer)
    names = type_to_names(implied.type)
    typer.echo(f"type: {encode_value(names) if names is not None else 'any'}")
    if implied.error:
        typer.echo(f"error: {implied.error}", err=True)
        raise typer.Exit(code=1)


@app.command()
def resolve(
    schema_path: Path = typer.Argument(..., help="Schema file"),
    pointer: str = typer.Argument("#", help="Pointer into the schema"),
    config: Path | None = typer.Option(None, help="Settings YAML"),
) -> None:
    """Print the dereferenced schema found at POINTER."""

    settings = _settings(config)
    schema = _schema(schema_path)
    found = schema_for(pointer, schema)
    if found is None:
        typer.echo(f"No schema at {pointer}", err=True)
        raise typer.Exit(code=1)
    _echo_json(encode_schema(found), settings.indent)


def run() -> None:
    app()


__all__ = [
    "app",
    "get",
    "infer",
    "resolve",
    "run",
    "set_command",
    "validate",
]


if __name__ == "__main__":
    run()
