from __future__ import annotations

import importlib
import json
from pathlib import Path

from typer.testing import CliRunner

cli_app = importlib.import_module("schemakit.cli.app")

runner = CliRunner()

SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "tags": {"type": "array", "items": {"type": "string"}},
        "value": {"anyOf": [{"type": "integer"}, {"type": "string"}]},
    },
    "required": ["name"],
}


def _write(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_validate_reports_ok(tmp_path: Path) -> None:
    schema = _write(tmp_path / "schema.json", SCHEMA)
    doc = _write(tmp_path / "doc.json", {"name": "a", "tags": ["x"]})

    result = runner.invoke(cli_app.app, ["validate", str(schema), str(doc)])

    assert result.exit_code == 0
    assert "OK" in result.output


def test_validate_writes_jsonl_report(tmp_path: Path) -> None:
    schema = _write(tmp_path / "schema.json", SCHEMA)
    docs = tmp_path / "docs"
    docs.mkdir()
    _write(docs / "good.json", {"name": "a"})
    _write(docs / "bad.json", {"tags": ["x", 1]})
    report = tmp_path / "out" / "errors.jsonl"

    result = runner.invoke(
        cli_app.app,
        ["validate", str(schema), str(docs), "--report", str(report)],
    )

    assert result.exit_code == 1
    records = [
        json.loads(line)
        for line in report.read_text(encoding="utf-8").splitlines()
    ]
    assert len(records) == 1
    assert records[0]["document"].endswith("bad.json")
    assert records[0]["path"] == "#"
    assert records[0]["message"] == (
        "Object doesn't have all the required properties"
    )


def test_validate_uses_config_report_format(tmp_path: Path) -> None:
    schema = _write(tmp_path / "schema.json", SCHEMA)
    doc = _write(tmp_path / "doc.json", {"name": 1})
    config = tmp_path / "schemakit.yaml"
    config.write_text("report_format: json\n", encoding="utf-8")
    report = tmp_path / "report.json"

    result = runner.invoke(
        cli_app.app,
        [
            "validate",
            str(schema),
            str(doc),
            "--report",
            str(report),
            "--config",
            str(config),
        ],
    )

    assert result.exit_code == 1
    loaded = json.loads(report.read_text(encoding="utf-8"))
    assert loaded[str(doc)][0]["detail"] == (
        "Invalid property 'name': Expecting a String but instead got: 1"
    )


def test_get_prints_value(tmp_path: Path) -> None:
    schema = _write(tmp_path / "schema.json", SCHEMA)
    doc = _write(tmp_path / "doc.json", {"name": "a", "tags": ["x", "y"]})

    result = runner.invoke(
        cli_app.app, ["get", str(schema), str(doc), "#/tags/1"]
    )

    assert result.exit_code == 0
    assert json.loads(result.output) == "y"


def test_malformed_documents_are_usage_errors(tmp_path: Path) -> None:
    schema = _write(tmp_path / "schema.json", SCHEMA)
    broken_json = tmp_path / "broken.json"
    broken_json.write_text("{not json", encoding="utf-8")
    broken_yaml = tmp_path / "broken.yaml"
    broken_yaml.write_text("a: [1, 2\n", encoding="utf-8")

    for args in (
        ["get", str(schema), str(broken_json), "#/name"],
        ["set", str(schema), str(broken_yaml), "#/name", '"x"'],
        ["infer", str(schema), "#/name", "--document", str(broken_json)],
    ):
        result = runner.invoke(cli_app.app, args)
        assert result.exit_code == 2, args
        assert isinstance(result.exception, SystemExit)


def test_wrongly_typed_config_is_a_usage_error(tmp_path: Path) -> None:
    schema = _write(tmp_path / "schema.json", SCHEMA)
    doc = _write(tmp_path / "doc.json", {"name": "a"})
    config = tmp_path / "settings.yaml"
    config.write_text("max_errors: lots\n", encoding="utf-8")

    result = runner.invoke(
        cli_app.app,
        ["validate", str(schema), str(doc), "--config", str(config)],
    )

    assert result.exit_code == 2
    assert isinstance(result.exception, SystemExit)


def test_get_missing_value_fails(tmp_path: Path) -> None:
    schema = _write(tmp_path / "schema.json", SCHEMA)
    doc = _write(tmp_path / "doc.json", {"name": "a"})

    result = runner.invoke(cli_app.app, ["get", str(schema), str(doc), "#/tags"])

    assert result.exit_code == 1


def test_set_writes_updated_document(tmp_path: Path) -> None:
    schema = _write(tmp_path / "schema.json", SCHEMA)
    doc = _write(tmp_path / "doc.json", {"name": "a", "tags": ["x"]})
    out = tmp_path / "updated.json"

    result = runner.invoke(
        cli_app.app,
        ["set", str(schema), str(doc), "#/tags/1", '"y"', "--out", str(out)],
    )

    assert result.exit_code == 0
    assert json.loads(out.read_text(encoding="utf-8")) == {
        "name": "a",
        "tags": ["x", "y"],
    }


def test_set_rejects_gaps(tmp_path: Path) -> None:
    schema = _write(tmp_path / "schema.json", SCHEMA)
    doc = _write(tmp_path / "doc.json", {"name": "a", "tags": []})

    result = runner.invoke(
        cli_app.app, ["set", str(schema), str(doc), "#/tags/2", '"y"']
    )

    assert result.exit_code == 1


def test_set_check_lists_errors(tmp_path: Path) -> None:
    schema = _write(tmp_path / "schema.json", SCHEMA)
    doc = _write(tmp_path / "doc.json", {"name": "a"})
    out = tmp_path / "updated.json"

    result = runner.invoke(
        cli_app.app,
        ["set", str(schema), str(doc), "#/name", "5", "--out", str(out), "--check"],
    )

    assert result.exit_code == 1
    assert "#/name: Expecting a String but instead got: 5" in result.output


def test_infer_uses_document_value(tmp_path: Path) -> None:
    schema = _write(tmp_path / "schema.json", SCHEMA)
    doc = _write(tmp_path / "doc.json", {"name": "a", "value": "text"})

    result = runner.invoke(
        cli_app.app,
        ["infer", str(schema), "#/value", "--document", str(doc)],
    )

    assert result.exit_code == 0
    assert 'type: "string"' in result.output


def test_resolve_prints_schema(tmp_path: Path) -> None:
    schema = _write(tmp_path / "schema.json", SCHEMA)

    result = runner.invoke(cli_app.app, ["resolve", str(schema), "#/tags"])

    assert result.exit_code == 0
    assert json.loads(result.output) == {
        "type": "array",
        "items": {"type": "string"},
    }
