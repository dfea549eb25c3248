from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Mapping

from schemakit.validation import SchemaValidationError


def ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def write_jsonl(path: Path, records: Iterable[Mapping[str, object]]) -> None:
    ensure_parent(path)
    with path.open("w", encoding="utf-8") as handle:
        for record in records:
            handle.write(json.dumps(record, ensure_ascii=False))
            handle.write("\n")


def error_records(
    document: str, errors: Iterable[SchemaValidationError]
) -> list[dict[str, object]]:
    return [
        {
            "document": document,
            "path": error.path,
            "message": error.message,
            "detail": error.describe(),
        }
        for error in errors
    ]


__all__ = ["ensure_parent", "error_records", "write_jsonl"]
