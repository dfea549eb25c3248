"""CLI entry points for schemakit."""

import importlib
from typing import Any, cast

_cli_mod = importlib.import_module("schemakit.cli.app")
app = cast(Any, _cli_mod).app
get = cast(Any, _cli_mod).get
infer = cast(Any, _cli_mod).infer
resolve = cast(Any, _cli_mod).resolve
run = cast(Any, _cli_mod).run
set_command = cast(Any, _cli_mod).set_command
validate = cast(Any, _cli_mod).validate

__all__ = [
    "app",
    "get",
    "infer",
    "resolve",
    "run",
    "set_command",
    "validate",
]
