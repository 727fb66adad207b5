"""Reading and writing UI definition files (JSON or TOML)."""

import json
import logging
from pathlib import Path
from typing import Any

import tomlkit
from pydantic import ValidationError
from tomlkit.exceptions import TOMLKitError

from .enums import SchemaFormat
from .errors import PromptorException
from .schema import Schema

logger = logging.getLogger(__name__)


def detect_format(path: Path | str) -> SchemaFormat:
    suffix = Path(path).suffix.lower()
    if suffix == ".toml":
        return SchemaFormat.TOML
    if suffix == ".json":
        return SchemaFormat.JSON
    raise PromptorException(f"Unsupported schema file type: {path}")


def parse_schema(content: str, fmt: SchemaFormat) -> Schema:
    try:
        if fmt == SchemaFormat.TOML:
            data = tomlkit.loads(content).unwrap()
        else:
            data = json.loads(content)
    except (TOMLKitError, json.JSONDecodeError) as e:
        raise PromptorException(f"Invalid {fmt.value.upper()} syntax: {e}") from e

    try:
        return Schema.model_validate(data)
    except ValidationError as e:
        error_lines = ["Schema validation failed:"]
        for error in e.errors():
            loc = " -> ".join(str(item) for item in error["loc"])
            error_lines.append(f"  - {loc}: {error['msg']}")
        raise PromptorException("\n".join(error_lines)) from e


def load_schema_file(path: Path | str) -> Schema:
    path = Path(path)
    if not path.is_file():
        raise PromptorException(f"Schema file not found: {path}")

    logger.debug(f"Loading schema file: {path}")
    return parse_schema(path.read_text(encoding="utf-8"), detect_format(path))


def _drop_none(value: Any) -> Any:
    # TOML has no null
    if isinstance(value, dict):
        return {k: _drop_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_drop_none(v) for v in value if v is not None]
    return value


def dump_schema(schema: Schema, fmt: SchemaFormat = SchemaFormat.JSON) -> str:
    data = schema.to_dict()
    if SchemaFormat(fmt) == SchemaFormat.TOML:
        return tomlkit.dumps(_drop_none(data))
    return json.dumps(data, indent=2, ensure_ascii=False)
