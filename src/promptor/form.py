"""Fill-out session: FormState, generation and exports."""

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from .consts import EXPORT_INPUT_SUFFIX, EXPORT_JSON_INDENT, EXPORT_PROMPT_SUFFIX
from .enums import ExportKind, UnresolvedPolicy
from .errors import GenerationBlocked, PromptorException, StorageException
from .placeholders import substitute
from .schema import Schema
from .validator import can_generate, missing_required

logger = logging.getLogger(__name__)


class FormSession:
    """One fill-out of a schema.

    The FormState starts empty and lives only as long as the session unless
    it is exported.
    """

    def __init__(
        self,
        schema: Schema,
        fragments: Optional[Mapping[str, str]] = None,
        unresolved: UnresolvedPolicy = UnresolvedPolicy.KEEP,
    ):
        self.schema = schema
        self.fragments = dict(schema.fragments if fragments is None else fragments)
        self.unresolved = UnresolvedPolicy(unresolved)
        self._values: dict[str, Any] = {}

    @property
    def values(self) -> dict[str, Any]:
        return dict(self._values)

    def set_value(self, ref: str, value: Any) -> None:
        self._values[ref] = value

    def update(self, values: Mapping[str, Any]) -> None:
        self._values.update(values)

    def clear_value(self, ref: str) -> None:
        self._values.pop(ref, None)

    @property
    def missing_required(self) -> list[str]:
        return missing_required(self.schema, self._values)

    @property
    def can_generate(self) -> bool:
        return can_generate(self.schema, self._values)

    def generate(self) -> str:
        """Substitute the current answers and fragments into the template.

        Raises:
            GenerationBlocked: If any required field is still empty
        """
        missing = self.missing_required
        if missing:
            raise GenerationBlocked(missing)

        return substitute(
            self.schema.template_text, self._values, self.fragments, self.unresolved
        )

    def export_input_json(self) -> str:
        return json.dumps(self._values, indent=EXPORT_JSON_INDENT, ensure_ascii=False)

    def load_input_json(self, content: str) -> None:
        """Replace the FormState with a previously exported one."""
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise PromptorException(f"Invalid input JSON: {e}") from e

        if not isinstance(data, dict):
            raise PromptorException("Input JSON must be an object of ref to value")
        self._values = data


def export_filename(key: str, kind: ExportKind) -> str:
    """File name used when saving a generated prompt or the answers.

    Examples:
        >>> export_filename("eval", ExportKind.PROMPT)
        'eval_prompt.md'
        >>> export_filename("eval", ExportKind.INPUT)
        'eval_input.json'
    """
    suffix = EXPORT_PROMPT_SUFFIX if ExportKind(kind) == ExportKind.PROMPT else EXPORT_INPUT_SUFFIX
    return f"{key}{suffix}"


def write_export(directory: Path, filename: str, content: str) -> str:
    path = Path(directory) / filename

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise StorageException(f"Failed to write export to {path}: {e}") from e

    logger.info(f"Export written: {path}")
    return str(path.resolve())
