"""Required-field gate for the generate action."""

from typing import Any, Mapping

from .schema import Schema


def is_filled(value: Any) -> bool:
    return value is not None and value != ""


def missing_required(schema: Schema, form_state: Mapping[str, Any]) -> list[str]:
    """Refs of required components without a filled value, in schema order.

    A required component with an empty ref can never be filled, so it is
    always reported (as ``""``).
    """
    missing = []
    for _, component in schema.iter_components():
        if not component.required:
            continue
        if not component.ref or not is_filled(form_state.get(component.ref)):
            missing.append(component.ref)
    return missing


def can_generate(schema: Schema, form_state: Mapping[str, Any]) -> bool:
    return not missing_required(schema, form_state)
