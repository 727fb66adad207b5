"""Form schema ("UI definition") models and structural checks.

A schema is a set of sections holding input components, a template with
``{{ref}}`` placeholders, named text fragments and an opaque color table.
Component refs and fragment keys share one placeholder namespace.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, Iterator, Literal, Optional, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from .consts import (
    COLOR_MAX_SLOTS,
    COLOR_MIN_SLOTS,
    FALLBACK_COLOR_KEY,
    REF_GROUP_PATTERN,
    REF_SEPARATOR,
    REF_SEPARATOR_PATTERN,
)
from .enums import ComponentKind, IssueCode


def slugify_ref(label: str) -> str:
    """Derive a placeholder ref from a component label.

    Strips ``(...)`` and ``[...]`` groups, collapses every run of
    non-alphanumeric characters into a single ``_``, trims leading and
    trailing ``_`` and lowercases. Total over all strings and idempotent.

    Examples:
        >>> slugify_ref("Work Performance (Q3 Review)!")
        'work_performance'
        >>> slugify_ref("Overall/Notes")
        'overall_notes'
        >>> slugify_ref("")
        ''
    """
    ref = REF_GROUP_PATTERN.sub("", label)
    ref = REF_SEPARATOR_PATTERN.sub(REF_SEPARATOR, ref)
    return ref.strip(REF_SEPARATOR).lower()


class _ComponentBase(BaseModel):
    model_config = ConfigDict(extra="ignore")

    label: str = ""
    ref: str = ""
    required: bool = False

    @model_validator(mode="before")
    @classmethod
    def derive_ref(cls, values):
        if not isinstance(values, dict):
            return values

        if not values.get("ref") and values.get("label"):
            values = {**values, "ref": slugify_ref(values["label"])}
        return values

    @property
    def kind(self) -> ComponentKind:
        return ComponentKind(self.type)


class TextInputComponent(_ComponentBase):
    type: Literal["textinput"] = "textinput"


class TextAreaComponent(_ComponentBase):
    type: Literal["textarea"] = "textarea"


class DropdownComponent(_ComponentBase):
    type: Literal["dropdown"] = "dropdown"
    options: list[str] = Field(default_factory=list)
    default: Optional[str] = None


Component = Annotated[
    Union[TextInputComponent, TextAreaComponent, DropdownComponent],
    Field(discriminator="type"),
]

COMPONENT_TYPES: dict[ComponentKind, type[_ComponentBase]] = {
    ComponentKind.TEXTINPUT: TextInputComponent,
    ComponentKind.TEXTAREA: TextAreaComponent,
    ComponentKind.DROPDOWN: DropdownComponent,
}


def make_component(
    label: str, kind: ComponentKind = ComponentKind.TEXTINPUT, **fields
) -> Component:
    """Build a component of the given kind whose ref is derived from its label."""
    return COMPONENT_TYPES[ComponentKind(kind)](
        label=label, ref=slugify_ref(label), **fields
    )


def change_kind(component: Component, kind: ComponentKind) -> Component:
    """Return a copy of ``component`` as another kind.

    Label, ref and required carry over. Options and default only survive
    when the new kind is still a dropdown.
    """
    kind = ComponentKind(kind)
    if component.kind == kind:
        return component.model_copy()

    common = {
        "label": component.label,
        "ref": component.ref,
        "required": component.required,
    }
    return COMPONENT_TYPES[kind](**common)


class Section(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # False renders the section without a heading
    header: Union[str, Literal[False], None] = None
    fixed: bool = False
    color_key: str = Field(default="", alias="color")
    components: list[Component] = Field(default_factory=list)

    @property
    def heading(self) -> Optional[str]:
        if isinstance(self.header, str) and self.header:
            return self.header
        return None


class Schema(BaseModel):
    """A complete UI definition."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    template_text: str = Field(default="", alias="template")
    fragments: dict[str, str] = Field(default_factory=dict)
    colors: dict[str, list[str]] = Field(default_factory=dict)
    sections: dict[str, Section] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("ui", "sections"),
        serialization_alias="ui",
    )

    @field_validator("colors")
    @classmethod
    def validate_colors(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        for key, slots in v.items():
            if not COLOR_MIN_SLOTS <= len(slots) <= COLOR_MAX_SLOTS:
                raise ValueError(
                    f"Color '{key}' must have {COLOR_MIN_SLOTS}-{COLOR_MAX_SLOTS} "
                    f"style values, got {len(slots)}"
                )
        return v

    def iter_components(self) -> Iterator[tuple[str, Component]]:
        for section_key, section in self.sections.items():
            for component in section.components:
                yield section_key, component

    def component_refs(self) -> list[str]:
        return [component.ref for _, component in self.iter_components()]

    def known_refs(self) -> set[str]:
        """Every ref a placeholder may resolve to: component refs and fragment keys."""
        refs = {ref for ref in self.component_refs() if ref}
        refs.update(key for key in self.fragments if key)
        return refs

    def find_component(self, ref: str) -> Optional[Component]:
        for _, component in self.iter_components():
            if component.ref == ref:
                return component
        return None

    def resolve_colors(self, section: Section) -> list[str]:
        return self.colors.get(section.color_key) or self.colors.get(
            FALLBACK_COLOR_KEY, []
        )

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


@dataclass(frozen=True)
class SchemaIssue:
    code: IssueCode
    message: str
    ref: str | None = None
    section: str | None = None

    @property
    def blocking(self) -> bool:
        return self.code in BLOCKING_ISSUES

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "ref": self.ref,
            "section": self.section,
            "blocking": self.blocking,
        }


BLOCKING_ISSUES = frozenset(
    {
        IssueCode.EMPTY_REF,
        IssueCode.DUPLICATE_REF,
        IssueCode.REF_COLLISION,
        IssueCode.EMPTY_FRAGMENT_KEY,
    }
)


def find_schema_issues(schema: Schema) -> list[SchemaIssue]:
    """Check a schema's structure without raising.

    Blocking issues (empty or clashing refs) make a schema unsavable.
    The rest are warnings about presentation details.
    """
    issues: list[SchemaIssue] = []
    seen: dict[str, str] = {}
    duplicated: set[str] = set()

    for section_key, component in schema.iter_components():
        if not component.ref:
            issues.append(
                SchemaIssue(
                    IssueCode.EMPTY_REF,
                    f"Component '{component.label}' in section '{section_key}' has no ref",
                    ref="",
                    section=section_key,
                )
            )
            continue

        if component.ref in seen and component.ref not in duplicated:
            duplicated.add(component.ref)
            issues.append(
                SchemaIssue(
                    IssueCode.DUPLICATE_REF,
                    f"Ref '{component.ref}' is used by more than one component",
                    ref=component.ref,
                    section=section_key,
                )
            )
        seen.setdefault(component.ref, section_key)

        if isinstance(component, DropdownComponent):
            if not component.options:
                issues.append(
                    SchemaIssue(
                        IssueCode.DROPDOWN_NO_OPTIONS,
                        f"Dropdown '{component.ref}' has no options",
                        ref=component.ref,
                        section=section_key,
                    )
                )
            elif component.default is not None and component.default not in component.options:
                issues.append(
                    SchemaIssue(
                        IssueCode.DEFAULT_NOT_IN_OPTIONS,
                        f"Default '{component.default}' of '{component.ref}' is not an option",
                        ref=component.ref,
                        section=section_key,
                    )
                )

    for key in schema.fragments:
        if not key:
            issues.append(
                SchemaIssue(IssueCode.EMPTY_FRAGMENT_KEY, "A fragment has an empty key", ref="")
            )
        elif key in seen:
            issues.append(
                SchemaIssue(
                    IssueCode.REF_COLLISION,
                    f"Fragment key '{key}' collides with a component ref",
                    ref=key,
                    section=seen[key],
                )
            )

    for section_key, section in schema.sections.items():
        if section.color_key and section.color_key not in schema.colors:
            issues.append(
                SchemaIssue(
                    IssueCode.UNKNOWN_COLOR,
                    f"Section '{section_key}' uses unknown color '{section.color_key}'",
                    section=section_key,
                )
            )

    return issues
