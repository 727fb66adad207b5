"""Authoring session for UI definitions.

Sections and components live in dicts keyed by stable handles with separate
order lists, so an edit touches one entry instead of rebuilding the whole
structure. ``build()`` produces an immutable ``Schema`` snapshot for checking,
previewing or saving.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from .consts import DEFAULT_COLORS, PLACEHOLDER_CLOSE, PLACEHOLDER_OPEN
from .enums import ComponentKind
from .errors import EditorException
from .placeholders import Segment, check_publishable, classify, find_unresolvable
from .schema import (
    Component,
    DropdownComponent,
    Schema,
    SchemaIssue,
    Section,
    change_kind,
    find_schema_issues,
    make_component,
    slugify_ref,
)

if TYPE_CHECKING:
    from .store import SchemaStore


def _new_handle() -> str:
    return uuid.uuid4().hex


@dataclass
class SectionDraft:
    key: str = ""
    header: Any = ""
    fixed: bool = False
    color_key: str = ""
    component_handles: list[str] = field(default_factory=list)


class SchemaEditor:
    def __init__(
        self,
        title: str = "",
        template: str = "",
        colors: Optional[dict[str, list[str]]] = None,
    ):
        self.title = title
        self.template = template
        if colors is None:
            colors = DEFAULT_COLORS
        self.colors = {key: list(slots) for key, slots in colors.items()}
        self.fragments: dict[str, str] = {}

        self._sections: dict[str, SectionDraft] = {}
        self._section_order: list[str] = []
        self._components: dict[str, Component] = {}
        self._component_section: dict[str, str] = {}

    @classmethod
    def from_schema(cls, schema: Schema) -> "SchemaEditor":
        editor = cls(
            title=schema.title, template=schema.template_text, colors=schema.colors
        )
        editor.fragments = dict(schema.fragments)

        for section_key, section in schema.sections.items():
            handle = editor._insert_section(
                SectionDraft(
                    key=section_key,
                    header=section.header,
                    fixed=section.fixed,
                    color_key=section.color_key,
                )
            )
            for component in section.components:
                editor._insert_component(handle, component.model_copy())
        return editor

    # ---------------------------------------------------------------- sections

    def section_handles(self) -> list[str]:
        return list(self._section_order)

    def section(self, handle: str) -> SectionDraft:
        try:
            return self._sections[handle]
        except KeyError:
            raise EditorException(f"Unknown section handle: {handle}") from None

    def add_section(
        self,
        header: Any = "",
        fixed: bool = False,
        color: Optional[str] = None,
        key: str = "",
    ) -> str:
        """Append a section holding one blank required text input."""
        if color is None:
            color = next(iter(self.colors), "")

        handle = self._insert_section(
            SectionDraft(key=key, header=header, fixed=fixed, color_key=color)
        )
        self.add_component(handle)
        return handle

    def remove_section(self, handle: str) -> None:
        draft = self.section(handle)
        for component_handle in draft.component_handles:
            del self._components[component_handle]
            del self._component_section[component_handle]
        del self._sections[handle]
        self._section_order.remove(handle)

    def update_section(self, handle: str, **fields) -> None:
        draft = self.section(handle)
        allowed = {"key", "header", "fixed", "color_key"}
        unknown = set(fields) - allowed
        if unknown:
            raise EditorException(f"Unknown section fields: {', '.join(sorted(unknown))}")
        for name, value in fields.items():
            setattr(draft, name, value)

    def move_section(self, handle: str, index: int) -> None:
        self.section(handle)
        self._section_order.remove(handle)
        self._section_order.insert(index, handle)

    # -------------------------------------------------------------- components

    def component_handles(self, section_handle: str) -> list[str]:
        return list(self.section(section_handle).component_handles)

    def component(self, handle: str) -> Component:
        try:
            return self._components[handle]
        except KeyError:
            raise EditorException(f"Unknown component handle: {handle}") from None

    def add_component(
        self,
        section_handle: str,
        label: str = "",
        kind: ComponentKind = ComponentKind.TEXTINPUT,
        required: bool = True,
    ) -> str:
        self.section(section_handle)
        return self._insert_component(
            section_handle, make_component(label, kind, required=required)
        )

    def remove_component(self, handle: str) -> None:
        self.component(handle)
        section_handle = self._component_section.pop(handle)
        self._sections[section_handle].component_handles.remove(handle)
        del self._components[handle]

    def move_component(self, handle: str, index: int) -> None:
        self.component(handle)
        handles = self._sections[self._component_section[handle]].component_handles
        handles.remove(handle)
        handles.insert(index, handle)

    def set_label(self, handle: str, label: str) -> None:
        """Change a label and re-derive the component's ref from it."""
        self._update(handle, label=label, ref=slugify_ref(label))

    def set_ref(self, handle: str, ref: str) -> None:
        self._update(handle, ref=ref)

    def set_required(self, handle: str, required: bool) -> None:
        self._update(handle, required=required)

    def set_kind(self, handle: str, kind: ComponentKind) -> None:
        self._components[handle] = change_kind(self.component(handle), kind)

    def set_options(self, handle: str, options: list[str]) -> None:
        self._require_dropdown(handle)
        self._update(handle, options=list(options))

    def set_default(self, handle: str, default: Optional[str]) -> None:
        self._require_dropdown(handle)
        self._update(handle, default=default)

    # --------------------------------------------------------------- fragments

    def set_fragment(self, key: str, body: str) -> None:
        self.fragments[key] = body

    def rename_fragment(self, old: str, new: str) -> None:
        """Rename a fragment in place, keeping its position.

        Fragment keys share the placeholder namespace with component refs,
        so the new key must be non-empty and unused by either.
        """
        if old not in self.fragments:
            raise EditorException(f"Unknown fragment: {old}")
        if new == old:
            return
        if not new:
            raise EditorException("Fragment key cannot be empty")
        if new in self.fragments:
            raise EditorException(f"Fragment already exists: {new}")
        if new in {component.ref for component in self._components.values()}:
            raise EditorException(f"Fragment key clashes with a component ref: {new}")
        self.fragments = {
            (new if key == old else key): body for key, body in self.fragments.items()
        }

    def remove_fragment(self, key: str) -> None:
        self.fragments.pop(key, None)

    # ---------------------------------------------------------------- template

    def insert_ref(self, ref: str, position: Optional[int] = None) -> None:
        """Insert ``{{ref}}`` at a character offset (end of template by default)."""
        if position is None:
            position = len(self.template)
        position = max(0, min(position, len(self.template)))
        token = PLACEHOLDER_OPEN + ref + PLACEHOLDER_CLOSE
        self.template = self.template[:position] + token + self.template[position:]

    def all_refs(self) -> list[str]:
        """Component refs then fragment keys, in display order, skipping blanks."""
        refs = [
            self._components[component_handle].ref
            for section_handle in self._section_order
            for component_handle in self._sections[section_handle].component_handles
        ]
        refs.extend(self.fragments)
        return [ref for ref in refs if ref]

    def known_refs(self) -> set[str]:
        return set(self.all_refs())

    def highlight(self) -> list[Segment]:
        return list(classify(self.template, self.known_refs()))

    def invalid_refs(self) -> list[str]:
        return find_unresolvable(self.template, self.known_refs())

    # ----------------------------------------------------------------- output

    def build(self) -> Schema:
        sections: dict[str, Section] = {}
        for index, handle in enumerate(self._section_order, start=1):
            draft = self._sections[handle]
            key = self._section_key(draft, index, sections)
            sections[key] = Section(
                header=draft.header,
                fixed=draft.fixed,
                color_key=draft.color_key,
                components=[
                    self._components[component_handle]
                    for component_handle in draft.component_handles
                ],
            )

        return Schema(
            title=self.title,
            template_text=self.template,
            fragments=dict(self.fragments),
            colors=dict(self.colors),
            sections=sections,
        )

    def issues(self) -> list[SchemaIssue]:
        return find_schema_issues(self.build())

    def can_save(self) -> bool:
        schema = self.build()
        if not check_publishable(schema.template_text, schema.known_refs()).publishable:
            return False
        return not any(issue.blocking for issue in find_schema_issues(schema))

    def save(self, store: SchemaStore, key: str) -> Schema:
        schema = self.build()
        store.save(key, schema)
        return schema

    # ---------------------------------------------------------------- helpers

    def _insert_section(self, draft: SectionDraft) -> str:
        handle = _new_handle()
        self._sections[handle] = draft
        self._section_order.append(handle)
        return handle

    def _insert_component(self, section_handle: str, component: Component) -> str:
        handle = _new_handle()
        self._components[handle] = component
        self._component_section[handle] = section_handle
        self._sections[section_handle].component_handles.append(handle)
        return handle

    def _update(self, handle: str, **fields) -> None:
        self._components[handle] = self.component(handle).model_copy(update=fields)

    def _require_dropdown(self, handle: str) -> None:
        if not isinstance(self.component(handle), DropdownComponent):
            raise EditorException(f"Component {handle} is not a dropdown")

    @staticmethod
    def _section_key(draft: SectionDraft, index: int, taken: dict) -> str:
        header = draft.header if isinstance(draft.header, str) else ""
        base = draft.key or slugify_ref(header) or f"section{index}"
        key = base
        suffix = 2
        while key in taken:
            key = f"{base}_{suffix}"
            suffix += 1
        return key
