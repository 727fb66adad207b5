"""Placeholder scanning, classification and substitution.

Placeholders are ``{{ref}}`` tokens: a literal ``{{``, one or more
characters other than ``}``, then ``}}``. The ref is taken verbatim. There is
no nesting and no escape syntax.

Everything here is a pure function of its arguments, cheap enough to re-run
on every keystroke of an editor: one left-to-right regex scan, no
backtracking, no state kept between calls.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Collection, Iterator, Mapping, Optional

from .consts import PLACEHOLDER_CLOSE, PLACEHOLDER_OPEN, PLACEHOLDER_PATTERN
from .enums import SegmentKind, UnresolvedPolicy
from .schema import Schema
from .utils import to_text


@dataclass(frozen=True)
class Placeholder:
    ref: str
    start: int
    end: int

    @property
    def raw(self) -> str:
        return PLACEHOLDER_OPEN + self.ref + PLACEHOLDER_CLOSE


@dataclass(frozen=True)
class Segment:
    """A slice of template text, either literal or a placeholder occurrence."""

    kind: SegmentKind
    text: str
    start: int
    end: int
    ref: Optional[str] = None

    @property
    def is_placeholder(self) -> bool:
        return self.kind != SegmentKind.LITERAL

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "text": self.text,
            "start": self.start,
            "end": self.end,
            "ref": self.ref,
        }


@dataclass(frozen=True)
class PublishCheck:
    publishable: bool
    offending: list[str] = field(default_factory=list)


def iter_placeholders(template: str) -> Iterator[Placeholder]:
    for match in PLACEHOLDER_PATTERN.finditer(template):
        yield Placeholder(ref=match.group(1), start=match.start(), end=match.end())


def classify(template: str, known_refs: Collection[str]) -> Iterator[Segment]:
    """Split a template into literal and placeholder segments.

    Each placeholder occurrence is tagged resolvable when its ref is in
    ``known_refs`` and unresolvable otherwise. Joining the ``text`` of every
    segment gives back the template unchanged. Calling again starts a fresh
    scan.
    """
    position = 0
    for placeholder in iter_placeholders(template):
        if placeholder.start > position:
            yield Segment(
                SegmentKind.LITERAL,
                template[position : placeholder.start],
                position,
                placeholder.start,
            )

        kind = (
            SegmentKind.RESOLVABLE
            if placeholder.ref in known_refs
            else SegmentKind.UNRESOLVABLE
        )
        yield Segment(
            kind,
            template[placeholder.start : placeholder.end],
            placeholder.start,
            placeholder.end,
            ref=placeholder.ref,
        )
        position = placeholder.end

    if position < len(template):
        yield Segment(SegmentKind.LITERAL, template[position:], position, len(template))


def find_unresolvable(template: str, known_refs: Collection[str]) -> list[str]:
    """Refs used in ``template`` that are not known, in first-seen order."""
    offending: list[str] = []
    for placeholder in iter_placeholders(template):
        if placeholder.ref not in known_refs and placeholder.ref not in offending:
            offending.append(placeholder.ref)
    return offending


def check_publishable(template: str, known_refs: Collection[str]) -> PublishCheck:
    offending = find_unresolvable(template, known_refs)
    return PublishCheck(publishable=not offending, offending=offending)


def substitute(
    template: str,
    form_state: Mapping[str, Any],
    fragments: Optional[Mapping[str, str]] = None,
    unresolved: UnresolvedPolicy = UnresolvedPolicy.KEEP,
) -> str:
    """Replace every placeholder in a single pass.

    Lookup order per occurrence:

    1. a ref present in ``form_state`` uses that value, coerced to text
       (``None`` becomes an empty string), even if it is empty;
    2. otherwise a fragment with that key is inserted as-is;
    3. otherwise ``unresolved`` decides: ``KEEP`` leaves ``{{ref}}`` in the
       output, ``BLANK`` drops it.

    Inserted values are never scanned again.
    """
    fragments = fragments or {}
    unresolved = UnresolvedPolicy(unresolved)

    def replace(match) -> str:
        ref = match.group(1)
        if ref in form_state:
            return to_text(form_state[ref])
        if ref in fragments:
            return to_text(fragments[ref])
        if unresolved == UnresolvedPolicy.BLANK:
            return ""
        return match.group(0)

    return PLACEHOLDER_PATTERN.sub(replace, template)


def collect_known_refs(schema: Schema) -> set[str]:
    return schema.known_refs()


class Resolver:
    """Placeholder operations bound to one schema."""

    def __init__(
        self, schema: Schema, unresolved: UnresolvedPolicy = UnresolvedPolicy.KEEP
    ):
        self.schema = schema
        self.unresolved = UnresolvedPolicy(unresolved)
        self.known_refs = collect_known_refs(schema)

    def classify(self, template: Optional[str] = None) -> Iterator[Segment]:
        return classify(self._template(template), self.known_refs)

    def check_publishable(self, template: Optional[str] = None) -> PublishCheck:
        return check_publishable(self._template(template), self.known_refs)

    def render(
        self,
        form_state: Mapping[str, Any],
        fragments: Optional[Mapping[str, str]] = None,
    ) -> str:
        if fragments is None:
            fragments = self.schema.fragments
        return substitute(
            self.schema.template_text, form_state, fragments, self.unresolved
        )

    def _template(self, template: Optional[str]) -> str:
        return self.schema.template_text if template is None else template
