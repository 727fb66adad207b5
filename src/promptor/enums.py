"""Enumeration type definitions"""

from enum import Enum


class ComponentKind(str, Enum):
    """Form input kinds"""

    TEXTINPUT = "textinput"
    TEXTAREA = "textarea"
    DROPDOWN = "dropdown"


class SegmentKind(str, Enum):
    """Classification of a template segment for highlighting"""

    LITERAL = "literal"
    RESOLVABLE = "resolvable"
    UNRESOLVABLE = "unresolvable"


class UnresolvedPolicy(str, Enum):
    """What substitution does with a placeholder that has no value"""

    KEEP = "keep"
    BLANK = "blank"


class IssueCode(str, Enum):
    EMPTY_REF = "EMPTY_REF"
    DUPLICATE_REF = "DUPLICATE_REF"
    REF_COLLISION = "REF_COLLISION"
    EMPTY_FRAGMENT_KEY = "EMPTY_FRAGMENT_KEY"
    UNKNOWN_COLOR = "UNKNOWN_COLOR"
    DROPDOWN_NO_OPTIONS = "DROPDOWN_NO_OPTIONS"
    DEFAULT_NOT_IN_OPTIONS = "DEFAULT_NOT_IN_OPTIONS"


class ExportKind(str, Enum):
    PROMPT = "prompt"
    INPUT = "input"


class SchemaFormat(str, Enum):
    JSON = "json"
    TOML = "toml"
