"""Exception definitions for Promptor application"""


class PromptorException(Exception):
    """Base exception for all Promptor application errors.

    All custom exceptions in the Promptor application inherit from this class.
    The template engine itself never raises: unresolvable placeholders and
    missing required fields are reported as values. These exceptions belong to
    the collaborators around the engine (storage, sessions, CLI, API).
    """

    pass


class ConfigException(PromptorException):
    """Raised when configuration validation or loading fails.

    Use this exception when:
    - The configuration file cannot be found
    - The TOML syntax is invalid
    - Configuration validation fails (missing required fields, invalid values)
    """

    pass


class StorageException(PromptorException):
    """Raised when schemas, color schemes or exports cannot be persisted.

    Use this exception when:
    - A database write fails
    - A stored record cannot be decoded back into a schema
    - An export file cannot be written
    """

    pass


class SchemaNotFound(PromptorException):
    """Raised when a schema key is requested but not present in storage."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Schema not found: {key}")


class UnpublishableSchema(PromptorException):
    """Raised when saving a schema whose template or structure is invalid.

    Carries the offending placeholder refs and the blocking structural issues
    so that callers can show them without re-running the checks.
    """

    def __init__(self, key: str, offending: list[str], issues: list | None = None):
        self.key = key
        self.offending = list(offending)
        self.issues = list(issues or [])

        parts = []
        if self.offending:
            parts.append(f"unresolvable refs: {', '.join(self.offending)}")
        if self.issues:
            parts.append("; ".join(issue.message for issue in self.issues))
        super().__init__(f"Cannot save schema '{key}': {' | '.join(parts)}")


class GenerationBlocked(PromptorException):
    """Raised when generation is requested while required fields are empty."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(
            f"Required fields are not filled: {', '.join(repr(r) for r in self.missing)}"
        )


class EditorException(PromptorException):
    """Raised when an editor operation targets an unknown handle or a
    component kind that does not support it (e.g. options on a text input).
    """

    pass
