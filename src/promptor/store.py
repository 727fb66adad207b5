"""Schema and color scheme persistence."""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from peewee import PeeweeException
from pydantic import ValidationError

from .consts import MSG_SCHEMA_NOT_FOUND
from .errors import SchemaNotFound, StorageException, UnpublishableSchema
from .models import ColorSchemeRecord, SchemaRecord, database_proxy
from .placeholders import check_publishable
from .schema import Schema, find_schema_issues

logger = logging.getLogger(__name__)

SCHEMA_KEY_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]{0,63}$")


@dataclass
class SchemaSummary:
    key: str
    title: str
    section_count: int
    updated_at: Optional[datetime]


@dataclass
class ColorScheme:
    id: int
    title: str
    colors: dict[str, list[str]]
    created_by: str = ""


def validate_schema_key(key: str) -> None:
    if not key or not SCHEMA_KEY_PATTERN.match(key):
        raise StorageException(
            f"Invalid schema key '{key}': use letters, digits, '_' or '-' (max 64)"
        )


class SchemaStore:
    """Stores UI definitions keyed by an opaque string.

    Saving replaces the whole definition. A definition is only accepted when
    every template placeholder resolves and no refs clash.
    """

    def list_schemas(self) -> list[SchemaSummary]:
        try:
            records = list(SchemaRecord.select().order_by(SchemaRecord.key))
        except PeeweeException as e:
            raise StorageException(f"Failed to list schemas: {e}") from e

        return [
            SchemaSummary(
                key=record.key,
                title=record.title,
                section_count=len((record.content or {}).get("ui", {})),
                updated_at=record.updated_at,
            )
            for record in records
        ]

    def find(self, key: str) -> Optional[Schema]:
        try:
            record = SchemaRecord.get_or_none(SchemaRecord.key == key)
        except PeeweeException as e:
            raise StorageException(f"Failed to load schema '{key}': {e}") from e

        if record is None:
            return None

        try:
            return Schema.model_validate(record.content)
        except ValidationError as e:
            raise StorageException(f"Stored schema '{key}' is corrupt: {e}") from e

    def get(self, key: str) -> Schema:
        schema = self.find(key)
        if schema is None:
            raise SchemaNotFound(key)
        return schema

    def save(self, key: str, schema: Schema) -> None:
        """Persist ``schema`` under ``key``, replacing any previous version.

        Raises:
            UnpublishableSchema: If the template references unknown refs or
                the schema has blocking structural issues
            StorageException: If the key is invalid or the write fails
        """
        validate_schema_key(key)

        check = check_publishable(schema.template_text, schema.known_refs())
        blocking = [issue for issue in find_schema_issues(schema) if issue.blocking]
        if not check.publishable or blocking:
            logger.warning(
                f"Refusing to save schema '{key}': "
                f"offending={check.offending}, issues={len(blocking)}"
            )
            raise UnpublishableSchema(key, check.offending, blocking)

        content = schema.to_dict()
        try:
            with database_proxy.atomic():
                record = SchemaRecord.get_or_none(SchemaRecord.key == key)
                if record is None:
                    SchemaRecord.create(key=key, title=schema.title, content=content)
                    logger.info(f"Schema created: {key}")
                else:
                    record.title = schema.title
                    record.content = content
                    record.save()
                    logger.info(f"Schema replaced: {key}")
        except PeeweeException as e:
            raise StorageException(f"Failed to save schema '{key}': {e}") from e

    def delete(self, key: str) -> bool:
        try:
            deleted = SchemaRecord.delete().where(SchemaRecord.key == key).execute()
        except PeeweeException as e:
            raise StorageException(f"Failed to delete schema '{key}': {e}") from e

        if deleted:
            logger.info(f"Schema deleted: {key}")
        return bool(deleted)

    def list_color_schemes(self) -> list[ColorScheme]:
        try:
            records = list(ColorSchemeRecord.select().order_by(ColorSchemeRecord.id))
        except PeeweeException as e:
            raise StorageException(f"Failed to list color schemes: {e}") from e

        return [self._to_color_scheme(record) for record in records]

    def get_color_scheme(self, scheme_id: int) -> Optional[ColorScheme]:
        try:
            record = ColorSchemeRecord.get_or_none(ColorSchemeRecord.id == scheme_id)
        except PeeweeException as e:
            raise StorageException(f"Failed to load color scheme {scheme_id}: {e}") from e

        return self._to_color_scheme(record) if record else None

    def save_color_scheme(
        self,
        title: str,
        colors: dict[str, list[str]],
        created_by: str = "",
        scheme_id: Optional[int] = None,
    ) -> int:
        # Reuse the schema color validation so bad slot counts never get stored
        try:
            Schema(colors=colors)
        except ValidationError as e:
            raise StorageException(f"Invalid color scheme '{title}': {e}") from e

        try:
            with database_proxy.atomic():
                if scheme_id is None:
                    record = ColorSchemeRecord.create(
                        title=title, colors=colors, created_by=created_by
                    )
                else:
                    record = ColorSchemeRecord.get_or_none(
                        ColorSchemeRecord.id == scheme_id
                    )
                    if record is None:
                        raise StorageException(f"Color scheme not found: {scheme_id}")
                    record.title = title
                    record.colors = colors
                    record.save()
        except PeeweeException as e:
            raise StorageException(f"Failed to save color scheme '{title}': {e}") from e

        logger.info(f"Color scheme saved: {record.id}")
        return record.id

    def delete_color_scheme(self, scheme_id: int) -> bool:
        try:
            deleted = (
                ColorSchemeRecord.delete()
                .where(ColorSchemeRecord.id == scheme_id)
                .execute()
            )
        except PeeweeException as e:
            raise StorageException(f"Failed to delete color scheme {scheme_id}: {e}") from e

        if deleted:
            logger.info(f"Color scheme deleted: {scheme_id}")
        return bool(deleted)

    @staticmethod
    def _to_color_scheme(record: ColorSchemeRecord) -> ColorScheme:
        return ColorScheme(
            id=record.id,
            title=record.title,
            colors=record.colors,
            created_by=record.created_by,
        )


def load_schema_for_display(
    store: SchemaStore, key: str
) -> tuple[Optional[Schema], Optional[str]]:
    """Look up a schema for a fill-out page.

    Returns the schema and ``None``, or ``None`` and a message to show when
    the key is unknown.
    """
    schema = store.find(key)
    if schema is None:
        logger.info(f"Schema lookup missed: {key}")
        return None, MSG_SCHEMA_NOT_FOUND.format(key=key)
    return schema, None
