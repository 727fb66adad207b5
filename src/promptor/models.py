"""Peewee ORM model definitions"""

from datetime import datetime
from zoneinfo import ZoneInfo

from peewee import CharField, DatabaseProxy, DateTimeField, Model
from playhouse.shortcuts import ThreadSafeDatabaseMetadata
from playhouse.sqlite_ext import JSONField

UTC = ZoneInfo("UTC")

# Use DatabaseProxy for deferred database binding
database_proxy = DatabaseProxy()


class BaseModel(Model):
    """Base model class - supports thread-safe metadata"""

    class Meta:
        database = database_proxy
        model_metadata_class = ThreadSafeDatabaseMetadata


class TimestampedModel(BaseModel):
    created_at = DateTimeField(default=lambda: datetime.now(UTC))
    updated_at = DateTimeField(default=lambda: datetime.now(UTC))

    def save(self, *args, **kwargs):
        """Override save method to auto-update updated_at"""
        if self._pk is not None:
            self.updated_at = datetime.now(UTC)
        return super().save(*args, **kwargs)


class SchemaRecord(TimestampedModel):
    """A stored UI definition, replaced as a whole on every save"""

    key = CharField(unique=True)
    title = CharField(default="")
    content = JSONField()

    class Meta:
        table_name = "schemas"


class ColorSchemeRecord(TimestampedModel):
    title = CharField()
    colors = JSONField()
    created_by = CharField(default="")

    class Meta:
        table_name = "color_schemes"
