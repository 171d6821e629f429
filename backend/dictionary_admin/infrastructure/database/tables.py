from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.engine import Engine

metadata = MetaData()
languages_table = Table(
    "languages",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("code", String(32), nullable=False, unique=True),
    Column("is_default", Boolean, nullable=False, default=False),
)
dictionary_items_table = Table(
    "dictionary_items",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("correlation_key", Uuid, nullable=False, unique=True),
    Column("key", String(450), nullable=False),
    # Parent linkage goes through the correlation key, never the numeric id.
    Column(
        "parent_key",
        Uuid,
        ForeignKey("dictionary_items.correlation_key"),
        nullable=True,
        index=True,
    ),
    UniqueConstraint("key", name="uq_dictionary_items_key"),
)
dictionary_translations_table = Table(
    "dictionary_translations",
    metadata,
    Column("id", Integer, primary_key=True),
    Column(
        "item_id",
        Integer,
        ForeignKey("dictionary_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column(
        "language_code",
        String(32),
        ForeignKey("languages.code", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("value", Text, nullable=False, default=""),
    UniqueConstraint(
        "item_id", "language_code", name="uq_dictionary_translations_item_language"
    ),
)


def bootstrap_database(bind: Engine) -> None:
    metadata.create_all(bind=bind)
