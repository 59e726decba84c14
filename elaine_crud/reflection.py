"""SQLAlchemy metadata lookups used by the CRUD engine.

Everything the engine knows about a model (columns, column types and
relationships) comes from here, so views never look at ``__table__``
directly. Relationship kinds follow the usual naming:

* ``belongs_to``  many-to-one, owns the foreign key column
* ``has_many``    one-to-many collection
* ``has_one``     one-to-many with ``uselist=False``
* ``habtm``       many-to-many through a secondary table
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, List, Optional

import sqlalchemy as sa
from sqlalchemy import inspect
from sqlalchemy.orm import MANYTOMANY, MANYTOONE, ONETOMANY, configure_mappers

BELONGS_TO = "belongs_to"
HAS_MANY = "has_many"
HAS_ONE = "has_one"
HABTM = "habtm"

TIMESTAMP_COLUMNS = ("id", "created_at", "updated_at")
DISPLAY_CANDIDATES = ("name", "title", "display_name", "full_name", "label", "description")


@dataclass(frozen=True)
class Relation:
    name: str
    kind: str
    target: type
    # belongs_to: local column; has_many/has_one: column on the target
    foreign_key: Optional[str] = None


def _mapper(model):
    configure_mappers()
    return inspect(model)


def column_names(model) -> List[str]:
    """Mapped column attribute names, in table order."""
    return [attr.key for attr in _mapper(model).column_attrs]


def get_column(model, name: str) -> Optional[sa.Column]:
    mapper = _mapper(model)
    if name not in mapper.column_attrs:
        return None
    return mapper.column_attrs[name].columns[0]


def column_type(model, name: str) -> Optional[str]:
    """Simplified type name of a column, or None for non-columns."""
    column = get_column(model, name)
    if column is None:
        return None
    kind = column.type
    # ordem importa: Text herda de String, Float herda de Numeric
    if isinstance(kind, sa.Boolean):
        return "boolean"
    if isinstance(kind, sa.DateTime):
        return "datetime"
    if isinstance(kind, sa.Date):
        return "date"
    if isinstance(kind, sa.Time):
        return "time"
    if isinstance(kind, sa.Integer):
        return "integer"
    if isinstance(kind, sa.Float):
        return "float"
    if isinstance(kind, sa.Numeric):
        return "decimal"
    if isinstance(kind, sa.Text):
        return "text"
    return "string"


def primary_key_name(model) -> str:
    mapper = _mapper(model)
    return mapper.get_property_by_column(mapper.primary_key[0]).key


def primary_key_value(record) -> Any:
    return getattr(record, primary_key_name(type(record)))


def relations(model) -> List[Relation]:
    """All relationships of ``model`` classified by kind."""
    mapper = _mapper(model)
    found: List[Relation] = []
    for rel in mapper.relationships:
        target = rel.mapper.class_
        if rel.direction is MANYTOONE:
            local = next(iter(rel.local_columns))
            fk = mapper.get_property_by_column(local).key
            found.append(Relation(rel.key, BELONGS_TO, target, fk))
        elif rel.direction is MANYTOMANY:
            found.append(Relation(rel.key, HABTM, target))
        elif rel.direction is ONETOMANY:
            remote = next(iter(rel.remote_side))
            kind = HAS_MANY if rel.uselist else HAS_ONE
            found.append(Relation(rel.key, kind, target, remote.key))
    return found


def relations_of_kind(model, kind: str) -> List[Relation]:
    return [rel for rel in relations(model) if rel.kind == kind]


def relation_named(model, name: str) -> Optional[Relation]:
    for rel in relations(model):
        if rel.name == name:
            return rel
    return None


def relation_for_foreign_key(model, foreign_key: str) -> Optional[Relation]:
    for rel in relations_of_kind(model, BELONGS_TO):
        if rel.foreign_key == foreign_key:
            return rel
    return None


def determine_display_field(model) -> str:
    """Best attribute to represent a record of ``model`` in lists and dropdowns.

    Preference: a well-known name column, then the first string/text column
    that is not a bookkeeping column, then the primary key.
    """
    names = column_names(model)
    for candidate in DISPLAY_CANDIDATES:
        if candidate in names:
            return candidate
    for name in names:
        if name in TIMESTAMP_COLUMNS:
            continue
        if column_type(model, name) in ("string", "text"):
            return name
    return primary_key_name(model)


def humanize(name: str) -> str:
    """``"book_copy_id"`` -> ``"Book copy"``."""
    text = str(name)
    if text.endswith("_id"):
        text = text[:-3]
    text = text.replace("_", " ").strip()
    return text[:1].upper() + text[1:]


def titleize(name: str) -> str:
    return " ".join(part.capitalize() for part in humanize(name).split())


def underscore(class_name: str) -> str:
    """``"BookCopy"`` -> ``"book_copy"``."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", class_name).lower()


def singularize(word: str) -> str:
    if word.endswith("ies"):
        return word[:-3] + "y"
    if word.endswith("s") and not word.endswith("ss"):
        return word[:-1]
    return word


def model_title(model) -> str:
    return titleize(underscore(model.__name__))


def plural_name(model) -> str:
    return getattr(model, "__tablename__", None) or underscore(model.__name__) + "s"
