"""Global search and per-field filters for CRUD index pages.

Query string shape::

    ?search=tolkien
    ?filter[available]=true&filter[author_id]=3
    ?filter[author_id][]=1&filter[author_id][]=2
    ?filter[publication_year_from]=1950&filter[due_date_to]=2025-01-31

Field names are checked against the model's columns and conditions are
built from column objects only.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta
from typing import Any, Dict, List

from flask import request
from sqlalchemy import func, or_, select

from .reflection import TIMESTAMP_COLUMNS, column_names, column_type

logger = logging.getLogger("elaine_crud.search")

FILTER_KEY = re.compile(r"^filter\[([^\[\]]+)\](\[\])?$")
FALSE_VALUES = {"0", "f", "false", "off", "no", "n"}
RANGE_SUFFIXES = ("_from", "_to")


def _like_pattern(term: str) -> str:
    escaped = term.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def cast_boolean(value) -> bool:
    return str(value).strip().lower() not in FALSE_VALUES


def parse_date(value) -> date | None:
    """ISO date (or datetime) from a filter value; None when malformed."""
    text = str(value or "").strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text).date() if "T" in text else date.fromisoformat(text)
    except ValueError:
        return None


class SearchMixin:
    def search_query(self) -> str:
        return (request.args.get("search") or "").strip()

    def filters(self) -> Dict[str, Any]:
        """``filter[...]`` parameters as a dict; list values for ``[]`` keys."""
        parsed: Dict[str, Any] = {}
        for key in request.args:
            match = FILTER_KEY.match(key)
            if not match:
                continue
            name, many = match.group(1), match.group(2)
            if many:
                values = [v for v in request.args.getlist(key) if v != ""]
                if values:
                    parsed[name] = values
            else:
                value = request.args.get(key, "")
                if value.strip():
                    parsed[name] = value.strip()
        return parsed

    def search_active(self) -> bool:
        return bool(self.search_query() or self.filters())

    def valid_filter_field(self, name) -> bool:
        return str(name) in column_names(self.model)

    def apply_search_and_filters(self, stmt):
        if self.search_query():
            stmt = self.apply_global_search(stmt)
        active = self.filters()
        if active:
            stmt = self.apply_filters(stmt, active)
        return stmt

    def determine_searchable_columns(self) -> List[str]:
        shown = self.determine_columns()
        searchable = []
        for name in column_names(self.model):
            if name in TIMESTAMP_COLUMNS or name not in shown:
                continue
            if column_type(self.model, name) not in ("string", "text"):
                continue
            config = self.field_config_for(name)
            if config is not None and config.searchable is False:
                continue
            searchable.append(name)
        return searchable

    def apply_global_search(self, stmt):
        columns = self.determine_searchable_columns()
        if not columns:
            return stmt
        pattern = _like_pattern(self.search_query())
        conditions = [
            func.lower(getattr(self.model, name)).like(pattern, escape="\\") for name in columns
        ]
        return stmt.where(or_(*conditions))

    def apply_filters(self, stmt, active: Dict[str, Any]):
        for name, value in active.items():
            if name.endswith(RANGE_SUFFIXES) and not self.valid_filter_field(name):
                continue
            if not self.valid_filter_field(name):
                logger.debug("Ignoring filter on unknown field %r", name)
                continue
            stmt = self.apply_field_filter(stmt, name, value)
        return self.apply_date_range_filters(stmt, active)

    def apply_field_filter(self, stmt, name: str, value):
        attr = getattr(self.model, name)
        kind = column_type(self.model, name)
        if kind in ("string", "text"):
            if isinstance(value, list):
                return stmt.where(attr.in_(value))
            return stmt.where(func.lower(attr).like(_like_pattern(value), escape="\\"))
        if kind == "boolean":
            if isinstance(value, list):
                value = value[0]
            return stmt.where(attr.is_(cast_boolean(value)))
        if kind == "integer":
            values = value if isinstance(value, list) else [value]
            numbers = []
            for item in values:
                try:
                    numbers.append(int(item))
                except (TypeError, ValueError):
                    logger.debug("Ignoring non-numeric filter value %r for %s", item, name)
            if not numbers:
                return stmt
            if isinstance(value, list):
                return stmt.where(attr.in_(numbers))
            return stmt.where(attr == numbers[0])
        if kind in ("date", "datetime"):
            day = parse_date(value if not isinstance(value, list) else value[0])
            if day is None:
                return stmt
            if kind == "datetime":
                start = datetime.combine(day, datetime.min.time())
                return stmt.where(attr >= start, attr < start + timedelta(days=1))
            return stmt.where(attr == day)
        if isinstance(value, list):
            return stmt.where(attr.in_(value))
        return stmt.where(attr == value)

    def determine_date_columns(self) -> List[str]:
        shown = self.determine_columns()
        found = []
        for name in column_names(self.model):
            if column_type(self.model, name) not in ("date", "datetime"):
                continue
            if name not in shown:
                continue
            config = self.field_config_for(name)
            if config is not None and config.filterable is False:
                continue
            found.append(name)
        return found

    def apply_date_range_filters(self, stmt, active: Dict[str, Any]):
        for name in self.determine_date_columns():
            attr = getattr(self.model, name)
            is_datetime = column_type(self.model, name) == "datetime"
            start = parse_date(active.get(f"{name}_from"))
            end = parse_date(active.get(f"{name}_to"))
            if start is not None:
                bound = datetime.combine(start, datetime.min.time()) if is_datetime else start
                stmt = stmt.where(attr >= bound)
            if end is not None:
                if is_datetime:
                    # fim inclusivo: até o último instante do dia
                    stmt = stmt.where(attr < datetime.combine(end, datetime.min.time()) + timedelta(days=1))
                else:
                    stmt = stmt.where(attr <= end)
        return stmt

    def infer_filter_type(self, name: str) -> str:
        config = self.field_config_for(name)
        if config is not None and config.filter_type:
            return config.filter_type
        kind = column_type(self.model, name)
        if kind is None:
            return "text"
        if kind == "boolean":
            return "boolean"
        if kind in ("date", "datetime"):
            return "date_range"
        if config is not None and (config.has_options or config.has_foreign_key):
            return "select"
        if kind == "integer" and name.endswith("_id"):
            return "select"
        return "text"

    def determine_filterable_columns(self) -> List[Dict[str, Any]]:
        filterable = []
        for name in self.determine_columns():
            if name in TIMESTAMP_COLUMNS:
                continue
            if column_type(self.model, name) is None:
                continue
            config = self.field_config_for(name)
            if config is not None and config.filterable is False:
                continue
            filterable.append({"name": name, "type": self.infer_filter_type(name), "config": config})
        return filterable

    def filter_options(self, name: str, config=None) -> List[tuple]:
        """``(value, label)`` choices for a select filter."""
        if config is not None and config.has_options:
            return [self.option_pair(opt) for opt in config.options]
        if config is not None and config.has_foreign_key:
            return [(str(v), label) for v, label in config.foreign_key_options(self.session)]
        attr = getattr(self.model, name)
        values = self.session.scalars(select(attr).distinct().where(attr.is_not(None))).all()
        return [(str(v), str(v)) for v in sorted(values)]

    @staticmethod
    def option_pair(option) -> tuple:
        if isinstance(option, (list, tuple)) and len(option) == 2:
            return (str(option[1]), str(option[0]))
        return (str(option), str(option))

    def total_unfiltered_count(self) -> int:
        stmt = self.apply_parent_filtering(select(func.count()).select_from(self.model))
        return self.session.scalar(stmt) or 0
