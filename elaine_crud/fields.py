"""Per-field configuration for CRUD views.

A view lists its customisations as ``field(...)`` entries::

    class BooksView(CrudView):
        model = Book
        fields = [
            field("price", title="Price", display_as=format_currency),
            field("available", title="Availability"),
        ]

Display and edit callbacks may be callables or the name of a method on the
view (resolved per request).
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from flask import current_app, has_app_context
from markupsafe import Markup, escape
from sqlalchemy import select
from sqlalchemy.sql import Select

from .errors import ConfigurationError
from .reflection import humanize, primary_key_name, primary_key_value

logger = logging.getLogger("elaine_crud.fields")

OPTION_NAMES = {
    "title",
    "description",
    "readonly",
    "default_value",
    "display_as",
    "edit_as",
    "options",
    "foreign_key",
    "has_many",
    "has_one",
    "habtm",
    "visible",
    "searchable",
    "filterable",
    "filter_type",
    "validators",
    "grid_column_span",
    "grid_row_span",
    "nested_create",
}

INPUT_TYPES = {
    "string": "text_field",
    "text": "text_area",
    "integer": "number_field",
    "decimal": "number_field",
    "float": "number_field",
    "boolean": "check_box",
    "date": "date_field",
    "datetime": "datetime_local_field",
}


class FieldConfiguration:
    def __init__(self, field_name: str, **options: Any):
        self.field_name = str(field_name)
        self.title: str = humanize(self.field_name)
        self.description: Optional[str] = None
        self.readonly: bool = False
        self.default_value = None
        self.display_callback = None
        self.edit_callback = None
        self.options: Optional[List[Any]] = None
        self.foreign_key_config: Optional[Dict[str, Any]] = None
        self.has_many_config: Optional[Dict[str, Any]] = None
        self.has_one_config: Optional[Dict[str, Any]] = None
        self.habtm_config: Optional[Dict[str, Any]] = None
        # None = default rules, True/False = forced
        self.visible: Optional[bool] = None
        self.searchable: Optional[bool] = None
        self.filterable: Optional[bool] = None
        self.filter_type: Optional[str] = None
        self.validators: List[Any] = []
        self.grid_column_span: int = 1
        self.grid_row_span: int = 1
        self.nested_create: Optional[Dict[str, Any]] = None
        self.configure(**options)

    def __repr__(self):  # pragma: no cover
        return f"<FieldConfiguration {self.field_name}>"

    def configure(self, **options: Any) -> "FieldConfiguration":
        """Apply options after construction; returns self so calls chain.

        ``field("price").configure(title="Price").configure(readonly=True)``
        """
        unknown = set(options) - OPTION_NAMES
        if unknown:
            raise ConfigurationError(
                f"Unknown option(s) for field '{self.field_name}': {', '.join(sorted(unknown))}"
            )
        for name, value in options.items():
            if name == "display_as":
                self.display_callback = value
            elif name == "edit_as":
                self.edit_callback = value
            elif name in ("foreign_key", "has_many", "has_one", "habtm"):
                setattr(self, f"{name}_config", dict(value) if value is not None else None)
            elif name == "nested_create":
                self.nested_create = {} if value is True else (dict(value) if value else None)
            elif name == "readonly":
                self.readonly = bool(value)
            elif name == "validators":
                self.validators = list(value or [])
            elif name == "title":
                self.title = value or humanize(self.field_name)
            else:
                setattr(self, name, value)
        return self

    @property
    def has_options(self) -> bool:
        return bool(self.options)

    @property
    def has_foreign_key(self) -> bool:
        return bool(self.foreign_key_config)

    @property
    def has_custom_display(self) -> bool:
        return self.display_callback is not None

    @property
    def has_custom_edit(self) -> bool:
        return self.edit_callback is not None

    @property
    def has_nested_create(self) -> bool:
        return self.nested_create is not None and self.has_foreign_key

    @property
    def is_relation_display(self) -> bool:
        """Fields showing has_many / has_one data are never edited directly."""
        return self.has_many_config is not None or self.has_one_config is not None

    def _resolve(self, callback, view) -> Callable:
        if callable(callback):
            return callback
        if isinstance(callback, str):
            method = getattr(view, callback, None)
            if method is None:
                raise ConfigurationError(
                    f"Callback method '{callback}' not found on {type(view).__name__}"
                )
            return method
        raise ConfigurationError(
            f"Callback for '{self.field_name}' must be callable or a method name, "
            f"got {type(callback).__name__}"
        )

    def _failure_markup(self, exc: Exception, fallback) -> Markup:
        if has_app_context() and current_app.debug:
            return Markup('<span class="text-red-500 text-xs">Error: {}</span>').format(exc)
        return escape("" if fallback is None else fallback)

    def render_display_value(self, record, view) -> Markup:
        """Run the display callback with ``(value, record)``.

        Plain strings are escaped; callbacks return ``Markup`` for HTML.
        """
        value = getattr(record, self.field_name, None)
        try:
            result = self._resolve(self.display_callback, view)(value, record)
        except ConfigurationError:
            raise
        except Exception as exc:
            logger.warning("Display callback for %s failed: %s", self.field_name, exc)
            return self._failure_markup(exc, value)
        if result is None:
            return Markup("")
        return escape(result)

    def render_edit_field(self, record, view, form_field=None) -> Markup:
        """Run the edit callback with ``(value, record, form_field)``."""
        value = getattr(record, self.field_name, None)
        try:
            result = self._resolve(self.edit_callback, view)(value, record, form_field)
        except ConfigurationError:
            raise
        except Exception as exc:
            logger.warning("Edit callback for %s failed: %s", self.field_name, exc)
            if form_field is not None and not (has_app_context() and current_app.debug):
                return Markup(form_field())
            return self._failure_markup(exc, value)
        return escape("" if result is None else result)

    def foreign_key_options(self, session) -> List[Tuple[Any, str]]:
        """``(value, label)`` pairs for the foreign key dropdown."""
        if not self.foreign_key_config:
            return []
        config = self.foreign_key_config
        model = config.get("model")
        if model is None:
            raise ConfigurationError(f"foreign_key for '{self.field_name}' needs a model")
        scope = config.get("scope")
        if scope is not None:
            rows = scope()
            if isinstance(rows, Select):
                rows = session.scalars(rows).all()
        else:
            pk = getattr(model, primary_key_name(model))
            rows = session.scalars(select(model).order_by(pk)).all()
        return [(primary_key_value(row), self.label_for(row)) for row in rows]

    def label_for(self, related) -> str:
        display = (self.foreign_key_config or {}).get("display")
        if related is None:
            return ""
        if callable(display):
            return str(display(related))
        if isinstance(display, str):
            value = getattr(related, display, None)
            return "" if value is None else str(value)
        return str(related)

    def resolve_default_value(self, view=None):
        """Static default, or the result of calling a callable default."""
        if self.default_value is None:
            return None
        if callable(self.default_value):
            return self.default_value()
        return self.default_value

    @staticmethod
    def default_input_type(column_type: Optional[str]) -> str:
        return INPUT_TYPES.get(column_type or "string", "text_field")


def field(field_name: str, **options: Any) -> FieldConfiguration:
    return FieldConfiguration(field_name, **options)


def has_many_relation(relation_name: str, **options: Any) -> FieldConfiguration:
    """Configuration for a has_many collection (count and preview)."""
    options.setdefault("has_many", {})
    return FieldConfiguration(relation_name, **options)
