"""HTML rendering of field values for index rows, show pages and read-only form fields."""

from __future__ import annotations

from datetime import date, datetime

from flask import url_for
from markupsafe import Markup, escape
from werkzeug.routing import BuildError

from .reflection import (
    BELONGS_TO,
    HABTM,
    HAS_MANY,
    HAS_ONE,
    determine_display_field,
    humanize,
    primary_key_value,
    relation_for_foreign_key,
    relation_named,
)

EMPTY = Markup('<span class="text-gray-400">—</span>')
TRUNCATE_AT = 50


def truncate(text: str, length: int = TRUNCATE_AT) -> str:
    if len(text) <= length:
        return text
    return text[: length - 3] + "..."


class DisplayHelpers:
    def field_title(self, name: str) -> str:
        config = self.field_config_for(name)
        return config.title if config is not None else humanize(name)

    def field_description(self, name: str):
        config = self.field_config_for(name)
        return config.description if config is not None else None

    def field_readonly(self, name: str) -> bool:
        config = self.field_config_for(name)
        return bool(config is not None and config.readonly)

    def display_label(self, related) -> str:
        """Text for a related record using its model's display field."""
        if related is None:
            return ""
        value = getattr(related, determine_display_field(type(related)), None)
        return "" if value is None else str(value)

    def relation_label(self, related, config, config_attr: str) -> str:
        relation_config = (getattr(config, config_attr, None) if config is not None else None) or {}
        display = relation_config.get("display") or relation_config.get("display_field")
        if callable(display):
            return str(display(related))
        if isinstance(display, str):
            value = getattr(related, display, None)
            return "" if value is None else str(value)
        return self.display_label(related)

    def record_id(self, record):
        return primary_key_value(record)

    def record_url(self, record):
        """Show page of ``record`` when its model has a registered resource."""
        name = self.resource_name_for(type(record))
        if name is None:
            return None
        try:
            return url_for(f"{name}.show", record_id=primary_key_value(record))
        except BuildError:
            return None

    def display_column_value(self, record, name: str) -> Markup:
        value = getattr(record, name, None)
        if value is None:
            return EMPTY
        if value is True:
            return Markup('<span class="text-green-600 font-bold">✓</span>')
        if value is False:
            return Markup('<span class="text-red-600 font-bold">✗</span>')
        if isinstance(value, (date, datetime)):
            return escape(value.strftime("%m/%d/%Y"))
        return escape(truncate(str(value)))

    def display_field_value(self, record, name: str) -> Markup:
        config = self.field_config_for(name)
        if config is not None and config.has_custom_display:
            return config.render_display_value(record, self)

        rel = relation_for_foreign_key(self.model, name)
        if rel is not None:
            return self.display_belongs_to(record, rel, config)

        rel = relation_named(self.model, name)
        if rel is not None:
            if rel.kind == HAS_MANY:
                return self.display_has_many(record, rel, config)
            if rel.kind == HAS_ONE:
                return self.display_has_one(record, rel, config)
            if rel.kind == HABTM:
                return self.display_habtm(record, rel, config)
            if rel.kind == BELONGS_TO:
                related = getattr(record, name, None)
                return EMPTY if related is None else escape(self.display_label(related))

        return self.display_column_value(record, name)

    def display_belongs_to(self, record, rel, config) -> Markup:
        related = getattr(record, rel.name, None)
        if related is None:
            return EMPTY
        if config is not None and config.has_foreign_key:
            label = config.label_for(related)
        else:
            label = self.display_label(related)
        href = self.record_url(related)
        if href is None:
            return escape(label)
        return Markup('<a href="{}" class="text-blue-600 hover:text-blue-800">{}</a>').format(href, label)

    def display_has_many(self, record, rel, config) -> Markup:
        items = list(getattr(record, rel.name, None) or [])
        settings = (config.has_many_config if config is not None else None) or {}
        max_preview = settings.get("max_preview_items", 3)
        count = len(items)
        if count == 0:
            return Markup('<span class="text-gray-400">0 {}</span>').format(rel.name.replace("_", " "))
        noun = rel.name.replace("_", " ")
        counter = Markup("{} {}").format(count, noun)
        target = self.resource_name_for(rel.target)
        if target is not None and rel.foreign_key:
            try:
                href = url_for(f"{target}.index", **{rel.foreign_key: primary_key_value(record)})
                counter = Markup('<a href="{}" class="text-blue-600 hover:text-blue-800">{}</a>').format(href, counter)
            except BuildError:
                pass
        preview = [self.relation_label(item, config, "has_many_config") for item in items[:max_preview]]
        if count > max_preview:
            preview.append("...")
        if not preview:
            return counter
        return Markup('{}<div class="text-xs text-gray-500">{}</div>').format(counter, ", ".join(preview))

    def display_has_one(self, record, rel, config) -> Markup:
        related = getattr(record, rel.name, None)
        if related is None:
            return EMPTY
        label = self.relation_label(related, config, "has_one_config")
        href = self.record_url(related)
        if href is None:
            return escape(truncate(label))
        return Markup('<a href="{}" class="text-blue-600 hover:text-blue-800">{}</a>').format(href, truncate(label))

    def display_habtm(self, record, rel, config) -> Markup:
        items = list(getattr(record, rel.name, None) or [])
        if not items:
            return EMPTY
        return escape(", ".join(self.relation_label(item, config, "habtm_config") for item in items))

    def calculate_layout(self, record, fields):
        """One row per record, every field one column wide."""
        return [[{"field_name": name, "colspan": 1, "rowspan": 1} for name in fields]]

    def calculate_layout_header(self, fields):
        fields = list(fields) + ["ROW-ACTIONS"]
        return [{"width": "minmax(100px, 1fr)", "field_name": name} for name in fields]

    def grid_template(self, header_layout) -> str:
        return " ".join(column["width"] for column in header_layout)
