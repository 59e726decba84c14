"""CSV, XLSX and JSON export of the records currently listed on an index page."""

from __future__ import annotations

import csv
import io
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List

from flask import Response, flash, jsonify, redirect, request, url_for
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from sqlalchemy import func, select

from .reflection import (
    BELONGS_TO,
    HABTM,
    HAS_MANY,
    HAS_ONE,
    column_type,
    plural_name,
    relation_for_foreign_key,
    relation_named,
    titleize,
)

EXPORT_FORMATS = {
    "csv": "text/csv",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "json": "application/json",
}

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(start_color="DDDDDD", end_color="DDDDDD", fill_type="solid")


def format_export_value(value) -> str:
    """Plain text rendition of a scalar column value."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M")
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, Decimal):
        return str(value)
    return str(value)


class ExportMixin:
    def export(self, fmt: str | None = None):
        fmt = (fmt or request.args.get("format") or "csv").lower()
        if fmt not in EXPORT_FORMATS:
            flash(f"Unsupported export format: {fmt}", "alert")
            return redirect(url_for(self.endpoint("index")), code=303)

        stmt = self.apply_sorting(self.apply_search_and_filters(self.apply_parent_filtering(select(self.model))))
        total = self.session.scalar(select(func.count()).select_from(stmt.order_by(None).subquery())) or 0
        limit = self.max_export_records
        if total > limit:
            flash(
                f"Cannot export more than {limit} records. "
                "Please apply filters to reduce the number of records.",
                "alert",
            )
            return redirect(url_for(self.endpoint("index"), **self.preserved_params()), code=303)

        records = self.session.scalars(stmt).unique().all()
        columns = self.determine_columns()
        self.logger.info("Exporting %d %s as %s", len(records), plural_name(self.model), fmt)

        if fmt == "json":
            return jsonify(self.generate_json(records, columns))
        if fmt == "xlsx":
            body = self.generate_xlsx(records, columns)
        else:
            body = self.generate_csv(records, columns)
        return Response(
            body,
            mimetype=EXPORT_FORMATS[fmt],
            headers={"Content-Disposition": f'attachment; filename="{self.export_filename(fmt)}"'},
        )

    def generate_csv(self, records, columns: List[str]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow([self.field_title(col) for col in columns])
        for record in records:
            writer.writerow([self.export_field_value(record, col) for col in columns])
        return buffer.getvalue()

    def generate_xlsx(self, records, columns: List[str]) -> bytes:
        workbook = Workbook()
        sheet = workbook.active
        # limite do Excel: 31 caracteres
        sheet.title = titleize(plural_name(self.model))[:31]
        for col_idx, column in enumerate(columns, start=1):
            cell = sheet.cell(row=1, column=col_idx, value=self.field_title(column))
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
        for row_idx, record in enumerate(records, start=2):
            for col_idx, column in enumerate(columns, start=1):
                sheet.cell(row=row_idx, column=col_idx, value=self.export_field_value(record, column))
        stream = io.BytesIO()
        workbook.save(stream)
        return stream.getvalue()

    def generate_json(self, records, columns: List[str]) -> List[Dict[str, Any]]:
        return [{col: self.export_field_value(record, col) for col in columns} for record in records]

    def export_field_value(self, record, name: str) -> str:
        config = self.field_config_for(name)

        rel = relation_for_foreign_key(self.model, name)
        if rel is not None:
            related = getattr(record, rel.name, None)
            if related is None:
                return ""
            if config is not None and config.has_foreign_key:
                return config.label_for(related)
            return self.display_label(related)

        rel = relation_named(self.model, name)
        if rel is not None:
            value = getattr(record, name, None)
            if rel.kind == HAS_MANY:
                return str(len(value or []))
            if rel.kind == HAS_ONE:
                return "" if value is None else self.relation_label(value, config, "has_one_config")
            if rel.kind == HABTM:
                return ", ".join(self.relation_label(item, config, "habtm_config") for item in value or [])
            if rel.kind == BELONGS_TO:
                return "" if value is None else self.display_label(value)

        value = getattr(record, name, None)
        if column_type(self.model, name) == "date" and isinstance(value, datetime):
            value = value.date()
        return format_export_value(value)

    def export_filename(self, extension: str) -> str:
        suffix = "_filtered" if self.search_active() else ""
        return f"{plural_name(self.model)}{suffix}_{date.today().strftime('%Y-%m-%d')}.{extension}"
