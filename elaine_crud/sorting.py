"""URL-driven sorting for CRUD index pages.

``?sort=<column>&direction=asc|desc``. Only real column names are accepted;
anything else falls back to the view's ``default_sort`` so user input never
reaches the ORDER BY clause as text.
"""

from __future__ import annotations

from flask import request

from .reflection import column_names, primary_key_name

DIRECTIONS = ("asc", "desc")


class SortingMixin:
    def current_sort_column(self) -> str:
        requested = request.args.get("sort", "")
        if requested and self.valid_sort_column(requested):
            return requested
        column, _ = self.default_sort
        return column or primary_key_name(self.model)

    def current_sort_direction(self) -> str:
        requested = request.args.get("direction", "")
        if requested in DIRECTIONS:
            return requested
        _, direction = self.default_sort
        return direction if direction in DIRECTIONS else "asc"

    @staticmethod
    def toggle_sort_direction(current_direction: str) -> str:
        return "desc" if current_direction == "asc" else "asc"

    def valid_sort_column(self, column) -> bool:
        if not column:
            return False
        return str(column) in column_names(self.model)

    def apply_sorting(self, stmt):
        column = self.current_sort_column()
        if not self.valid_sort_column(column):
            return stmt
        attr = getattr(self.model, column)
        ordered = attr.desc() if self.current_sort_direction() == "desc" else attr.asc()
        pk_name = primary_key_name(self.model)
        if column == pk_name:
            return stmt.order_by(ordered)
        # desempate estável para a paginação
        return stmt.order_by(ordered, getattr(self.model, pk_name).asc())

    def sort_params(self, column: str) -> dict:
        """Query parameters for a header link sorting by ``column``."""
        direction = "asc"
        if column == self.current_sort_column():
            direction = self.toggle_sort_direction(self.current_sort_direction())
        params = {k: v for k, v in request.args.items() if k not in ("sort", "direction", "page")}
        params.update(sort=column, direction=direction)
        return params
