"""Class-based CRUD views.

A resource is declared by subclassing :class:`CrudView`::

    class BooksView(CrudView):
        model = Book
        permit_params = ["title", "isbn", "price"]
        default_sort = ("title", "asc")
        fields = [field("price", title="Price", display_as=format_currency)]

and registered with ``elaine_crud.routing.resources(app, "books", BooksView)``.
Foreign keys, has-many, has-one and many-to-many relationships are picked up
from the SQLAlchemy mappers; explicit ``fields`` entries always win.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from flask import current_app, flash, make_response, redirect, render_template, request, url_for
from flask import session as flask_session
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from .errors import ConfigurationError
from .export import ExportMixin
from .fields import FieldConfiguration
from .forms import make_form, param_key
from .helpers import DisplayHelpers
from .reflection import (
    BELONGS_TO,
    HABTM,
    HAS_MANY,
    HAS_ONE,
    TIMESTAMP_COLUMNS,
    column_names,
    column_type,
    determine_display_field,
    get_column,
    humanize,
    model_title,
    plural_name,
    primary_key_name,
    primary_key_value,
    relation_for_foreign_key,
    relation_named,
    relations,
    relations_of_kind,
    singularize,
)
from .search import SearchMixin
from .sorting import SortingMixin
from .utils_db import get_or_404, transactional

PER_PAGE_SESSION_KEY = "elaine_crud_per_page"
MAX_PER_PAGE = 500
TURBO_STREAM_MIMETYPE = "text/vnd.turbo-stream.html"

UNIQUE_FAILURE = re.compile(r"UNIQUE constraint failed: ([\w.]+(?:, [\w.]+)*)")


class CrudView(DisplayHelpers, SearchMixin, SortingMixin, ExportMixin):
    model: Any = None
    permit_params: Sequence[str] = ()
    fields: Sequence[FieldConfiguration] = ()
    default_sort: Tuple[str, str] = ("id", "asc")
    show_view_button: bool = False
    disable_turbo: bool = False
    max_export_records: Optional[int] = None
    per_page: Optional[int] = None
    layout: str = "elaine_crud/layout.html"

    def __init__(self, resource_name: Optional[str] = None):
        cls = type(self)
        self.field_configurations = cls.build_field_configurations()
        self.permitted_attributes = cls.build_permitted_attributes()
        self.resource_name = resource_name or plural_name(self.model)
        self.max_export_records = cls.max_export_records or current_app.config["ELAINE_CRUD_MAX_EXPORT_RECORDS"]
        self.model_title = model_title(self.model)
        self._columns: Optional[List[str]] = None

    # -- class level configuration -------------------------------------

    @classmethod
    def build_field_configurations(cls) -> Dict[str, FieldConfiguration]:
        """Manual field configs merged with those derived from relationships."""
        cached = cls.__dict__.get("_field_configurations")
        if cached is not None:
            return cached
        if cls.model is None:
            raise ConfigurationError(f"{cls.__name__} does not declare a model")

        configs: Dict[str, FieldConfiguration] = {}
        for config in cls.fields:
            configs[config.field_name] = config

        for rel in relations(cls.model):
            display = determine_display_field(rel.target)
            if rel.kind == BELONGS_TO:
                auto = {
                    "model": rel.target,
                    "display": display,
                    "null_option": f"Select {humanize(rel.name)}",
                }
                config = configs.get(rel.foreign_key)
                if config is None:
                    configs[rel.foreign_key] = FieldConfiguration(
                        rel.foreign_key, title=humanize(rel.name), foreign_key=auto
                    )
                elif config.foreign_key_config is None:
                    config.foreign_key_config = auto
                else:
                    for key, value in auto.items():
                        config.foreign_key_config.setdefault(key, value)
                continue

            config = configs.get(rel.name)
            if rel.kind == HAS_MANY:
                auto = {
                    "model": rel.target,
                    "display": display,
                    "foreign_key": rel.foreign_key,
                    "show_count": True,
                    "max_preview_items": 3,
                }
                if config is None:
                    configs[rel.name] = FieldConfiguration(rel.name, has_many=auto)
                elif config.has_many_config is not None:
                    for key, value in auto.items():
                        config.has_many_config.setdefault(key, value)
            elif rel.kind == HAS_ONE:
                auto = {"model": rel.target, "display": display, "foreign_key": rel.foreign_key}
                if config is None:
                    configs[rel.name] = FieldConfiguration(rel.name, has_one=auto, readonly=True)
                elif config.has_one_config is not None:
                    for key, value in auto.items():
                        config.has_one_config.setdefault(key, value)
            elif rel.kind == HABTM:
                auto = {"model": rel.target, "display_field": display}
                if config is None:
                    configs[rel.name] = FieldConfiguration(rel.name, habtm=auto)
                elif config.habtm_config is None:
                    config.habtm_config = auto

        cls._field_configurations = configs
        return configs

    @classmethod
    def build_permitted_attributes(cls) -> List[str]:
        """``permit_params`` plus foreign keys and ``<singular>_ids`` of many-to-many relations."""
        cached = cls.__dict__.get("_permitted_attributes")
        if cached is not None:
            return cached
        if cls.model is None:
            raise ConfigurationError(f"{cls.__name__} does not declare a model")
        attrs = [str(name) for name in cls.permit_params]
        for rel in relations(cls.model):
            if rel.kind == BELONGS_TO:
                name = rel.foreign_key
            elif rel.kind == HABTM:
                name = f"{singularize(rel.name)}_ids"
            else:
                continue
            if name not in attrs:
                attrs.append(name)
        cls._permitted_attributes = attrs
        return attrs

    # -- plumbing ---------------------------------------------------------

    @property
    def state(self):
        return current_app.extensions["elaine_crud"]

    @property
    def session(self):
        return self.state.db.session

    @property
    def logger(self):
        return current_app.logger

    def endpoint(self, action: str) -> str:
        return f"{self.resource_name}.{action}"

    def resource_name_for(self, model) -> Optional[str]:
        return self.state.model_resources.get(model)

    def field_config_for(self, name) -> Optional[FieldConfiguration]:
        return self.field_configurations.get(str(name))

    def configured_fields(self) -> List[str]:
        return list(self.field_configurations)

    def turbo_frame_request(self) -> bool:
        return bool(request.headers.get("Turbo-Frame"))

    def param_key(self) -> str:
        return param_key(self.model)

    def render(self, template: str, status: int = 200, **context):
        context.setdefault("layout", self.layout)
        html = render_template(template, view=self, model_name=self.model_title, **context)
        return make_response(html, status)

    def preserved_params(self) -> Dict[str, Any]:
        """Current query string minus pagination, for links that keep the search state."""
        params: Dict[str, Any] = {}
        for key in request.args:
            if key in ("page", "edit", "format"):
                continue
            values = request.args.getlist(key)
            params[key] = values if len(values) > 1 or key.endswith("[]") else values[0]
        return params

    # -- columns and fields -------------------------------------------

    def configured_virtual_fields(self) -> List[str]:
        db_columns = column_names(self.model)
        return [name for name in self.field_configurations if name not in db_columns]

    def determine_columns(self) -> List[str]:
        """Columns shown in lists, show pages and exports.

        ``visible=False`` hides, ``visible=True`` shows, configured virtual
        fields are shown, other ``*_at`` columns are hidden.
        """
        if self._columns is not None:
            return list(self._columns)
        virtual = self.configured_virtual_fields()
        shown = []
        for name in column_names(self.model) + virtual:
            config = self.field_config_for(name)
            if config is not None and config.visible is False:
                continue
            if config is not None and config.visible is True:
                shown.append(name)
            elif name in virtual:
                shown.append(name)
            elif not name.endswith("_at"):
                shown.append(name)
        self._columns = shown
        return list(shown)

    def habtm_relation_for_field(self, name: str):
        rel = relation_named(self.model, name)
        return rel if rel is not None and rel.kind == HABTM else None

    @staticmethod
    def habtm_ids_name(rel) -> str:
        return f"{singularize(rel.name)}_ids"

    def form_field_names(self) -> List[str]:
        names = []
        for name in self.determine_columns():
            if name in TIMESTAMP_COLUMNS or name == primary_key_name(self.model):
                continue
            rel = relation_named(self.model, name)
            if rel is not None and rel.kind == HAS_MANY:
                continue
            names.append(name)
        return names

    def editable_field_names(self) -> List[str]:
        names = []
        for name in self.form_field_names():
            if self.field_readonly(name):
                continue
            config = self.field_config_for(name)
            if config is not None and config.is_relation_display:
                continue
            rel = self.habtm_relation_for_field(name)
            if rel is not None:
                if self.habtm_ids_name(rel) in self.permitted_attributes:
                    names.append(name)
                continue
            if get_column(self.model, name) is None:
                continue
            if name in self.permitted_attributes:
                names.append(name)
        return names

    def form_field_kind(self, name: str) -> str:
        """How ``_form.html`` renders a field: input, select, habtm, checkbox, custom or readonly."""
        if name not in self.editable_field_names():
            return "readonly"
        config = self.field_config_for(name)
        if config is not None and config.has_custom_edit:
            return "custom"
        if self.habtm_relation_for_field(name) is not None:
            return "habtm"
        if config is not None and (config.has_foreign_key or config.has_options):
            return "select"
        if column_type(self.model, name) == "boolean":
            return "checkbox"
        return "input"

    def form_field_for(self, form, name: str):
        rel = self.habtm_relation_for_field(name)
        key = self.habtm_ids_name(rel) if rel is not None else name
        return form[key] if key in form else None

    def render_custom_edit(self, form, record, name: str):
        return self.field_config_for(name).render_edit_field(record, self, self.form_field_for(form, name))

    def nested_create_url(self, name: str) -> Optional[str]:
        config = self.field_config_for(name)
        if config is None or not config.has_nested_create:
            return None
        target = self.resource_name_for(config.foreign_key_config["model"])
        if target is None:
            return None
        return url_for(f"{target}.new_modal", return_field=name, parent_model=self.param_key())

    def nested_create_label(self, name: str) -> str:
        config = self.field_config_for(name)
        label = (config.nested_create or {}).get("label") if config is not None else None
        return label or f"+ New {model_title(config.foreign_key_config['model'])}"

    # -- records ------------------------------------------------------

    def relationship_loaders(self):
        shown = set(self.determine_columns())
        loaders = []
        for rel in relations(self.model):
            if rel.name in shown or (rel.kind == BELONGS_TO and rel.foreign_key in shown):
                loaders.append(selectinload(getattr(self.model, rel.name)))
        return loaders

    def base_query(self):
        stmt = select(self.model)
        loaders = self.relationship_loaders()
        if loaders:
            stmt = stmt.options(*loaders)
        return stmt

    def fetch_records(self):
        """Select statement for the index page, before pagination."""
        stmt = self.apply_parent_filtering(self.base_query())
        stmt = self.apply_search_and_filters(stmt)
        return self.apply_sorting(stmt)

    def determine_per_page(self) -> int:
        requested = request.args.get("per_page", type=int)
        if requested and requested > 0:
            requested = min(requested, MAX_PER_PAGE)
            flask_session[PER_PAGE_SESSION_KEY] = requested
            return requested
        stored = flask_session.get(PER_PAGE_SESSION_KEY)
        if isinstance(stored, int) and stored > 0:
            return stored
        return self.per_page or current_app.config["ELAINE_CRUD_PER_PAGE"]

    def apply_pagination(self, stmt):
        page = request.args.get("page", 1, type=int)
        return self.state.db.paginate(
            stmt, page=max(page or 1, 1), per_page=self.determine_per_page(), error_out=False
        )

    def find_record(self, record_id):
        return get_or_404(self.session, self.model, record_id)

    def find_record_by_id(self, record_id):
        if record_id is None:
            return None
        return self.session.get(self.model, record_id)

    # -- parent filtering ---------------------------------------------

    def detect_parent_filters(self) -> Dict[str, int]:
        found: Dict[str, int] = {}
        for rel in relations_of_kind(self.model, BELONGS_TO):
            raw = request.args.get(rel.foreign_key)
            if not raw:
                continue
            try:
                found[rel.foreign_key] = int(raw)
            except ValueError:
                self.logger.debug("Ignoring non-numeric parent filter %s=%r", rel.foreign_key, raw)
        return found

    def valid_parent_filter(self, name: str) -> bool:
        return name.endswith("_id") and relation_for_foreign_key(self.model, name) is not None

    def apply_parent_filtering(self, stmt):
        for foreign_key, value in self.detect_parent_filters().items():
            stmt = stmt.where(getattr(self.model, foreign_key) == value)
        return stmt

    def parent_context(self) -> Optional[Dict[str, Any]]:
        for foreign_key, value in self.detect_parent_filters().items():
            rel = relation_for_foreign_key(self.model, foreign_key)
            parent = self.session.get(rel.target, value)
            context = {
                "foreign_key": foreign_key,
                "value": value,
                "relationship_name": rel.name,
                "model_class": rel.target,
                "record": parent,
                "error": None,
            }
            if parent is None:
                context["error"] = f"{model_title(rel.target)} with ID {value} not found"
            return context
        return None

    def populate_parent_relationships(self, record) -> None:
        for foreign_key, value in self.detect_parent_filters().items():
            if getattr(record, foreign_key, None) is None:
                setattr(record, foreign_key, value)

    def apply_field_defaults(self, record) -> None:
        """Column defaults, then configured ``default_value`` for a new record."""
        for name in column_names(self.model):
            column = get_column(self.model, name)
            default = column.default
            if default is not None and default.is_scalar and getattr(record, name, None) is None:
                setattr(record, name, default.arg)
        for name, config in self.field_configurations.items():
            if config.default_value is None or get_column(self.model, name) is None:
                continue
            if getattr(record, name, None) is None:
                setattr(record, name, config.resolve_default_value(self))

    # -- forms --------------------------------------------------------

    def make_form(self, record=None, **kwargs):
        data = {}
        if record is not None:
            for name in self.editable_field_names():
                rel = self.habtm_relation_for_field(name)
                if rel is not None:
                    data[self.habtm_ids_name(rel)] = [primary_key_value(r) for r in getattr(record, rel.name) or []]
        return make_form(self, record=record, data=data or None, **kwargs)

    def assign_attributes(self, record, form) -> None:
        with self.session.no_autoflush:
            for name in self.editable_field_names():
                rel = self.habtm_relation_for_field(name)
                if rel is not None:
                    ids = form[self.habtm_ids_name(rel)].data or []
                    pk = getattr(rel.target, primary_key_name(rel.target))
                    related = self.session.scalars(select(rel.target).where(pk.in_(ids))).all() if ids else []
                    setattr(record, rel.name, list(related))
                    continue
                value = form[name].data
                if isinstance(value, str) and value == "":
                    value = None
                column = get_column(self.model, name)
                if value is None and column is not None and not column.nullable:
                    continue
                setattr(record, name, value)

    def integrity_message(self, exc: IntegrityError) -> str:
        detail = str(getattr(exc, "orig", exc))
        match = UNIQUE_FAILURE.search(detail)
        if match:
            columns = [part.split(".")[-1] for part in match.group(1).split(", ")]
            return f"{humanize(columns[0])} has already been taken"
        if "FOREIGN KEY" in detail:
            return "A related record does not exist"
        return f"{self.model_title} could not be saved: {detail}"

    def save(self, record, form, new: bool = False) -> bool:
        self.assign_attributes(record, form)
        try:
            with transactional(self.session):
                if new:
                    self.session.add(record)
        except IntegrityError as exc:
            form.form_errors.append(self.integrity_message(exc))
            return False
        return True

    # -- actions ------------------------------------------------------

    def index(self):
        pagination = self.apply_pagination(self.fetch_records())
        columns = self.determine_columns()
        editing_record = self.find_record_by_id(request.args.get("edit", type=int))
        return self.render(
            "elaine_crud/index.html",
            records=pagination.items,
            pagination=pagination,
            columns=columns,
            header_layout=self.calculate_layout_header(columns),
            editing_record=editing_record,
            editing_form=self.make_form(editing_record) if editing_record is not None else None,
            parent_context=self.parent_context(),
        )

    def show(self, record_id):
        record = self.find_record(record_id)
        return self.render("elaine_crud/show.html", record=record, columns=self.determine_columns())

    def new(self):
        record = self.model()
        self.apply_field_defaults(record)
        self.populate_parent_relationships(record)
        return self.render("elaine_crud/new.html", record=record, form=self.make_form(record))

    def new_modal(self):
        record = self.model()
        self.apply_field_defaults(record)
        return self.render(
            "elaine_crud/new_modal.html",
            record=record,
            form=self.make_form(record),
            return_field=request.args.get("return_field", ""),
            parent_model=request.args.get("parent_model", ""),
        )

    def create(self):
        record = self.model()
        form = self.make_form(record)
        modal = request.form.get("modal_mode") == "true"
        if form.validate() and self.save(record, form, new=True):
            self.logger.info("Created %s #%s", self.model_title, primary_key_value(record))
            if modal:
                return self.modal_success(record)
            flash(f"{self.model_title} was successfully created.", "notice")
            parent = self.parent_context()
            if parent is not None and parent["record"] is not None:
                target = url_for(self.endpoint("index"), **{parent["foreign_key"]: parent["value"]})
            else:
                target = url_for(self.endpoint("show"), record_id=primary_key_value(record))
            return redirect(target, code=303)

        if modal:
            return self.render(
                "elaine_crud/new_modal.html",
                status=422,
                record=record,
                form=form,
                return_field=request.form.get("return_field", ""),
                parent_model=request.form.get("parent_model", ""),
            )
        return self.render("elaine_crud/new.html", status=422, record=record, form=form)

    def modal_success(self, record):
        """Turbo Stream swapping the parent form's dropdown for one with ``record`` selected."""
        return_field = request.form.get("return_field", "")
        parent_model = request.form.get("parent_model", "")
        choices: List[Tuple[Any, str]] = []
        null_option = "Select..."
        parent_view = self.state.view_for_param_key(parent_model)
        if parent_view is not None:
            config = parent_view.build_field_configurations().get(return_field)
            if config is not None and config.has_foreign_key:
                choices = config.foreign_key_options(self.session)
                null_option = config.foreign_key_config.get("null_option") or null_option
        if not choices:
            choices = [(primary_key_value(record), self.display_label(record))]
        html = render_template(
            "elaine_crud/modal_success.turbo_stream.html",
            view=self,
            record=record,
            selected=primary_key_value(record),
            choices=choices,
            null_option=null_option,
            return_field=return_field,
            parent_model=parent_model,
        )
        response = make_response(html, 200)
        response.mimetype = TURBO_STREAM_MIMETYPE
        return response

    def edit(self, record_id):
        record = self.find_record(record_id)
        form = self.make_form(record)
        columns = self.determine_columns()
        if self.turbo_frame_request():
            return self.render("elaine_crud/_edit_row.html", record=record, form=form, columns=columns)
        return self.render("elaine_crud/edit.html", record=record, form=form, columns=columns)

    def update(self, record_id):
        record = self.find_record(record_id)
        form = self.make_form(record)
        columns = self.determine_columns()
        if form.validate() and self.save(record, form):
            self.logger.info("Updated %s #%s", self.model_title, record_id)
            if self.turbo_frame_request():
                return self.render(
                    "elaine_crud/_view_row.html",
                    record=record,
                    columns=columns,
                    header_layout=self.calculate_layout_header(columns),
                )
            flash(f"{self.model_title} was successfully updated.", "notice")
            if request.form.get("from_inline_edit"):
                return redirect(url_for(self.endpoint("index")), code=303)
            return redirect(url_for(self.endpoint("show"), record_id=record_id), code=303)

        self.logger.warning("Update of %s #%s rejected: %s", self.model_title, record_id, form.errors)
        if self.turbo_frame_request():
            return self.render("elaine_crud/_edit_row.html", status=422, record=record, form=form, columns=columns)
        return self.render("elaine_crud/edit.html", status=422, record=record, form=form, columns=columns)

    def cancel_edit(self, record_id):
        record = self.find_record(record_id)
        if self.turbo_frame_request():
            columns = self.determine_columns()
            return self.render(
                "elaine_crud/_view_row.html",
                record=record,
                columns=columns,
                header_layout=self.calculate_layout_header(columns),
            )
        return redirect(url_for(self.endpoint("index")))

    def destroy(self, record_id):
        record = self.find_record(record_id)
        try:
            with transactional(self.session):
                self.session.delete(record)
        except IntegrityError:
            flash(f"{self.model_title} could not be deleted because other records depend on it.", "alert")
            return redirect(url_for(self.endpoint("index")), code=303)
        self.logger.info("Deleted %s #%s", self.model_title, record_id)
        flash(f"{self.model_title} was successfully deleted.", "notice")
        return redirect(url_for(self.endpoint("index")), code=303)
