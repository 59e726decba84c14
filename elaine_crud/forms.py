"""Dynamic Flask-WTF forms built from a view's editable fields.

Inputs are prefixed with the model's param key (``book-title``,
``book-author_id``) so several record forms can share one page.
"""

from __future__ import annotations

from flask_wtf import FlaskForm
from sqlalchemy import select
from wtforms import (
    BooleanField,
    DateField,
    DateTimeLocalField,
    DecimalField,
    FloatField,
    IntegerField,
    SelectField,
    SelectMultipleField,
    StringField,
    TextAreaField,
)
from wtforms.validators import InputRequired, Length, Optional

from .reflection import column_type, get_column, primary_key_name, underscore


def coerce_id(value):
    """Select values to int ids; blank means no selection."""
    if value is None or value == "":
        return None
    return int(value)


def param_key(model) -> str:
    return underscore(model.__name__)


def is_required(model, name: str) -> bool:
    column = get_column(model, name)
    if column is None:
        return False
    if column.nullable or column.primary_key:
        return False
    return column.default is None and column.server_default is None


def _base_validators(view, name: str, required: bool):
    validators = [InputRequired() if required else Optional()]
    column = get_column(view.model, name)
    length = getattr(getattr(column, "type", None), "length", None)
    if length and column_type(view.model, name) == "string":
        validators.append(Length(max=length))
    config = view.field_config_for(name)
    if config is not None:
        validators.extend(config.validators)
    return validators


def build_field(view, name: str):
    config = view.field_config_for(name)
    label = view.field_title(name)
    description = (config.description if config is not None else None) or ""
    required = is_required(view.model, name)
    validators = _base_validators(view, name, required)

    if config is not None and config.has_foreign_key:
        return SelectField(label, validators=validators, coerce=coerce_id, description=description)
    if config is not None and config.has_options:
        kind = column_type(view.model, name)
        coerce = coerce_id if kind == "integer" else str
        return SelectField(label, validators=validators, coerce=coerce, description=description)

    kind = column_type(view.model, name)
    if kind == "text":
        return TextAreaField(label, validators=validators, description=description)
    if kind == "boolean":
        # unchecked boxes post nothing
        return BooleanField(label, validators=[Optional()], description=description)
    if kind == "date":
        return DateField(label, validators=validators, description=description)
    if kind == "datetime":
        return DateTimeLocalField(label, validators=validators, description=description)
    if kind == "integer":
        return IntegerField(label, validators=validators, description=description)
    if kind == "decimal":
        return DecimalField(label, validators=validators, description=description)
    if kind == "float":
        return FloatField(label, validators=validators, description=description)
    return StringField(label, validators=validators, description=description)


def build_habtm_field(view, relation):
    config = view.field_config_for(relation.name)
    label = config.title if config is not None else view.field_title(relation.name)
    return SelectMultipleField(label, coerce=int, validators=[Optional()])


def build_form_class(view):
    """FlaskForm subclass with one field per editable attribute of ``view``."""
    attrs = {}
    for name in view.editable_field_names():
        relation = view.habtm_relation_for_field(name)
        if relation is not None:
            attrs[view.habtm_ids_name(relation)] = build_habtm_field(view, relation)
        else:
            attrs[name] = build_field(view, name)
    return type(f"{view.model.__name__}Form", (FlaskForm,), attrs)


def populate_choices(view, form) -> None:
    """Fill select choices from field options and the database."""
    for name in view.editable_field_names():
        relation = view.habtm_relation_for_field(name)
        if relation is not None:
            target = relation.target
            pk = getattr(target, primary_key_name(target))
            rows = view.session.scalars(select(target).order_by(pk)).all()
            form[view.habtm_ids_name(relation)].choices = [
                (getattr(row, primary_key_name(target)), view.relation_label(row, view.field_config_for(name), "habtm_config"))
                for row in rows
            ]
            continue
        config = view.field_config_for(name)
        if config is None:
            continue
        if config.has_foreign_key:
            blank = config.foreign_key_config.get("null_option") or "Select..."
            form[name].choices = [("", blank)] + list(config.foreign_key_options(view.session))
        elif config.has_options:
            form[name].choices = [("", "Select...")] + [view.option_pair(opt) for opt in config.options]


def make_form(view, record=None, data=None, **kwargs):
    form_class = build_form_class(view)
    form = form_class(obj=record, data=data, prefix=param_key(view.model), **kwargs)
    populate_choices(view, form)
    return form
