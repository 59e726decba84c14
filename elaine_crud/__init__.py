"""ElaineCrud: generated CRUD interfaces for Flask-SQLAlchemy models."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from flask import Blueprint, Flask

from .errors import ConfigurationError, ElaineCrudError
from .fields import FieldConfiguration, field, has_many_relation
from .forms import param_key
from .routing import resources, root, routes_for
from .views import CrudView

__all__ = [
    "ConfigurationError",
    "CrudView",
    "ElaineCrud",
    "ElaineCrudError",
    "FieldConfiguration",
    "field",
    "has_many_relation",
    "resources",
    "root",
    "routes_for",
]

__version__ = "0.1.0"

logger = logging.getLogger("elaine_crud")

DEFAULTS = {
    "ELAINE_CRUD_MAX_EXPORT_RECORDS": 10000,
    "ELAINE_CRUD_PER_PAGE": 25,
}


class CrudState:
    """Per-application registry of resources."""

    def __init__(self, db):
        self.db = db
        self.resources: Dict[str, type] = {}
        self.model_resources: Dict[type, str] = {}

    def register(self, name: str, view_cls) -> None:
        self.resources[name] = view_cls
        self.model_resources.setdefault(view_cls.model, name)

    def view_for_param_key(self, key: str):
        for view_cls in self.resources.values():
            if param_key(view_cls.model) == key:
                return view_cls
        return None


class ElaineCrud:
    """Flask extension: ``crud = ElaineCrud(); crud.init_app(app, db)``."""

    def __init__(self, app: Optional[Flask] = None, db=None):
        self.db = db
        if app is not None:
            self.init_app(app, db)

    def init_app(self, app: Flask, db=None) -> None:
        db = db or self.db
        if db is None:
            raise ConfigurationError("ElaineCrud needs the Flask-SQLAlchemy instance")
        for key, value in DEFAULTS.items():
            app.config.setdefault(key, value)

        app.extensions["elaine_crud"] = CrudState(db)
        app.register_blueprint(
            Blueprint(
                "elaine_crud",
                __name__,
                template_folder="templates",
                static_folder="static",
                static_url_path="/elaine_crud/static",
            )
        )

        from .cli import elaine_crud_cli

        app.cli.add_command(elaine_crud_cli)
        logger.debug("ElaineCrud initialised for %s", app.import_name)
