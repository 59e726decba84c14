"""URL rules for CRUD resources.

``resources(app, "books", BooksView)`` registers a blueprint named ``books``::

    GET            /books                    books.index
    POST           /books                    books.create
    GET            /books/new                books.new
    GET            /books/new_modal          books.new_modal
    GET            /books/export[.<fmt>]     books.export
    GET            /books/<id>               books.show
    POST|PUT|PATCH /books/<id>               books.update
    DELETE         /books/<id>               books.destroy
    POST           /books/<id>/delete        books.destroy
    GET            /books/<id>/edit          books.edit
    GET            /books/<id>/cancel_edit   books.cancel_edit
"""

from __future__ import annotations

import logging
from typing import Dict, List

from flask import Blueprint, Flask, redirect, url_for

from .errors import ConfigurationError
from .export import EXPORT_FORMATS

logger = logging.getLogger("elaine_crud.routing")

ACTIONS = (
    "index",
    "create",
    "new",
    "new_modal",
    "export",
    "show",
    "update",
    "destroy",
    "edit",
    "cancel_edit",
)


def _dispatch(name: str, view_cls, action: str):
    def endpoint(**kwargs):
        view = view_cls(resource_name=name)
        return getattr(view, action)(**kwargs)

    endpoint.__name__ = action
    endpoint.__qualname__ = f"{view_cls.__name__}.{action}"
    return endpoint


def resources(app: Flask, name: str, view_cls, url_prefix: str | None = None) -> Blueprint:
    """Register the RESTful routes of ``view_cls`` under ``/<name>``."""
    state = app.extensions.get("elaine_crud")
    if state is None:
        raise ConfigurationError("ElaineCrud.init_app must run before resources are registered")
    if view_cls.model is None:
        raise ConfigurationError(f"{view_cls.__name__} does not declare a model")

    bp = Blueprint(name, view_cls.__module__, url_prefix=url_prefix or f"/{name}")
    formats = ", ".join(EXPORT_FORMATS)
    views = {action: _dispatch(name, view_cls, action) for action in ACTIONS}

    bp.add_url_rule("", "index", views["index"], methods=["GET"])
    bp.add_url_rule("", "create", views["create"], methods=["POST"])
    bp.add_url_rule("/new", "new", views["new"], methods=["GET"])
    bp.add_url_rule("/new_modal", "new_modal", views["new_modal"], methods=["GET"])
    bp.add_url_rule("/export", "export", views["export"], methods=["GET"])
    bp.add_url_rule(f"/export.<any({formats}):fmt>", "export", views["export"], methods=["GET"])
    bp.add_url_rule("/<int:record_id>", "show", views["show"], methods=["GET"])
    bp.add_url_rule(
        "/<int:record_id>", "update", views["update"], methods=["POST", "PUT", "PATCH"]
    )
    bp.add_url_rule("/<int:record_id>", "destroy", views["destroy"], methods=["DELETE"])
    bp.add_url_rule("/<int:record_id>/delete", "destroy", views["destroy"], methods=["POST"])
    bp.add_url_rule("/<int:record_id>/edit", "edit", views["edit"], methods=["GET"])
    bp.add_url_rule(
        "/<int:record_id>/cancel_edit", "cancel_edit", views["cancel_edit"], methods=["GET"]
    )

    app.register_blueprint(bp)
    state.register(name, view_cls)
    logger.debug("Registered resource %s -> %s", name, view_cls.__name__)
    return bp


def root(app: Flask, name: str) -> None:
    """Redirect ``/`` to the index of resource ``name``."""

    def root_redirect():
        return redirect(url_for(f"{name}.index"))

    app.add_url_rule("/", "root", root_redirect)


def routes_for(app: Flask) -> List[Dict[str, str]]:
    """Registered resources with their index and export URLs."""
    state = app.extensions.get("elaine_crud")
    if state is None:
        return []
    found = []
    for name, view_cls in state.resources.items():
        prefix = app.blueprints[name].url_prefix
        found.append(
            {
                "name": name,
                "view": view_cls.__name__,
                "model": view_cls.model.__name__,
                "index": prefix,
                "export": f"{prefix}/export",
                "new_modal": f"{prefix}/new_modal",
            }
        )
    return found
