import logging
import os
import sqlite3

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_wtf import CSRFProtect
from sqlalchemy import event
from sqlalchemy.engine import Engine

from elaine_crud import ElaineCrud

"""Aplicação de demonstração (biblioteca) e fábrica Flask.

Views e comandos são importados dentro de create_app para evitar ciclos de
importação com os models.
"""

db = SQLAlchemy()
csrf = CSRFProtect()
crud = ElaineCrud()

logger = logging.getLogger("demo")


# Integridade referencial no SQLite (cascatas e FKs dos models)
@event.listens_for(Engine, "connect")
def _sqlite_pragmas_on_connect(dbapi_connection, connection_record):  # pragma: no cover - infra
    if isinstance(dbapi_connection, sqlite3.Connection):
        cur = dbapi_connection.cursor()
        cur.execute("PRAGMA foreign_keys=ON")
        cur.close()


def alembic_config(app):
    """Alembic config pointed at the app database (not the URL in alembic.ini)."""
    from alembic.config import Config as AlembicConfig

    alembic_cfg = AlembicConfig(app.config["ALEMBIC_INI"])
    alembic_cfg.set_main_option("sqlalchemy.url", app.config["SQLALCHEMY_DATABASE_URI"])
    return alembic_cfg


def run_migrations(app, revision="head"):
    """Upgrade the app database with the bundled Alembic revisions."""
    from alembic import command

    command.upgrade(alembic_config(app), revision)


def create_app(config_object=None):
    app = Flask(__name__, instance_relative_config=True)

    # Config padrão base
    app.config.from_object("config.Config")

    # Override opcional
    if config_object:
        app.config.from_object(config_object)

    os.makedirs(app.instance_path, exist_ok=True)

    db.init_app(app)
    csrf.init_app(app)
    crud.init_app(app, db)

    app.config.setdefault("SESSION_COOKIE_HTTPONLY", True)
    app.config.setdefault("SESSION_COOKIE_SAMESITE", "Lax")

    from . import models  # noqa: F401
    from .cli import demo_cli, spec_cli
    from .views import register_views

    register_views(app)
    app.cli.add_command(demo_cli)
    app.cli.add_command(spec_cli)

    if not app.config.get("TESTING") and app.config.get("AUTO_ALEMBIC_UPGRADE"):
        with app.app_context():
            run_migrations(app)

    # Em testes mantemos create_all direto (isolado por diretório temp)
    if app.config.get("TESTING"):
        with app.app_context():
            db.create_all()

    @app.route("/health")
    def health():  # pragma: no cover - endpoint trivial
        return {"status": "ok"}

    logger.debug("Demo app created with %s", app.config["SQLALCHEMY_DATABASE_URI"])
    return app
