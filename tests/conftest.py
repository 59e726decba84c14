import os
import sys
import tempfile
from datetime import date

import pytest

# Ensure project root (parent of tests) is on sys.path before importing demo
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from demo import create_app, db  # noqa: E402

SEED_DAY = date(2025, 10, 15)


@pytest.fixture()
def app():
    # Banco temporário isolado por teste
    tmpdir = tempfile.TemporaryDirectory()
    instance = tmpdir.name

    class TestConfig:
        TESTING = True
        SECRET_KEY = "test"
        WTF_CSRF_ENABLED = False
        SQLALCHEMY_DATABASE_URI = "sqlite:///" + os.path.join(instance, "demo.db")
        SQLALCHEMY_TRACK_MODIFICATIONS = False

    flask_app = create_app(TestConfig)
    yield flask_app
    # Libera conexões para evitar lock em Windows ao remover diretório
    with flask_app.app_context():
        db.session.remove()
        db.engine.dispose()
    tmpdir.cleanup()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def runner(app):
    return app.test_cli_runner()


@pytest.fixture()
def seeded(app):
    """Demo data set loaded; yields the per-table counts."""
    from demo.seeds import seed

    with app.app_context():
        counts = seed(today=SEED_DAY)
    return counts


@pytest.fixture()
def record_id(app):
    """Primary key of the record of ``model`` matching ``attrs``."""

    def find(model, **attrs):
        with app.app_context():
            obj = db.session.query(model).filter_by(**attrs).one()
            return obj.id

    return find
