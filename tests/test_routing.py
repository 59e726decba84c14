import pytest
from flask import Flask
from flask_sqlalchemy import SQLAlchemy

from elaine_crud import ConfigurationError, CrudView, ElaineCrud, resources, routes_for
from demo.views import RESOURCES


def rules_for(app, name):
    return {(rule.endpoint, rule.rule, frozenset(rule.methods - {"HEAD", "OPTIONS"})) for rule in app.url_map.iter_rules() if rule.endpoint.startswith(name + ".")}


def test_restful_routes_with_export_and_new_modal(app):
    rules = rules_for(app, "books")
    assert ("books.index", "/books", frozenset({"GET"})) in rules
    assert ("books.create", "/books", frozenset({"POST"})) in rules
    assert ("books.new", "/books/new", frozenset({"GET"})) in rules
    assert ("books.new_modal", "/books/new_modal", frozenset({"GET"})) in rules
    assert ("books.export", "/books/export", frozenset({"GET"})) in rules
    assert ("books.show", "/books/<int:record_id>", frozenset({"GET"})) in rules
    assert ("books.update", "/books/<int:record_id>", frozenset({"POST", "PUT", "PATCH"})) in rules
    assert ("books.destroy", "/books/<int:record_id>", frozenset({"DELETE"})) in rules
    assert ("books.destroy", "/books/<int:record_id>/delete", frozenset({"POST"})) in rules
    assert ("books.edit", "/books/<int:record_id>/edit", frozenset({"GET"})) in rules
    assert ("books.cancel_edit", "/books/<int:record_id>/cancel_edit", frozenset({"GET"})) in rules


@pytest.mark.parametrize("name", [name for name, _ in RESOURCES])
def test_every_resource_has_export(app, name):
    with app.test_request_context():
        from flask import url_for

        assert url_for(f"{name}.export") == f"/{name}/export"
        assert url_for(f"{name}.export", fmt="xlsx") == f"/{name}/export.xlsx"
        assert url_for(f"{name}.new_modal") == f"/{name}/new_modal"


def test_root_redirects_to_libraries(client):
    resp = client.get("/")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/libraries")


def test_routes_for_lists_resources(app):
    routes = {route["name"]: route for route in routes_for(app)}
    assert set(routes) == {name for name, _ in RESOURCES}
    assert routes["book_copies"]["model"] == "BookCopy"
    assert routes["loans"]["export"] == "/loans/export"


def test_resources_requires_initialised_extension():
    bare = Flask(__name__)

    class Anything(CrudView):
        model = object

    with pytest.raises(ConfigurationError):
        resources(bare, "things", Anything)


def test_view_without_model_is_rejected():
    flask_app = Flask(__name__)
    flask_app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite://"
    db = SQLAlchemy(flask_app)
    ElaineCrud(flask_app, db)

    class Nothing(CrudView):
        pass

    with pytest.raises(ConfigurationError):
        resources(flask_app, "nothing", Nothing)


def test_health(client):
    assert client.get("/health").get_json() == {"status": "ok"}
