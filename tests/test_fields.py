import pytest
from markupsafe import Markup

from elaine_crud import ConfigurationError, FieldConfiguration, field, has_many_relation

from demo.models import Author, Book


class FakeView:
    def shout(self, value, record):
        return Markup("<b>{}</b>").format(str(value).upper())

    def broken(self, value, record):
        raise RuntimeError("boom")


class Row:
    title = "Dune"
    price = None


def test_defaults_and_title():
    config = FieldConfiguration("publication_year")
    assert config.title == "Publication year"
    assert config.readonly is False
    assert config.visible is None
    assert not config.has_options
    assert not config.has_foreign_key
    assert not config.has_custom_display


def test_configure_chains_and_rejects_unknown_options():
    config = field("price").configure(title="Price").configure(readonly=True)
    assert config.title == "Price" and config.readonly is True
    with pytest.raises(ConfigurationError):
        field("price", colour="red")


def test_has_many_relation_helper():
    config = has_many_relation("books", title="Books")
    assert config.has_many_config == {}
    assert config.is_relation_display


def test_display_callback_by_method_name(app):
    config = field("title", display_as="shout")
    with app.app_context():
        assert config.render_display_value(Row(), FakeView()) == Markup("<b>DUNE</b>")


def test_display_callback_plain_strings_are_escaped(app):
    config = field("title", display_as=lambda value, record: "<i>x</i>")
    with app.app_context():
        assert config.render_display_value(Row(), FakeView()) == "&lt;i&gt;x&lt;/i&gt;"


def test_display_callback_failure_shows_raw_value(app):
    config = field("title", display_as="broken")
    with app.app_context():
        assert config.render_display_value(Row(), FakeView()) == "Dune"
        app.debug = True
        assert "Error: boom" in config.render_display_value(Row(), FakeView())


def test_missing_callback_method_is_a_configuration_error(app):
    config = field("title", display_as="nope")
    with app.app_context(), pytest.raises(ConfigurationError):
        config.render_display_value(Row(), FakeView())


def test_default_value_static_and_callable():
    assert field("status", default_value="pending").resolve_default_value() == "pending"
    assert field("status", default_value=lambda: "active").resolve_default_value() == "active"
    assert field("status").resolve_default_value() is None


def test_default_input_types():
    assert FieldConfiguration.default_input_type("text") == "text_area"
    assert FieldConfiguration.default_input_type("boolean") == "check_box"
    assert FieldConfiguration.default_input_type("date") == "date_field"
    assert FieldConfiguration.default_input_type(None) == "text_field"


def test_foreign_key_options_default_and_scoped(app, seeded):
    from sqlalchemy import select

    from demo import db

    with app.app_context():
        config = field("author_id", foreign_key={"model": Author, "display": "name"})
        options = config.foreign_key_options(db.session)
        assert options[0][1] == "Jane Austen"
        assert len(options) == 5

        scoped = field(
            "author_id",
            foreign_key={
                "model": Author,
                "display": lambda a: a.name.upper(),
                "scope": lambda: select(Author).where(Author.active.is_(True)).order_by(Author.name),
            },
        )
        labels = [label for _, label in scoped.foreign_key_options(db.session)]
        assert labels == ["CHIMAMANDA NGOZI ADICHIE", "HARUKI MURAKAMI"]


def test_label_for_falls_back_to_str(app):
    config = field("book_id", foreign_key={"model": Book})
    book = Book(title="Beloved", isbn="x")
    assert config.label_for(book) == "Beloved"
    assert config.label_for(None) == ""
