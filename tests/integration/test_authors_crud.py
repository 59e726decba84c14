from demo import db
from demo.models import Author, Book


def test_index(client, seeded):
    resp = client.get("/authors")
    assert resp.status_code == 200
    body = resp.get_data(as_text=True)
    assert "Haruki Murakami" in body
    assert "✓ Active" in body
    assert "✗ Inactive" in body
    assert ">View</a>" in body


def test_show(client, seeded, record_id):
    author = record_id(Author, name="George Orwell")
    resp = client.get(f"/authors/{author}")
    assert resp.status_code == 200
    body = resp.get_data(as_text=True)
    assert "Author #" in body
    assert "2 books" in body
    assert "1984, Animal Farm" in body or "Animal Farm, 1984" in body


def test_create_and_destroy(app, client, seeded):
    resp = client.post(
        "/authors",
        data={"author-name": "Ursula K. Le Guin", "author-birth_year": "1929", "author-country": "United States"},
    )
    assert resp.status_code == 303
    with app.app_context():
        author = db.session.query(Author).filter_by(name="Ursula K. Le Guin").one()
        author_id = author.id
    assert client.post(f"/authors/{author_id}/delete").status_code == 303
    with app.app_context():
        assert db.session.get(Author, author_id) is None


def test_birth_year_must_be_a_number(client, seeded):
    resp = client.post("/authors", data={"author-name": "Nobody", "author-birth_year": "long ago"})
    assert resp.status_code == 422
    assert "Not a valid integer value." in resp.get_data(as_text=True)


def test_destroy_removes_books(app, client, seeded, record_id):
    author = record_id(Author, name="Jane Austen")
    assert client.post(f"/authors/{author}/delete").status_code == 303
    with app.app_context():
        assert db.session.query(Book).filter_by(author_id=author).count() == 0


def test_new_modal_renders_frame_only(client, seeded):
    resp = client.get("/authors/new_modal?return_field=author_id&parent_model=book")
    assert resp.status_code == 200
    body = resp.get_data(as_text=True)
    assert body.lstrip().startswith('<turbo-frame id="modal_content">')
    assert "<html" not in body
    assert 'name="modal_mode" value="true"' in body or 'value="true" name="modal_mode"' in body
    assert "author_id" in body


def test_modal_create_returns_turbo_stream(app, client, seeded):
    resp = client.post(
        "/authors",
        data={
            "author-name": "Ngugi wa Thiong'o",
            "modal_mode": "true",
            "return_field": "author_id",
            "parent_model": "book",
        },
    )
    assert resp.status_code == 200
    assert resp.mimetype == "text/vnd.turbo-stream.html"
    body = resp.get_data(as_text=True)
    with app.app_context():
        author_id = db.session.query(Author).filter_by(name="Ngugi wa Thiong'o").one().id
    assert 'target="author_id_select_wrapper"' in body
    assert 'name="book-author_id"' in body
    assert f'<option value="{author_id}" selected>' in body
    assert "Select Author" in body
    assert "Jane Austen" in body


def test_modal_create_with_errors_stays_in_frame(client, seeded):
    resp = client.post(
        "/authors",
        data={"author-name": "", "modal_mode": "true", "return_field": "author_id", "parent_model": "book"},
    )
    assert resp.status_code == 422
    assert '<turbo-frame id="modal_content">' in resp.get_data(as_text=True)
