from demo import db
from demo.models import Book, BookCopy, Library, Loan


def copy_form(book, library, rfid="RFID-PPR-004"):
    return {
        "book_copy-book_id": str(book),
        "book_copy-library_id": str(library),
        "book_copy-rfid": rfid,
        "book_copy-available": "y",
    }


def test_index_shows_book_library_and_loan(client, seeded, record_id):
    loan = record_id(Loan, status="overdue")
    resp = client.get("/book_copies")
    assert resp.status_code == 200
    body = resp.get_data(as_text=True)
    assert "RFID-KOS-002" in body
    assert "Oakwood Community Library" in body
    assert f'href="/loans/{loan}"' in body
    assert ">overdue</a>" in body


def test_loan_is_readonly_on_forms(client, seeded, record_id):
    copy = record_id(BookCopy, rfid="RFID-1984-001")
    body = client.get(f"/book_copies/{copy}/edit").get_data(as_text=True)
    assert 'name="book_copy-loan"' not in body
    assert 'name="book_copy-rfid"' in body
    assert "Select Book" in body


def test_create_copy_for_book(app, client, seeded, record_id):
    book = record_id(Book, title="Pride and Prejudice")
    library = record_id(Library, name="Oakwood Community Library")
    resp = client.post(f"/book_copies?book_id={book}", data=copy_form(book, library))
    assert resp.status_code == 303
    assert resp.headers["Location"].endswith(f"/book_copies?book_id={book}")
    with app.app_context():
        copy = db.session.query(BookCopy).filter_by(rfid="RFID-PPR-004").one()
        assert copy.library_id == library
        assert copy.book_title == "Pride and Prejudice"


def test_duplicate_rfid(client, seeded, record_id):
    book = record_id(Book, title="Pride and Prejudice")
    library = record_id(Library, name="Oakwood Community Library")
    resp = client.post("/book_copies", data=copy_form(book, library, rfid="RFID-PPR-001"))
    assert resp.status_code == 422
    assert "Rfid has already been taken" in resp.get_data(as_text=True)


def test_unknown_book_is_rejected(client, seeded, record_id):
    library = record_id(Library, name="Oakwood Community Library")
    resp = client.post("/book_copies", data=copy_form(9999, library))
    assert resp.status_code == 422
    assert "Not a valid choice" in resp.get_data(as_text=True)


def test_parent_filter_by_book(app, client, seeded, record_id):
    book = record_id(Book, title="Animal Farm")
    body = client.get(f"/book_copies?book_id={book}").get_data(as_text=True)
    assert "Showing book copies for book" in body
    assert "RFID-AF-003" in body
    assert "RFID-KOS-001" not in body


def test_destroy_copy_with_loan(app, client, seeded, record_id):
    copy = record_id(BookCopy, rfid="RFID-AMR-001")
    assert client.post(f"/book_copies/{copy}/delete").status_code == 303
    with app.app_context():
        assert db.session.get(BookCopy, copy) is None
        assert db.session.query(Loan).filter_by(book_copy_id=copy).count() == 0
