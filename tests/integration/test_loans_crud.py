from datetime import date

from demo import db
from demo.models import BookCopy, Loan, Member


def loan_id(app, rfid):
    with app.app_context():
        return db.session.query(Loan).join(Loan.book_copy).filter(BookCopy.rfid == rfid).one().id


def test_index_shows_book_title_status_and_due_dates(client, seeded):
    resp = client.get("/loans")
    assert resp.status_code == 200
    body = resp.get_data(as_text=True)
    assert "Book Copy" in body
    assert "RFID-BLV-001" in body
    assert "bg-red-100 text-red-800\">Overdue</span>" in body
    assert "bg-green-100 text-green-800\">Returned</span>" in body
    assert '<span class="text-red-600 font-semibold">10/10/2025</span>' in body
    assert "3 days ago" in body


def test_index_sorted_by_due_date_desc(app, client, seeded):
    body = client.get("/loans").get_data(as_text=True)
    first = body.index(f'id="record_{loan_id(app, "RFID-1984-001")}"')
    last = body.index(f'id="record_{loan_id(app, "RFID-PPR-001")}"')
    assert first < last


def test_new_form_dropdowns(client, seeded):
    resp = client.get("/loans/new")
    assert resp.status_code == 200
    body = resp.get_data(as_text=True)
    assert "RFID-1984-001 - 1984" in body
    assert "Select Member" in body
    assert "Select Book copy" in body
    assert 'name="loan-book_title"' not in body
    # status começa em "pending"
    assert '<option selected value="pending">' in body
    assert body.index("RFID-1984-001 - 1984") < body.index("RFID-PPR-001 - Pride and Prejudice")


def test_create_loan(app, client, seeded, record_id):
    copy = record_id(BookCopy, rfid="RFID-PPR-002")
    member = record_id(Member, name="Emma Wilson")
    resp = client.post(
        "/loans",
        data={
            "loan-book_copy_id": str(copy),
            "loan-member_id": str(member),
            "loan-due_date": "2025-11-01",
            "loan-status": "active",
        },
    )
    assert resp.status_code == 303
    with app.app_context():
        loan = db.session.query(Loan).filter_by(book_copy_id=copy).one()
        assert loan.member_id == member
        assert loan.due_date == date(2025, 11, 1)
        assert loan.book_title == "Pride and Prejudice"


def test_create_requires_due_date(client, seeded, record_id):
    copy = record_id(BookCopy, rfid="RFID-PPR-002")
    member = record_id(Member, name="Emma Wilson")
    resp = client.post("/loans", data={"loan-book_copy_id": str(copy), "loan-member_id": str(member)})
    assert resp.status_code == 422


def test_mark_returned(app, client, seeded):
    loan = loan_id(app, "RFID-BLV-001")
    with app.app_context():
        record = db.session.get(Loan, loan)
        data = {
            "loan-book_copy_id": str(record.book_copy_id),
            "loan-member_id": str(record.member_id),
            "loan-due_date": record.due_date.isoformat(),
            "loan-returned_at": "2025-10-14T10:30",
            "loan-status": "returned",
        }
    resp = client.post(f"/loans/{loan}", data=data)
    assert resp.status_code == 303
    with app.app_context():
        record = db.session.get(Loan, loan)
        assert record.status == "returned"
        assert record.returned_at.hour == 10


def test_parent_filter_by_member(app, client, seeded, record_id):
    alice = record_id(Member, name="Alice Johnson")
    body = client.get(f"/loans?member_id={alice}").get_data(as_text=True)
    assert "Showing loans for member" in body
    assert f'id="record_{loan_id(app, "RFID-1984-001")}"' in body
    assert f'id="record_{loan_id(app, "RFID-BLV-001")}"' not in body


def test_filters_by_status_and_due_date_range(app, client, seeded):
    body = client.get("/loans?filter[status]=overdue").get_data(as_text=True)
    assert f'id="record_{loan_id(app, "RFID-BLV-001")}"' in body
    assert f'id="record_{loan_id(app, "RFID-1984-001")}"' not in body
    assert "Showing 1 of 4 loans" in body

    body = client.get("/loans?filter[due_date_from]=2025-10-16&filter[due_date_to]=2025-10-25").get_data(as_text=True)
    assert f'id="record_{loan_id(app, "RFID-AMR-001")}"' in body
    assert f'id="record_{loan_id(app, "RFID-1984-001")}"' not in body


def test_destroy(app, client, seeded):
    loan = loan_id(app, "RFID-PPR-001")
    assert client.post(f"/loans/{loan}/delete").status_code == 303
    with app.app_context():
        assert db.session.get(Loan, loan) is None
        assert db.session.query(BookCopy).filter_by(rfid="RFID-PPR-001").count() == 1
