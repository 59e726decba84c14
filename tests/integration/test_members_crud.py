from demo import db
from demo.models import Library, Member, Profile


def test_index_shows_profile_and_loans(client, seeded, record_id):
    alice = record_id(Member, name="Alice Johnson")
    profile = record_id(Profile, member_id=alice)
    resp = client.get("/members")
    assert resp.status_code == 200
    body = resp.get_data(as_text=True)
    assert "Member Since" in body
    assert "January 15, 2020" in body
    assert f'href="/profiles/{profile}"' in body
    assert "Avid reader of classic literature" in body
    assert f"/loans?member_id={alice}" in body
    assert 'class="text-blue-600 hover:text-blue-800">alice.j@email.com</a>' in body


def test_profile_is_readonly_on_forms(client, seeded, record_id):
    alice = record_id(Member, name="Alice Johnson")
    body = client.get(f"/members/{alice}/edit").get_data(as_text=True)
    assert 'name="member-profile"' not in body
    assert "Avid reader of classic literature" in body
    assert 'name="member-loans"' not in body
    assert 'name="member-membership_type"' in body


def test_create_member_in_library(app, client, seeded, record_id):
    library = record_id(Library, name="Oakwood Community Library")
    resp = client.post(
        f"/members?library_id={library}",
        data={
            "member-name": "Grace Hopper",
            "member-email": "grace@example.com",
            "member-membership_type": "Senior",
            "member-joined_at": "2024-02-01",
            "member-active": "y",
            "member-library_id": str(library),
        },
    )
    assert resp.status_code == 303
    assert resp.headers["Location"].endswith(f"/members?library_id={library}")
    with app.app_context():
        member = db.session.query(Member).filter_by(name="Grace Hopper").one()
        assert member.library_id == library
        assert member.active is True


def test_membership_type_must_be_an_option(client, seeded, record_id):
    library = record_id(Library, name="Oakwood Community Library")
    resp = client.post(
        "/members",
        data={
            "member-name": "Grace Hopper",
            "member-email": "grace@example.com",
            "member-membership_type": "Platinum",
            "member-library_id": str(library),
        },
    )
    assert resp.status_code == 422
    assert "Not a valid choice" in resp.get_data(as_text=True)


def test_unchecked_active_is_saved_as_false(app, client, seeded, record_id):
    bob = record_id(Member, name="Bob Martinez")
    library = record_id(Library, name="Central City Library")
    resp = client.post(
        f"/members/{bob}",
        data={
            "member-name": "Bob Martinez",
            "member-email": "bob.m@email.com",
            "member-membership_type": "Standard",
            "member-library_id": str(library),
        },
    )
    assert resp.status_code == 303
    with app.app_context():
        assert db.session.get(Member, bob).active is False
    assert "✗ Inactive" in client.get("/members").get_data(as_text=True)


def test_parent_filter_by_library(client, seeded, record_id):
    library = record_id(Library, name="Riverside Public Library")
    body = client.get(f"/members?library_id={library}").get_data(as_text=True)
    assert "David Chen" in body
    assert "Emma Wilson" in body
    assert "Alice Johnson" not in body


def test_destroy_removes_profile_and_loans(app, client, seeded, record_id):
    alice = record_id(Member, name="Alice Johnson")
    assert client.post(f"/members/{alice}/delete").status_code == 303
    with app.app_context():
        assert db.session.query(Profile).filter_by(member_id=alice).count() == 0
