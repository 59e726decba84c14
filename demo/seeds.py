"""Demo data: libraries, authors, tags, books, copies, members, loans, librarians and profiles."""

import logging
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import delete

from . import db
from .models import (
    Author,
    Book,
    BookCopy,
    Librarian,
    Library,
    Loan,
    Member,
    Profile,
    Tag,
    books_tags,
    utcnow,
)

logger = logging.getLogger("demo.seeds")

LIBRARIES = [
    dict(name="Central City Library", city="New York", state="NY", phone="212-555-0100",
         email="contact@centralcity.lib", established_date=date(1895, 6, 15)),
    dict(name="Riverside Public Library", city="Portland", state="OR", phone="503-555-0200",
         email="info@riverside.lib", established_date=date(1920, 3, 10)),
    dict(name="Oakwood Community Library", city="Austin", state="TX", phone="512-555-0300",
         email="hello@oakwood.lib", established_date=date(1965, 9, 1)),
]

AUTHORS = [
    dict(name="Jane Austen", biography="English novelist known for her social commentary and wit",
         birth_year=1775, country="England", active=False),
    dict(name="George Orwell", biography="English novelist and essayist, journalist and critic",
         birth_year=1903, country="England", active=False),
    dict(name="Toni Morrison", biography="American novelist noted for her examination of black experience",
         birth_year=1931, country="United States", active=False),
    dict(name="Haruki Murakami", biography="Contemporary Japanese writer known for surrealist fiction",
         birth_year=1949, country="Japan", active=True),
    dict(name="Chimamanda Ngozi Adichie", biography="Nigerian writer and novelist",
         birth_year=1977, country="Nigeria", active=True),
]

TAGS = [
    ("Fiction", "#3B82F6"),
    ("Non-Fiction", "#10B981"),
    ("Science Fiction", "#8B5CF6"),
    ("Mystery", "#F59E0B"),
    ("Romance", "#EC4899"),
    ("Award Winner", "#EF4444"),
    ("Bestseller", "#14B8A6"),
    ("Classic", "#6366F1"),
    ("New Release", "#84CC16"),
    ("Dystopian", "#64748B"),
]

# (title, isbn, year, pages, description, price, author index, tag indexes)
BOOKS = [
    ("Pride and Prejudice", "978-0-14-143951-8", 1813, 432, "A romantic novel of manners", "12.99", 0, [0, 4, 7]),
    ("1984", "978-0-452-28423-4", 1949, 328, "A dystopian social science fiction novel", "15.99", 1, [0, 2, 9, 7, 5]),
    ("Beloved", "978-1-4000-3341-6", 1987, 324, "A novel about the aftermath of slavery", "16.99", 2, [0, 7, 5]),
    ("Norwegian Wood", "978-0-375-70461-8", 1987, 296, "A nostalgic story of loss and sexuality", "14.99", 3, [0, 7, 4]),
    ("Kafka on the Shore", "978-1-4000-7927-8", 2002, 480, "A metaphysical reality novel", "16.99", 3, [2, 9, 7]),
    ("Americanah", "978-0-307-45592-7", 2013, 477, "A novel about race, identity, and love", "17.99", 4, [0, 7]),
    ("Half of a Yellow Sun", "978-1-4000-4416-0", 2006, 448, "A novel set during the Nigerian Civil War", "16.99", 4, [1, 6, 8]),
    ("Animal Farm", "978-0-452-28424-1", 1945, 112, "An allegorical novella about Stalinism", "11.99", 1, [0, 5]),
]

# (book index, library index, rfid, available)
COPIES = [
    (0, 0, "RFID-PPR-001", True),
    (0, 0, "RFID-PPR-002", True),
    (0, 1, "RFID-PPR-003", True),
    (1, 0, "RFID-1984-001", False),
    (1, 0, "RFID-1984-002", True),
    (1, 1, "RFID-1984-003", True),
    (1, 2, "RFID-1984-004", True),
    (2, 0, "RFID-BLV-001", True),
    (2, 2, "RFID-BLV-002", True),
    (3, 1, "RFID-NW-001", True),
    (3, 1, "RFID-NW-002", True),
    (4, 1, "RFID-KOS-001", True),
    (4, 2, "RFID-KOS-002", True),
    (5, 2, "RFID-AMR-001", False),
    (5, 2, "RFID-AMR-002", True),
    (6, 2, "RFID-HYS-001", True),
    (6, 0, "RFID-HYS-002", True),
    (7, 2, "RFID-AF-001", True),
    (7, 0, "RFID-AF-002", True),
    (7, 1, "RFID-AF-003", True),
]

MEMBERS = [
    dict(name="Alice Johnson", email="alice.j@email.com", phone="212-555-1001", membership_type="Premium",
         joined_at=date(2020, 1, 15), active=True, library=0),
    dict(name="Bob Martinez", email="bob.m@email.com", phone="212-555-1002", membership_type="Standard",
         joined_at=date(2021, 6, 20), active=True, library=0),
    dict(name="Carol White", email="carol.w@email.com", phone="212-555-1003", membership_type="Student",
         joined_at=date(2023, 9, 1), active=True, library=0),
    dict(name="David Chen", email="david.c@email.com", phone="503-555-2001", membership_type="Premium",
         joined_at=date(2019, 3, 10), active=True, library=1),
    dict(name="Emma Wilson", email="emma.w@email.com", phone="503-555-2002", membership_type="Senior",
         joined_at=date(2018, 11, 5), active=True, library=1),
    dict(name="Frank Brown", email="frank.b@email.com", phone="512-555-3001", membership_type="Standard",
         joined_at=date(2022, 4, 12), active=True, library=2),
]

LIBRARIANS = [
    dict(name="Sarah Thompson", email="s.thompson@centralcity.lib", role="Manager",
         hire_date=date(2010, 5, 1), salary=Decimal("65000"), library=0),
    dict(name="Michael Rodriguez", email="m.rodriguez@centralcity.lib", role="Assistant",
         hire_date=date(2015, 9, 15), salary=Decimal("48000"), library=0),
    dict(name="Jennifer Lee", email="j.lee@riverside.lib", role="Manager",
         hire_date=date(2012, 3, 20), salary=Decimal("62000"), library=1),
    dict(name="Tom Anderson", email="t.anderson@riverside.lib", role="Archivist",
         hire_date=date(2018, 7, 1), salary=Decimal("52000"), library=1),
    dict(name="Maria Garcia", email="m.garcia@oakwood.lib", role="Manager",
         hire_date=date(2016, 1, 10), salary=Decimal("60000"), library=2),
]

PROFILES = [
    (0, "Avid reader of classic literature and contemporary fiction. Member since 2020.",
     "https://i.pravatar.cc/150?img=1"),
    (1, "Science fiction enthusiast and occasional poetry reader.", "https://i.pravatar.cc/150?img=12"),
    (3, "Literary fiction lover with a special interest in international authors.",
     "https://i.pravatar.cc/150?img=33"),
]

# Ordem de remoção respeita as FKs
CLEAR_ORDER = [Loan, Profile, BookCopy, books_tags, Book, Tag, Member, Librarian, Author, Library]
SUMMARY_MODELS = [Library, Author, Book, BookCopy, Tag, Member, Loan, Librarian, Profile]


def clear():
    for target in CLEAR_ORDER:
        table = target if target is books_tags else target.__table__
        db.session.execute(delete(table))
    db.session.commit()


def seed(today=None):
    """Replace the database content with the demo data set; returns row counts per table."""
    today = today or date.today()
    logger.info("Clearing existing data")
    clear()

    libraries = [Library(**attrs) for attrs in LIBRARIES]
    authors = [Author(**attrs) for attrs in AUTHORS]
    tags = [Tag(name=name, color=color) for name, color in TAGS]
    db.session.add_all(libraries + authors + tags)

    books = []
    for title, isbn, year, pages, description, price, author, tag_indexes in BOOKS:
        book = Book(
            title=title,
            isbn=isbn,
            publication_year=year,
            pages=pages,
            description=description,
            price=Decimal(price),
            author=authors[author],
        )
        book.tags = [tags[i] for i in tag_indexes]
        books.append(book)
    db.session.add_all(books)

    copies = [
        BookCopy(book=books[b], library=libraries[lib], rfid=rfid, available=available)
        for b, lib, rfid, available in COPIES
    ]
    db.session.add_all(copies)

    members = []
    for attrs in MEMBERS:
        attrs = dict(attrs)
        members.append(Member(library=libraries[attrs.pop("library")], **attrs))
    db.session.add_all(members)

    db.session.add_all(
        [
            Loan(book_copy=copies[3], member=members[0], due_date=today + timedelta(days=14), status="active"),
            Loan(book_copy=copies[13], member=members[5], due_date=today + timedelta(days=7), status="active"),
            Loan(
                book_copy=copies[0],
                member=members[1],
                due_date=today - timedelta(days=30),
                returned_at=utcnow() - timedelta(days=3),
                status="returned",
            ),
            Loan(book_copy=copies[7], member=members[2], due_date=today - timedelta(days=5), status="overdue"),
        ]
    )

    for attrs in LIBRARIANS:
        attrs = dict(attrs)
        db.session.add(Librarian(library=libraries[attrs.pop("library")], **attrs))

    for member, bio, avatar_url in PROFILES:
        db.session.add(Profile(member=members[member], bio=bio, avatar_url=avatar_url))

    db.session.commit()
    counts = summary()
    logger.info("Seed data created: %s", counts)
    return counts


def summary():
    return {model.__tablename__: db.session.query(model).count() for model in SUMMARY_MODELS}
