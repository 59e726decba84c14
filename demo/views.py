"""CRUD views of the demo library application."""

from decimal import Decimal

from markupsafe import Markup
from sqlalchemy import func, select
from wtforms.validators import Email

from elaine_crud import CrudView, field, resources, root

from .models import (
    LIBRARIAN_ROLES,
    LOAN_STATUSES,
    MEMBERSHIP_TYPES,
    Author,
    Book,
    BookCopy,
    Librarian,
    Library,
    Loan,
    Member,
    Profile,
    Tag,
    utcnow,
)

STATUS_COLORS = {"pending": "gray", "active": "blue", "returned": "green", "overdue": "red"}
BADGE = "inline-flex items-center px-2 py-1 rounded text-xs font-medium"


def format_currency(value, precision=2):
    if value is None or value == "":
        return None
    return f"${Decimal(value):,.{precision}f}"


def mail_to(value, css_class=None):
    if not value:
        return None
    if css_class:
        return Markup('<a href="mailto:{0}" class="{1}">{0}</a>').format(value, css_class)
    return Markup('<a href="mailto:{0}">{0}</a>').format(value)


def format_long_date(value, record=None):
    return value.strftime("%B %d, %Y") if value else None


def time_ago(value, now=None):
    """Rough distance in words between ``value`` and now."""
    seconds = int(((now or utcnow()) - value).total_seconds())
    if seconds < 60:
        return "less than a minute"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    hours = minutes // 60
    if hours < 24:
        return f"about {hours} hour{'s' if hours != 1 else ''}"
    days = hours // 24
    if days < 30:
        return f"{days} day{'s' if days != 1 else ''}"
    months = days // 30
    if months < 12:
        return f"{months} month{'s' if months != 1 else ''}"
    years = days // 365
    return f"about {years} year{'s' if years != 1 else ''}"


class DemoView(CrudView):
    layout = "layout.html"


class AuthorsView(DemoView):
    model = Author
    permit_params = ["name", "biography", "birth_year", "country", "active"]
    default_sort = ("name", "asc")
    show_view_button = True

    fields = [
        field("active", title="Status", display_as="display_active"),
    ]

    def display_active(self, value, record):
        if value:
            return Markup('<span class="text-green-600 font-semibold">✓ Active</span>')
        return Markup('<span class="text-gray-600">✗ Inactive</span>')


class BooksView(DemoView):
    model = Book
    permit_params = ["title", "isbn", "publication_year", "pages", "description", "available", "price", "ebook_url"]
    default_sort = ("title", "asc")

    fields = [
        field("price", title="Price", display_as=lambda value, record: format_currency(value)),
        field("available", title="Availability", display_as="display_available"),
        field("author_id", title="Author", nested_create=True),
        field("tags", title="Tags", description="Book tags and categories", display_as="display_tags"),
    ]

    HEADER_FIELDS = ["title", "isbn", "author_id", "publication_year", "pages", "price", "available"]
    HEADER_WIDTHS = {
        "title": "minmax(120px, 1.4fr)",
        "isbn": "minmax(90px, 1fr)",
        "author_id": "minmax(100px, 1.1fr)",
        "publication_year": "minmax(70px, 0.8fr)",
        "pages": "minmax(60px, 0.6fr)",
        "price": "minmax(70px, 0.7fr)",
        "available": "minmax(100px, 1.1fr)",
        "ROW-ACTIONS": "minmax(100px, 1.2fr)",
    }

    def display_available(self, value, record):
        if value:
            return Markup('<span class="{} bg-green-100 text-green-800">✓ Available</span>').format(BADGE)
        return Markup('<span class="{} bg-red-100 text-red-800">✗ Checked Out</span>').format(BADGE)

    def display_tags(self, value, record, max_display=5):
        tags = list(record.tags)
        if not tags:
            return Markup('<span class="text-gray-400 italic text-sm">No tags</span>')
        html = Markup("").join(
            Markup(
                '<span class="inline-block px-2 py-1 text-xs font-semibold rounded-full text-white mr-1 mb-1" '
                'style="background-color: {}">{}</span>'
            ).format(tag.color, tag.name)
            for tag in tags[:max_display]
        )
        if len(tags) > max_display:
            html += Markup('<span class="text-xs text-gray-500 ml-1">+{} more</span>').format(len(tags) - max_display)
        return html

    def calculate_layout(self, record, fields):
        # segunda linha: descrição, tags e cópias sob as colunas da primeira
        row1 = [{"field_name": name, "colspan": 1, "rowspan": 1} for name in self.HEADER_FIELDS]
        row2 = [
            {"field_name": "description", "colspan": 4, "rowspan": 1},
            {"field_name": "tags", "colspan": 2, "rowspan": 1},
            {"field_name": "book_copies", "colspan": 1, "rowspan": 1},
        ]
        return [row1, row2]

    def calculate_layout_header(self, fields):
        return [
            {"width": self.HEADER_WIDTHS.get(name, "minmax(100px, 1fr)"), "field_name": name}
            for name in self.HEADER_FIELDS + ["ROW-ACTIONS"]
        ]


class BookCopiesView(DemoView):
    model = BookCopy
    permit_params = ["book_id", "library_id", "rfid", "available"]


class LibrariansView(DemoView):
    model = Librarian
    permit_params = ["name", "email", "role", "hire_date", "salary"]
    default_sort = ("name", "asc")

    fields = [
        field("role", title="Role", options=LIBRARIAN_ROLES),
        field("email", display_as=lambda value, record: mail_to(value), validators=[Email()]),
        field("salary", title="Annual Salary", display_as=lambda value, record: format_currency(value, precision=0)),
        field("hire_date", title="Hired On", display_as=format_long_date),
    ]


class LibrariesView(DemoView):
    model = Library
    permit_params = ["name", "city", "state", "phone", "email", "established_date"]
    default_sort = ("name", "asc")
    show_view_button = True

    fields = [
        field(
            "email",
            title="Email Address",
            display_as=lambda value, record: mail_to(value),
            validators=[Email()],
        ),
        field(
            "established_date",
            title="Established",
            display_as=lambda value, record: value.strftime("%B %Y") if value else None,
        ),
    ]

    librarian_columns = ["name", "email", "role", "salary"]

    def library_statistics(self, library):
        session = self.session
        copies = select(func.count(BookCopy.id)).where(BookCopy.library_id == library.id)
        return {
            "total_book_copies": session.scalar(copies),
            "unique_books": session.scalar(
                select(func.count(func.distinct(BookCopy.book_id))).where(BookCopy.library_id == library.id)
            ),
            "available_copies": session.scalar(copies.where(BookCopy.available.is_(True))),
            "active_members": session.scalar(
                select(func.count(Member.id)).where(Member.library_id == library.id, Member.active.is_(True))
            ),
        }

    def show(self, record_id):
        record = self.find_record(record_id)
        librarians = self.session.scalars(
            select(Librarian).where(Librarian.library_id == record.id).order_by(Librarian.name)
        ).all()
        return self.render(
            "libraries/show.html",
            record=record,
            columns=self.determine_columns(),
            stats=self.library_statistics(record),
            librarians=librarians,
            librarians_view=LibrariansView(resource_name="librarians"),
            librarian_columns=self.librarian_columns,
        )


class LoansView(DemoView):
    model = Loan
    permit_params = ["book_copy_id", "member_id", "due_date", "returned_at", "status"]
    default_sort = ("due_date", "desc")

    fields = [
        field("book_title", title="Book", readonly=True, visible=True, display_as="display_book_title"),
        field(
            "book_copy_id",
            title="Book Copy",
            display_as=lambda value, record: record.book_copy.rfid if record.book_copy else "—",
            foreign_key={
                "model": BookCopy,
                "display": lambda copy: copy_label(copy),
                "scope": lambda: select(BookCopy).join(BookCopy.book).order_by(Book.title),
            },
        ),
        field(
            "member_id",
            title="Member",
            foreign_key={
                "model": Member,
                "display": "name",
                "scope": lambda: select(Member).order_by(Member.name),
            },
        ),
        field("status", title="Status", display_as="display_status", options=LOAN_STATUSES),
        field("due_date", title="Due Date", display_as="display_due_date"),
        field(
            "returned_at",
            title="Returned",
            visible=True,
            display_as=lambda value, record: f"{time_ago(value)} ago" if value else "—",
        ),
    ]

    def display_book_title(self, value, record):
        if not value:
            return "—"
        return value if len(value) <= 50 else value[:47] + "..."

    def display_status(self, value, record):
        color = STATUS_COLORS.get(value, "gray")
        return Markup(
            '<span class="inline-flex items-center px-2.5 py-0.5 rounded-full text-xs font-medium '
            'bg-{0}-100 text-{0}-800">{1}</span>'
        ).format(color, (value or "").title())

    def display_due_date(self, value, record):
        formatted = value.strftime("%m/%d/%Y") if value else None
        if formatted and record.status == "overdue":
            return Markup('<span class="text-red-600 font-semibold">{}</span>').format(formatted)
        return formatted


def copy_label(copy):
    """Dropdown label of a book copy: RFID plus the (truncated) book title."""
    if copy.book is None:
        return f"{copy.rfid} (Book Copy #{copy.id})"
    title = copy.book.title
    if len(title) > 60:
        title = title[:57] + "..."
    return f"{copy.rfid} - {title}"


class MembersView(DemoView):
    model = Member
    permit_params = ["name", "email", "phone", "membership_type", "joined_at", "active"]
    default_sort = ("name", "asc")

    fields = [
        field("membership_type", title="Membership Type", options=MEMBERSHIP_TYPES),
        field(
            "email",
            display_as=lambda value, record: mail_to(value, "text-blue-600 hover:text-blue-800"),
            validators=[Email()],
        ),
        field("joined_at", title="Member Since", visible=True, display_as=format_long_date),
        field("active", display_as=lambda value, record: "✓ Active" if value else "✗ Inactive"),
    ]


class ProfilesView(DemoView):
    model = Profile
    permit_params = ["bio", "avatar_url"]


class TagsView(DemoView):
    model = Tag
    permit_params = ["name", "color"]
    default_sort = ("name", "asc")

    fields = [
        field("name", searchable=True),
        field(
            "color",
            title="Color",
            description="Hex color code (e.g., #3B82F6)",
            display_as=lambda value, record: Markup(
                '<span class="inline-block px-3 py-1 rounded text-white font-medium" '
                'style="background-color: {0}">{0}</span>'
            ).format(value),
        ),
    ]


RESOURCES = [
    ("libraries", LibrariesView),
    ("authors", AuthorsView),
    ("books", BooksView),
    ("book_copies", BookCopiesView),
    ("tags", TagsView),
    ("members", MembersView),
    ("loans", LoansView),
    ("librarians", LibrariansView),
    ("profiles", ProfilesView),
]


def register_views(app):
    for name, view_cls in RESOURCES:
        resources(app, name, view_cls)
    root(app, "libraries")
