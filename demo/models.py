from datetime import date, datetime, timezone

from . import db

MEMBERSHIP_TYPES = ["Standard", "Premium", "Student", "Senior"]
LIBRARIAN_ROLES = ["Manager", "Assistant", "Clerk", "Archivist"]
LOAN_STATUSES = ["pending", "active", "returned", "overdue"]


def utcnow():
    """Naive UTC timestamp, as stored in the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TimestampMixin:
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)


books_tags = db.Table(
    "books_tags",
    db.Column("book_id", db.Integer, db.ForeignKey("books.id"), nullable=False, index=True),
    db.Column("tag_id", db.Integer, db.ForeignKey("tags.id"), nullable=False, index=True),
    db.UniqueConstraint("book_id", "tag_id", name="index_books_tags_on_book_id_and_tag_id"),
)


class Library(TimestampMixin, db.Model):
    __tablename__ = "libraries"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    city = db.Column(db.String(255), nullable=False)
    state = db.Column(db.String(255))
    phone = db.Column(db.String(255))
    email = db.Column(db.String(255))
    established_date = db.Column(db.Date)

    book_copies = db.relationship("BookCopy", back_populates="library", cascade="all, delete-orphan")
    members = db.relationship("Member", back_populates="library", cascade="all, delete-orphan")
    librarians = db.relationship("Librarian", back_populates="library", cascade="all, delete-orphan")

    def __str__(self):
        return self.name or ""


class Author(TimestampMixin, db.Model):
    __tablename__ = "authors"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    biography = db.Column(db.Text)
    birth_year = db.Column(db.Integer)
    country = db.Column(db.String(255))
    active = db.Column(db.Boolean, default=True)

    books = db.relationship("Book", back_populates="author", cascade="all, delete-orphan")

    def __str__(self):
        return self.name or ""


class Tag(TimestampMixin, db.Model):
    __tablename__ = "tags"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, unique=True)
    color = db.Column(db.String(255), nullable=False)

    books = db.relationship("Book", secondary=books_tags, back_populates="tags")

    def __str__(self):
        return self.name or ""


class Book(TimestampMixin, db.Model):
    __tablename__ = "books"
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False, index=True)
    isbn = db.Column(db.String(255), nullable=False, unique=True)
    publication_year = db.Column(db.Integer)
    pages = db.Column(db.Integer)
    description = db.Column(db.Text)
    available = db.Column(db.Boolean, default=True)
    price = db.Column(db.Numeric(10, 2))
    author_id = db.Column(db.Integer, db.ForeignKey("authors.id"), nullable=False, index=True)
    ebook_url = db.Column(db.String(255))

    author = db.relationship("Author", back_populates="books")
    book_copies = db.relationship("BookCopy", back_populates="book", cascade="all, delete-orphan")
    tags = db.relationship("Tag", secondary=books_tags, back_populates="books", order_by="Tag.name")

    def __str__(self):
        return self.title or ""


class BookCopy(TimestampMixin, db.Model):
    __tablename__ = "book_copies"
    id = db.Column(db.Integer, primary_key=True)
    book_id = db.Column(db.Integer, db.ForeignKey("books.id"), nullable=False, index=True)
    library_id = db.Column(db.Integer, db.ForeignKey("libraries.id"), nullable=False, index=True)
    rfid = db.Column(db.String(255), nullable=False, unique=True)
    available = db.Column(db.Boolean, default=True)

    book = db.relationship("Book", back_populates="book_copies")
    library = db.relationship("Library", back_populates="book_copies")
    loan = db.relationship("Loan", back_populates="book_copy", uselist=False, cascade="all, delete-orphan")

    @property
    def book_title(self):
        return self.book.title if self.book is not None else None

    def __str__(self):
        return self.rfid or ""


class Member(TimestampMixin, db.Model):
    __tablename__ = "members"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False, index=True)
    phone = db.Column(db.String(255))
    membership_type = db.Column(db.String(255), nullable=False, index=True)
    joined_at = db.Column(db.Date)
    active = db.Column(db.Boolean, default=True)
    library_id = db.Column(db.Integer, db.ForeignKey("libraries.id"), nullable=False, index=True)

    library = db.relationship("Library", back_populates="members")
    loans = db.relationship("Loan", back_populates="member", cascade="all, delete-orphan")
    profile = db.relationship("Profile", back_populates="member", uselist=False, cascade="all, delete-orphan")

    def __str__(self):
        return self.name or ""


class Profile(TimestampMixin, db.Model):
    __tablename__ = "profiles"
    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey("members.id"), nullable=False, index=True)
    bio = db.Column(db.Text)
    avatar_url = db.Column(db.String(255))

    member = db.relationship("Member", back_populates="profile")


class Loan(TimestampMixin, db.Model):
    __tablename__ = "loans"
    id = db.Column(db.Integer, primary_key=True)
    due_date = db.Column(db.Date, nullable=False, index=True)
    returned_at = db.Column(db.DateTime)
    status = db.Column(db.String(255), nullable=False, default="pending", index=True)
    member_id = db.Column(db.Integer, db.ForeignKey("members.id"), nullable=False, index=True)
    book_copy_id = db.Column(db.Integer, db.ForeignKey("book_copies.id"), nullable=False, index=True)

    book_copy = db.relationship("BookCopy", back_populates="loan")
    member = db.relationship("Member", back_populates="loans")

    @property
    def book(self):
        return self.book_copy.book if self.book_copy is not None else None

    @property
    def book_title(self):
        book = self.book
        return book.title if book is not None else None

    @property
    def library(self):
        return self.book_copy.library if self.book_copy is not None else None

    def check_overdue(self, today=None):
        """Mark an active loan past its due date as overdue; True when it changed."""
        today = today or date.today()
        if self.status == "active" and self.due_date is not None and self.due_date < today:
            self.status = "overdue"
            return True
        return False


class Librarian(TimestampMixin, db.Model):
    __tablename__ = "librarians"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False, index=True)
    role = db.Column(db.String(255), nullable=False, index=True)
    hire_date = db.Column(db.Date)
    salary = db.Column(db.Numeric(10, 2))
    library_id = db.Column(db.Integer, db.ForeignKey("libraries.id"), nullable=False, index=True)

    library = db.relationship("Library", back_populates="librarians")

    def __str__(self):
        return self.name or ""
