import itertools
from datetime import datetime

import pytest

from library_api import create_app
from library_api.config import TestConfig
from library_api.extensions import db
from library_api.models.author import Author
from library_api.models.book import Book
from library_api.models.user import User, ROLE_ADMIN, ROLE_MEMBER
from library_api.services.auth_service import AuthService
from library_api.utils.clock import FixedClock

T0 = datetime(2024, 3, 1, 12, 0, 0)
PASSWORD = "secret-pass"


@pytest.fixture
def app():
    app = create_app(TestConfig)
    app.extensions["clock"] = FixedClock(T0)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def clock(app):
    return app.extensions["clock"]


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_book(app):
    counter = itertools.count(1)

    def _make(name=None, isbn=None, available=True, author=None, **kwargs):
        n = next(counter)
        book = Book(
            name=name or f"Book {n}",
            isbn=isbn or f"978000000{n:04d}",
            is_available=available,
            author_id=author.id if author else None,
            **kwargs,
        )
        db.session.add(book)
        db.session.commit()
        return book
    return _make


@pytest.fixture
def make_author(app):
    def _make(name="Ursula K. Le Guin"):
        author = Author(name=name)
        db.session.add(author)
        db.session.commit()
        return author
    return _make


@pytest.fixture
def make_user(app):
    counter = itertools.count(1)

    def _make(name=None, email=None, role=ROLE_MEMBER, **kwargs):
        n = next(counter)
        user = User(
            name=name or f"Member {n}",
            email=email or f"user{n}@library.test",
            password_hash=AuthService.hash_password(PASSWORD),
            role=role,
            **kwargs,
        )
        db.session.add(user)
        db.session.commit()
        return user
    return _make


@pytest.fixture
def member(make_user):
    return make_user(name="Ada Reader", email="ada@library.test", phone="555-0100")


@pytest.fixture
def admin(make_user):
    return make_user(name="Librarian", email="admin@library.test", role=ROLE_ADMIN)


def login(client, email, password=PASSWORD):
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()


@pytest.fixture
def admin_client(app, admin):
    c = app.test_client()
    login(c, admin.email)
    return c


@pytest.fixture
def member_client(app, member):
    c = app.test_client()
    login(c, member.email)
    return c
