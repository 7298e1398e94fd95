import threading
from datetime import timedelta

import pytest

from library_api import create_app
from library_api.config import TestConfig
from library_api.errors import ConflictError
from library_api.extensions import db
from library_api.models.book import Book
from library_api.models.borrowal import Borrowal
from library_api.models.user import User
from library_api.repositories.borrowal_repo import BorrowalRepo
from library_api.services.auth_service import AuthService
from library_api.services.borrowal_service import BorrowalService
from library_api.utils.clock import FixedClock

from conftest import T0


@pytest.fixture
def file_app(tmp_path):
    class FileConfig(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'library.db'}"
        SQLALCHEMY_ENGINE_OPTIONS = {"connect_args": {"timeout": 30}}

    app = create_app(FileConfig)
    app.extensions["clock"] = FixedClock(T0)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()
        db.engine.dispose()


def test_two_members_racing_for_one_copy(file_app):
    with file_app.app_context():
        book = Book(name="Parable of the Sower", isbn="9780446675505", is_available=True)
        members = [
            User(name=f"Racer {i}", email=f"racer{i}@library.test",
                 password_hash=AuthService.hash_password("x"))
            for i in range(2)
        ]
        db.session.add_all([book, *members])
        db.session.commit()
        book_id = book.id
        member_ids = [m.id for m in members]

    barrier = threading.Barrier(2)
    outcomes = []

    def borrow(member_id):
        with file_app.app_context():
            barrier.wait()
            try:
                BorrowalService.open_borrowal(book_id, member_id)
                outcomes.append("ok")
            except ConflictError as e:
                outcomes.append(e.message)

    threads = [threading.Thread(target=borrow, args=(m,)) for m in member_ids]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)

    assert sorted(outcomes) == ["Book is not available for borrowing", "ok"]

    with file_app.app_context():
        assert Borrowal.query.filter_by(book_id=book_id).count() == 1
        assert db.session.get(Book, book_id).is_available is False


def test_status_edit_loses_to_a_return_committed_in_between(file_app, monkeypatch):
    clock = file_app.extensions["clock"]
    with file_app.app_context():
        book = Book(name="Dawn", isbn="9780446603775", is_available=True)
        member = User(name="Lilith", email="lilith@library.test", password_hash=AuthService.hash_password("x"))
        db.session.add_all([book, member])
        db.session.commit()
        loan = BorrowalService.open_borrowal(book.id, member.id)
        loan_id, book_id = loan.id, book.id

    clock.advance(days=1)
    load = BorrowalRepo.get
    pending_return = [True]

    def load_then_return_elsewhere(borrowal_id):
        borrowal = load(borrowal_id)
        if pending_return:
            pending_return.pop()
            # another request returns the same loan and commits first
            with file_app.app_context():
                BorrowalService.return_borrowal(borrowal_id)
        return borrowal

    with file_app.app_context():
        monkeypatch.setattr(BorrowalRepo, "get", staticmethod(load_then_return_elsewhere))
        with pytest.raises(ConflictError):
            BorrowalService.update_borrowal(loan_id, {"status": "overdue"})
        monkeypatch.undo()

    with file_app.app_context():
        stored = db.session.get(Borrowal, loan_id)
        assert stored.status == "returned"
        assert stored.returned_date == T0 + timedelta(days=1)
        assert db.session.get(Book, book_id).is_available is True
