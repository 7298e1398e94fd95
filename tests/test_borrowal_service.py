from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from library_api.errors import ConflictError, NotFoundError, TransactionFailure, ValidationError
from library_api.extensions import db
from library_api.models.book import Book
from library_api.models.borrowal import Borrowal
from library_api.repositories.borrowal_repo import BorrowalRepo
from library_api.services.borrowal_query_service import BorrowalQueryService
from library_api.services.borrowal_service import BorrowalService

from conftest import T0


def _open_loans_for(book_id):
    return Borrowal.query.filter(Borrowal.book_id == book_id, Borrowal.status != "returned").count()


# -----------------------------
# Open
# -----------------------------
def test_open_marks_book_unavailable_and_defaults_dates(make_book, member):
    book = make_book()

    b = BorrowalService.open_borrowal(book.id, member.id)

    assert b.status == "borrowed"
    assert b.borrowed_date == T0
    assert b.due_date == T0 + timedelta(days=14)
    assert b.returned_date is None
    assert b.fine == Decimal("0.00")
    assert db.session.get(Book, book.id).is_available is False


def test_second_open_on_same_book_conflicts(make_book, make_user):
    book = make_book()
    m1, m2 = make_user(), make_user()

    BorrowalService.open_borrowal(book.id, m1.id)
    with pytest.raises(ConflictError, match="not available"):
        BorrowalService.open_borrowal(book.id, m2.id)

    assert Borrowal.query.count() == 1
    assert _open_loans_for(book.id) == 1


def test_open_accepts_string_ids_and_blank_status(make_book, member):
    book = make_book()
    b = BorrowalService.open_borrowal(str(book.id), str(member.id), status="  ")
    assert b.status == "borrowed"


def test_open_due_date_derives_from_given_borrowed_date(make_book, member):
    book = make_book()
    b = BorrowalService.open_borrowal(book.id, member.id, borrowed_date="2024-02-29T12:00:00")
    assert b.due_date == T0 - timedelta(days=1) + timedelta(days=14)


@pytest.mark.parametrize("book_id, member_id", [("abc", 1), (1, None), (0, 1), (True, 1), (1, "-3")])
def test_open_rejects_malformed_ids(book_id, member_id):
    with pytest.raises(ValidationError):
        BorrowalService.open_borrowal(book_id, member_id)


def test_open_rejects_non_initial_status(make_book, member):
    book = make_book()
    with pytest.raises(ValidationError):
        BorrowalService.open_borrowal(book.id, member.id, status="returned")
    assert db.session.get(Book, book.id).is_available is True


def test_open_rejects_due_date_before_borrowed_date(make_book, member):
    book = make_book()
    with pytest.raises(ValidationError):
        BorrowalService.open_borrowal(book.id, member.id, due_date="2024-02-01T00:00:00")


def test_open_missing_book_or_member(make_book, member):
    with pytest.raises(NotFoundError, match="Book not found"):
        BorrowalService.open_borrowal(999, member.id)

    book = make_book()
    with pytest.raises(NotFoundError, match="Member not found"):
        BorrowalService.open_borrowal(book.id, 999)

    # no partial writes
    assert db.session.get(Book, book.id).is_available is True
    assert Borrowal.query.count() == 0


def test_open_unavailable_book_conflicts(make_book, member):
    book = make_book(available=False)
    with pytest.raises(ConflictError):
        BorrowalService.open_borrowal(book.id, member.id)


def test_back_dated_open_starts_overdue(make_book, member):
    book = make_book()
    b = BorrowalService.open_borrowal(
        book.id, member.id,
        borrowed_date=T0 - timedelta(days=20),
        due_date=T0 - timedelta(days=2),
    )
    assert b.status == "overdue"
    assert b.fine == Decimal("2.00")


def test_open_rolls_back_book_claim_when_insert_fails(make_book, member, monkeypatch):
    book = make_book()

    def boom(borrowal):
        raise OperationalError("INSERT INTO borrowals", {}, Exception("disk I/O error"))

    monkeypatch.setattr(BorrowalRepo, "add", staticmethod(boom))

    with pytest.raises(TransactionFailure):
        BorrowalService.open_borrowal(book.id, member.id)

    assert db.session.get(Book, book.id).is_available is True
    assert Borrowal.query.count() == 0


# -----------------------------
# Overdue evaluation
# -----------------------------
def test_read_after_due_date_marks_overdue_with_fine(make_book, member, clock):
    book = make_book()
    b = BorrowalService.open_borrowal(book.id, member.id)
    due = b.due_date

    clock.set(due + timedelta(days=3))
    data = BorrowalQueryService.get(b.id)

    assert data["status"] == "overdue"
    assert data["fine"] == 3.0
    assert data["is_overdue"] is True
    stored = db.session.get(Borrowal, b.id)
    assert stored.status == "overdue"
    assert stored.fine == Decimal("3.00")


def test_fine_keeps_growing_while_overdue(make_book, member, clock):
    book = make_book()
    b = BorrowalService.open_borrowal(book.id, member.id)
    due = b.due_date

    clock.set(due + timedelta(days=1))
    assert BorrowalQueryService.get(b.id)["fine"] == 1.0
    clock.set(due + timedelta(days=5))
    assert BorrowalQueryService.get(b.id)["fine"] == 5.0


def test_member_with_overdue_loan_cannot_open(make_book, member, clock):
    first = make_book()
    other = make_book()
    b = BorrowalService.open_borrowal(first.id, member.id)
    clock.set(b.due_date + timedelta(days=1))
    BorrowalQueryService.get(b.id)

    with pytest.raises(ConflictError, match="overdue"):
        BorrowalService.open_borrowal(other.id, member.id)
    assert db.session.get(Book, other.id).is_available is True


def test_member_with_untouched_past_due_loan_cannot_open(make_book, member, clock):
    first = make_book()
    other = make_book()
    b = BorrowalService.open_borrowal(first.id, member.id)
    clock.set(b.due_date + timedelta(hours=1))

    # stored label is still "borrowed"; the predicate still blocks
    assert db.session.get(Borrowal, b.id).status == "borrowed"
    with pytest.raises(ConflictError):
        BorrowalService.open_borrowal(other.id, member.id)


# -----------------------------
# Return
# -----------------------------
def test_open_then_immediate_return_has_zero_fine(make_book, member):
    book = make_book()
    b = BorrowalService.open_borrowal(book.id, member.id)

    returned, fine, message = BorrowalService.return_borrowal(b.id)

    assert fine == Decimal("0.00")
    assert message == "Book returned successfully"
    assert returned.status == "returned"
    assert returned.returned_date == T0
    assert db.session.get(Book, book.id).is_available is True


def test_return_twice_is_rejected_and_state_unchanged(make_book, member, clock):
    book = make_book()
    b = BorrowalService.open_borrowal(book.id, member.id)
    clock.advance(days=16)
    BorrowalService.return_borrowal(b.id)
    first = db.session.get(Borrowal, b.id)
    returned_date, fine = first.returned_date, first.fine

    clock.advance(days=3)
    with pytest.raises(ConflictError, match="already returned"):
        BorrowalService.return_borrowal(b.id)

    again = db.session.get(Borrowal, b.id)
    assert again.returned_date == returned_date
    assert again.fine == fine == Decimal("2.00")


def test_late_return_freezes_fine(make_book, member, clock):
    book = make_book()
    b = BorrowalService.open_borrowal(book.id, member.id)
    clock.set(b.due_date + timedelta(days=2, hours=1))

    _, fine, message = BorrowalService.return_borrowal(b.id)
    assert fine == Decimal("3.00")
    assert message == "Book returned with fine: $3.00"

    clock.advance(days=30)
    data = BorrowalQueryService.get(b.id)
    assert data["fine"] == 3.0
    assert data["status"] == "returned"
    assert data["is_overdue"] is False


def test_return_unknown_borrowal(app):
    with pytest.raises(NotFoundError):
        BorrowalService.return_borrowal(12345)
    with pytest.raises(ValidationError):
        BorrowalService.return_borrowal("not-an-id")


def test_book_can_be_borrowed_again_after_return(make_book, make_user):
    book = make_book()
    m1, m2 = make_user(), make_user()
    b = BorrowalService.open_borrowal(book.id, m1.id)
    BorrowalService.return_borrowal(b.id)

    second = BorrowalService.open_borrowal(book.id, m2.id)
    assert second.status == "borrowed"
    assert _open_loans_for(book.id) == 1


# -----------------------------
# Delete
# -----------------------------
def test_delete_open_borrowal_restores_availability(make_book, member):
    book = make_book()
    b = BorrowalService.open_borrowal(book.id, member.id)

    removed = BorrowalService.delete_borrowal(b.id)

    assert removed.id == b.id
    assert removed.status == "borrowed"
    assert db.session.get(Borrowal, b.id) is None
    assert db.session.get(Book, book.id).is_available is True


def test_delete_returned_borrowal_leaves_availability_alone(make_book, make_user):
    book = make_book()
    m1, m2 = make_user(), make_user()
    old = BorrowalService.open_borrowal(book.id, m1.id)
    BorrowalService.return_borrowal(old.id)
    BorrowalService.open_borrowal(book.id, m2.id)

    BorrowalService.delete_borrowal(old.id)

    # the newer open loan still holds the book
    assert db.session.get(Book, book.id).is_available is False
    assert _open_loans_for(book.id) == 1


def test_delete_missing_borrowal(app):
    with pytest.raises(NotFoundError):
        BorrowalService.delete_borrowal(77)


# -----------------------------
# Update
# -----------------------------
def test_update_ignores_blank_status_and_edits_notes(make_book, member):
    book = make_book()
    b = BorrowalService.open_borrowal(book.id, member.id)

    updated = BorrowalService.update_borrowal(b.id, {"status": "", "notes": "slightly worn cover"})

    assert updated.status == "borrowed"
    assert updated.notes == "slightly worn cover"


def test_update_cannot_move_loan_to_another_book_or_member(make_book, make_user):
    book, other_book = make_book(), make_book()
    m1, m2 = make_user(), make_user()
    b = BorrowalService.open_borrowal(book.id, m1.id)

    with pytest.raises(ValidationError):
        BorrowalService.update_borrowal(b.id, {"book_id": other_book.id})
    with pytest.raises(ValidationError):
        BorrowalService.update_borrowal(b.id, {"member_id": m2.id})

    # unchanged references are accepted
    BorrowalService.update_borrowal(b.id, {"book_id": book.id, "member_id": str(m1.id)})
    assert db.session.get(Book, other_book.id).is_available is True


def test_update_rejects_protected_fields(make_book, member):
    b = BorrowalService.open_borrowal(make_book().id, member.id)
    with pytest.raises(ValidationError):
        BorrowalService.update_borrowal(b.id, {"fine": 0})
    with pytest.raises(ValidationError):
        BorrowalService.update_borrowal(b.id, {"returned_date": "2024-03-02T00:00:00"})


def test_update_status_rules(make_book, member):
    b = BorrowalService.open_borrowal(make_book().id, member.id)

    with pytest.raises(ConflictError):
        BorrowalService.update_borrowal(b.id, {"status": "returned"})
    with pytest.raises(ValidationError):
        BorrowalService.update_borrowal(b.id, {"status": "lost"})

    BorrowalService.return_borrowal(b.id)
    with pytest.raises(ConflictError):
        BorrowalService.update_borrowal(b.id, {"status": "borrowed"})


def test_update_due_date_into_the_past_triggers_overdue(make_book, member, clock):
    b = BorrowalService.open_borrowal(make_book().id, member.id)
    clock.advance(days=5)

    updated = BorrowalService.update_borrowal(b.id, {"due_date": (T0 + timedelta(days=2)).isoformat()})

    assert updated.status == "overdue"
    assert updated.fine == Decimal("3.00")


def test_update_can_extend_due_date(make_book, member):
    b = BorrowalService.open_borrowal(make_book().id, member.id)
    updated = BorrowalService.update_borrowal(b.id, {"due_date": "2024-04-01T12:00:00Z"})
    assert updated.due_date == T0.replace(month=4)
    assert updated.status == "borrowed"


def test_status_edit_never_reopens_a_returned_loan(make_book, member, clock):
    b = BorrowalService.open_borrowal(make_book().id, member.id)
    BorrowalService.return_borrowal(b.id)

    assert BorrowalRepo.set_status(b, "overdue", clock.now()) is False
    assert b.status == "returned"
    assert b.returned_date == T0


def test_update_rejects_non_string_notes(make_book, member):
    b = BorrowalService.open_borrowal(make_book().id, member.id, notes="desk 3")

    with pytest.raises(ValidationError):
        BorrowalService.update_borrowal(b.id, {"notes": ["a", "b"]})
    with pytest.raises(ValidationError):
        BorrowalService.open_borrowal(make_book().id, member.id, notes=42)

    assert db.session.get(Borrowal, b.id).notes == "desk 3"
    assert BorrowalService.update_borrowal(b.id, {"notes": None}).notes is None


# -----------------------------
# Invariants
# -----------------------------
def test_lifecycle_invariants_hold(make_book, make_user, clock):
    books = [make_book() for _ in range(3)]
    members = [make_user() for _ in range(3)]

    loans = [BorrowalService.open_borrowal(bk.id, m.id) for bk, m in zip(books, members)]
    for bk, m in zip(books, reversed(members)):
        with pytest.raises(ConflictError):
            BorrowalService.open_borrowal(bk.id, m.id)

    clock.advance(days=20)
    BorrowalService.return_borrowal(loans[0].id)
    BorrowalService.delete_borrowal(loans[1].id)
    BorrowalQueryService.list_all()

    for bk in books:
        open_count = _open_loans_for(bk.id)
        assert open_count <= 1
        assert db.session.get(Book, bk.id).is_available is (open_count == 0)
    assert all(b.fine >= 0 for b in Borrowal.query.all())
