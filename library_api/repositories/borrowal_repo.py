from datetime import datetime
from decimal import Decimal

from sqlalchemy import and_, case, delete, func, or_, update
from sqlalchemy.orm import aliased

from library_api.models.author import Author
from library_api.models.book import Book
from library_api.models.borrowal import Borrowal, STATUS_OVERDUE, STATUS_RETURNED
from library_api.models.user import User
from library_api.extensions import db

Member = aliased(User, name="member")


class BorrowalRepo:
    @staticmethod
    def get(borrowal_id: int):
        return db.session.get(Borrowal, borrowal_id)

    @staticmethod
    def add(borrowal: Borrowal):
        db.session.add(borrowal)
        db.session.flush()
        return borrowal

    # -----------------------------
    # Guarded writes (status != returned)
    # -----------------------------
    @staticmethod
    def mark_overdue(borrowal: Borrowal, fine: Decimal, now: datetime) -> bool:
        result = db.session.execute(
            update(Borrowal)
            .where(Borrowal.id == borrowal.id, Borrowal.status != STATUS_RETURNED)
            .values(status=STATUS_OVERDUE, fine=fine, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        db.session.refresh(borrowal)
        return result.rowcount == 1

    @staticmethod
    def set_status(borrowal: Borrowal, status: str, now: datetime) -> bool:
        """Elle status düzeltmesi (borrowed/overdue); iade edilmiş kayda dokunmaz."""
        result = db.session.execute(
            update(Borrowal)
            .where(Borrowal.id == borrowal.id, Borrowal.status != STATUS_RETURNED)
            .values(status=status, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        db.session.refresh(borrowal)
        return result.rowcount == 1

    @staticmethod
    def mark_returned(borrowal: Borrowal, fine: Decimal, now: datetime) -> bool:
        result = db.session.execute(
            update(Borrowal)
            .where(Borrowal.id == borrowal.id, Borrowal.status != STATUS_RETURNED)
            .values(status=STATUS_RETURNED, returned_date=now, fine=fine, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        db.session.refresh(borrowal)
        return result.rowcount == 1

    @staticmethod
    def delete_if_status(borrowal: Borrowal, expected_status: str) -> bool:
        result = db.session.execute(
            delete(Borrowal)
            .where(Borrowal.id == borrowal.id, Borrowal.status == expected_status)
            .execution_options(synchronize_session=False)
        )
        db.session.expunge(borrowal)
        return result.rowcount == 1

    # -----------------------------
    # Reads
    # -----------------------------
    @staticmethod
    def overdue_filter(now: datetime):
        """Stored label or canonical predicate (open and past due)."""
        return or_(
            Borrowal.status == STATUS_OVERDUE,
            and_(Borrowal.status != STATUS_RETURNED, Borrowal.due_date < now),
        )

    @staticmethod
    def count_overdue_for_member(member_id: int, now: datetime) -> int:
        return Borrowal.query.filter(
            Borrowal.member_id == member_id,
            BorrowalRepo.overdue_filter(now),
        ).count()

    @staticmethod
    def count_open_for_book(book_id: int) -> int:
        return Borrowal.query.filter(
            Borrowal.book_id == book_id, Borrowal.status != STATUS_RETURNED
        ).count()

    @staticmethod
    def count_open_for_member(member_id: int) -> int:
        return Borrowal.query.filter(
            Borrowal.member_id == member_id, Borrowal.status != STATUS_RETURNED
        ).count()

    @staticmethod
    def find_open(member_id: int = None):
        q = Borrowal.query.filter(Borrowal.status != STATUS_RETURNED)
        if member_id is not None:
            q = q.filter(Borrowal.member_id == member_id)
        return q.all()

    @staticmethod
    def find_open_past_due(now: datetime):
        return Borrowal.query.filter(
            Borrowal.status != STATUS_RETURNED,
            Borrowal.due_date < now,
        ).order_by(Borrowal.due_date.asc()).all()

    # read-side join: Borrowal -> Book -> Author, Borrowal -> Member
    @staticmethod
    def _joined():
        return (
            db.session.query(Borrowal, Book, Author, Member)
            .outerjoin(Book, Book.id == Borrowal.book_id)
            .outerjoin(Author, Author.id == Book.author_id)
            .outerjoin(Member, Member.id == Borrowal.member_id)
        )

    @staticmethod
    def get_joined(borrowal_id: int):
        return BorrowalRepo._joined().filter(Borrowal.id == borrowal_id).first()

    @staticmethod
    def list_all_joined():
        return BorrowalRepo._joined().order_by(
            Borrowal.borrowed_date.desc(), Borrowal.id.desc()
        ).all()

    @staticmethod
    def list_by_member_joined(member_id: int):
        return BorrowalRepo._joined().filter(Borrowal.member_id == member_id).order_by(
            Borrowal.borrowed_date.desc(), Borrowal.id.desc()
        ).all()

    @staticmethod
    def list_overdue_joined():
        return BorrowalRepo._joined().filter(Borrowal.status == STATUS_OVERDUE).order_by(
            Borrowal.due_date.asc(), Borrowal.id.asc()
        ).all()

    @staticmethod
    def recent_joined(limit: int):
        return BorrowalRepo._joined().order_by(
            Borrowal.borrowed_date.desc(), Borrowal.id.desc()
        ).limit(limit).all()

    # -----------------------------
    # Aggregates
    # -----------------------------
    @staticmethod
    def status_counts(now: datetime):
        effective_status = case(
            (and_(Borrowal.status != STATUS_RETURNED, Borrowal.due_date < now), STATUS_OVERDUE),
            else_=Borrowal.status,
        )
        labelled = db.session.query(effective_status.label("status")).subquery()
        rows = (
            db.session.query(labelled.c.status, func.count())
            .group_by(labelled.c.status)
            .all()
        )
        return {status: int(count) for status, count in rows}

    @staticmethod
    def total_fines() -> Decimal:
        total = db.session.query(func.coalesce(func.sum(Borrowal.fine), 0)).scalar()
        return Decimal(str(total or 0)).quantize(Decimal("0.01"))
