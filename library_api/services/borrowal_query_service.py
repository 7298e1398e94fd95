from flask import current_app

from library_api.errors import NotFoundError
from library_api.models.borrowal import STATUSES
from library_api.repositories.borrowal_repo import BorrowalRepo
from library_api.repositories.user_repo import UserRepo
from library_api.services.borrowal_service import BorrowalService
from library_api.services.fine_calculator import is_overdue
from library_api.utils.clock import utcnow
from library_api.utils.parsing import parse_id
from library_api.utils.responses import iso, money
from library_api.utils.transaction import atomic


def borrowal_json(b, now=None):
    data = {
        "id": b.id,
        "book_id": b.book_id,
        "member_id": b.member_id,
        "borrowed_date": iso(b.borrowed_date),
        "due_date": iso(b.due_date),
        "returned_date": iso(b.returned_date),
        "status": b.status,
        "fine": money(b.fine),
        "notes": b.notes,
        "created_at": iso(b.created_at),
        "updated_at": iso(b.updated_at),
    }
    if now is not None:
        data["is_overdue"] = is_overdue(b.due_date, now, b.status)
    return data


def _book_json(book, author=None, fields=("id", "name", "isbn", "photo_url")):
    if book is None:
        return None
    data = {f: getattr(book, f, None) for f in fields}
    if author is not None or "author_id" in fields:
        data["author"] = {"id": author.id, "name": author.name} if author else None
    return data


def _member_json(member, fields=("id", "name", "email", "photo_url")):
    if member is None:
        return None
    return {f: getattr(member, f, None) for f in fields}


def project(row, now, book_fields=("id", "name", "isbn", "photo_url", "author_id"),
            member_fields=("id", "name", "email", "photo_url")):
    borrowal, book, author, member = row
    data = borrowal_json(borrowal, now)
    data["book"] = _book_json(book, author, book_fields)
    data["member"] = _member_json(member, member_fields)
    return data


class BorrowalQueryService:
    @staticmethod
    def view(borrowal_id: int):
        """Enriched projection without re-evaluation (used right after a write)."""
        row = BorrowalRepo.get_joined(borrowal_id)
        if not row:
            raise NotFoundError("Borrowal not found")
        return project(row, utcnow())

    @staticmethod
    def get(borrowal_id):
        borrowal_id = parse_id(borrowal_id, "borrowal id")
        now = utcnow()
        with atomic("borrowal.get"):
            borrowal = BorrowalRepo.get(borrowal_id)
            if not borrowal:
                raise NotFoundError("Borrowal not found")
            BorrowalService.refresh(borrowal, now)

        return project(BorrowalRepo.get_joined(borrowal_id), now)

    @staticmethod
    def list_all():
        now = utcnow()
        with atomic("borrowal.list_all"):
            for borrowal in BorrowalRepo.find_open():
                BorrowalService.refresh(borrowal, now)

        return [project(row, now) for row in BorrowalRepo.list_all_joined()]

    @staticmethod
    def list_by_member(member_id):
        member_id = parse_id(member_id, "member_id")
        now = utcnow()
        with atomic("borrowal.list_by_member"):
            if not UserRepo.get_by_id(member_id):
                raise NotFoundError("Member not found")
            for borrowal in BorrowalRepo.find_open(member_id=member_id):
                BorrowalService.refresh(borrowal, now)

        return [project(row, now) for row in BorrowalRepo.list_by_member_joined(member_id)]

    @staticmethod
    def list_overdue():
        # stored label güncel olmayabilir: önce reconcile
        BorrowalService.reconcile_overdue()
        now = utcnow()
        return [
            project(
                row, now,
                book_fields=("id", "name", "isbn"),
                member_fields=("id", "name", "email", "phone"),
            )
            for row in BorrowalRepo.list_overdue_joined()
        ]

    @staticmethod
    def stats():
        """Read-only; open past-due loans are counted as overdue even if not yet relabelled."""
        now = utcnow()
        counts = {status: 0 for status in STATUSES}
        counts.update(BorrowalRepo.status_counts(now))

        limit = int(current_app.config.get("RECENT_BORROWALS_LIMIT", 5))
        recent = [
            {
                "id": b.id,
                "status": b.status,
                "borrowed_date": iso(b.borrowed_date),
                "due_date": iso(b.due_date),
                "fine": money(b.fine),
                "book": _book_json(book, fields=("id", "name", "isbn")),
                "member": _member_json(member, fields=("id", "name", "email")),
            }
            for b, book, _author, member in BorrowalRepo.recent_joined(limit)
        ]

        return {
            "status_counts": counts,
            "total_fines": money(BorrowalRepo.total_fines()),
            "recent_borrowals": recent,
        }
