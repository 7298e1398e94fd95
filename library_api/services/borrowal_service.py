"""Borrowal lifecycle: open, return, update, delete.

A borrowal moves ``borrowed -> overdue -> returned`` (or straight from
``borrowed`` to ``returned``); nothing leaves ``returned``. This service is
the only writer of ``status``, ``fine`` and ``returned_date`` and the only
code that flips a book's ``is_available`` flag. Every operation runs inside
one :func:`atomic` block so the borrowal write and the availability write
commit together or not at all.

The overdue label is refreshed lazily: whenever an open borrowal is touched
and the clock is past its due date, :meth:`BorrowalService.refresh` marks it
``overdue`` and recomputes the fine.
"""
from datetime import timedelta
from decimal import Decimal

from flask import current_app

from library_api.errors import ConflictError, NotFoundError, TransactionFailure, ValidationError
from library_api.models.borrowal import (
    Borrowal, STATUSES, STATUS_BORROWED, STATUS_OVERDUE, STATUS_RETURNED,
)
from library_api.repositories.book_repo import BookRepo
from library_api.repositories.borrowal_repo import BorrowalRepo
from library_api.repositories.user_repo import UserRepo
from library_api.services.fine_calculator import calculate_fine, is_overdue
from library_api.utils.clock import utcnow
from library_api.utils.parsing import parse_datetime, parse_id
from library_api.utils.transaction import atomic

UPDATABLE_FIELDS = {"notes", "due_date", "status"}
REFERENCE_FIELDS = ("book_id", "member_id")


class BorrowalService:
    @staticmethod
    def _loan_days() -> int:
        return int(current_app.config.get("LOAN_PERIOD_DAYS", 14))

    @staticmethod
    def _fine_rate() -> Decimal:
        return Decimal(str(current_app.config.get("FINE_PER_DAY", 1)))

    @staticmethod
    def _notes(value):
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValidationError("notes must be a string")
        return value

    @staticmethod
    def refresh(borrowal: Borrowal, now) -> bool:
        """
        Lazy overdue değerlendirmesi. Kayıt değiştiyse True döner.
        Çağıran tarafın açık bir transaction içinde olması gerekir.
        """
        if not is_overdue(borrowal.due_date, now, borrowal.status):
            return False

        fine = calculate_fine(borrowal.due_date, now, BorrowalService._fine_rate())
        if borrowal.status == STATUS_OVERDUE and Decimal(str(borrowal.fine)) == fine:
            return False

        return BorrowalRepo.mark_overdue(borrowal, fine, now)

    # -----------------------------
    # Open
    # -----------------------------
    @staticmethod
    def open_borrowal(book_id, member_id, status=None, borrowed_date=None, due_date=None, notes=None):
        book_id = parse_id(book_id, "book_id")
        member_id = parse_id(member_id, "member_id")

        notes = BorrowalService._notes(notes)
        status = (status or "").strip() if isinstance(status, str) else status
        if status and status != STATUS_BORROWED:
            raise ValidationError("A new borrowal can only start in 'borrowed' status")

        now = utcnow()
        borrowed_at = parse_datetime(borrowed_date, "borrowed_date") or now
        due_at = parse_datetime(due_date, "due_date") or borrowed_at + timedelta(days=BorrowalService._loan_days())
        if due_at < borrowed_at:
            raise ValidationError("due_date cannot be earlier than borrowed_date")

        with atomic("borrowal.open"):
            book = BookRepo.get(book_id)
            if not book:
                raise NotFoundError("Book not found")
            if not book.is_available:
                raise ConflictError("Book is not available for borrowing")

            member = UserRepo.get_by_id(member_id)
            if not member:
                raise NotFoundError("Member not found")

            if BorrowalRepo.count_overdue_for_member(member_id, now) > 0:
                raise ConflictError("Cannot borrow books while having overdue items")

            # okuma ile yazma arasında başka bir istek kitabı almış olabilir
            if not BookRepo.claim(book_id, now):
                raise ConflictError("Book is not available for borrowing")

            borrowal = BorrowalRepo.add(Borrowal(
                book_id=book_id,
                member_id=member_id,
                borrowed_date=borrowed_at,
                due_date=due_at,
                status=STATUS_BORROWED,
                fine=Decimal("0.00"),
                notes=notes,
            ))
            BorrowalService.refresh(borrowal, now)
            borrowal_id = borrowal.id

        current_app.logger.info(
            f"[borrowal] opened id={borrowal_id} book={book_id} member={member_id} due={due_at.isoformat()}"
        )
        return borrowal

    # -----------------------------
    # Return
    # -----------------------------
    @staticmethod
    def return_borrowal(borrowal_id):
        """
        return: (borrowal, fine, message)
        """
        borrowal_id = parse_id(borrowal_id, "borrowal id")
        now = utcnow()

        with atomic("borrowal.return"):
            borrowal = BorrowalRepo.get(borrowal_id)
            if not borrowal:
                raise NotFoundError("Borrowal not found")
            if borrowal.status == STATUS_RETURNED:
                raise ConflictError("Book already returned")

            fine = calculate_fine(borrowal.due_date, now, BorrowalService._fine_rate())
            if not BorrowalRepo.mark_returned(borrowal, fine, now):
                raise ConflictError("Book already returned")

            if not BookRepo.release(borrowal.book_id, now):
                current_app.logger.warning(
                    f"[borrowal] return id={borrowal_id}: book {borrowal.book_id} no longer exists"
                )

        if fine > 0:
            message = f"Book returned with fine: ${fine}"
        else:
            message = "Book returned successfully"

        current_app.logger.info(f"[borrowal] returned id={borrowal_id} fine={fine}")
        return borrowal, fine, message

    # -----------------------------
    # Update
    # -----------------------------
    @staticmethod
    def update_borrowal(borrowal_id, data: dict):
        borrowal_id = parse_id(borrowal_id, "borrowal id")
        data = dict(data or {})

        rejected = set(data) - UPDATABLE_FIELDS - set(REFERENCE_FIELDS)
        if rejected:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(rejected))}")
        if "notes" in data:
            data["notes"] = BorrowalService._notes(data["notes"])

        now = utcnow()
        with atomic("borrowal.update"):
            borrowal = BorrowalRepo.get(borrowal_id)
            if not borrowal:
                raise NotFoundError("Borrowal not found")

            # referanslar oluşturulduktan sonra değişmez
            for field in REFERENCE_FIELDS:
                value = data.get(field)
                if value in (None, ""):
                    continue
                if parse_id(value, field) != getattr(borrowal, field):
                    raise ValidationError(f"{field} cannot be changed after the borrowal is created")

            status = data.get("status")
            if isinstance(status, str):
                status = status.strip()
            if status:
                if status not in STATUSES:
                    raise ValidationError(f"Invalid status: {status}")
                if borrowal.status == STATUS_RETURNED and status != STATUS_RETURNED:
                    raise ConflictError("A returned borrowal cannot change status")
                if status == STATUS_RETURNED and borrowal.status != STATUS_RETURNED:
                    raise ConflictError("Use the return operation to mark a borrowal as returned")
                # okuma ile yazma arasında iade edilmiş olabilir
                if status != borrowal.status and not BorrowalRepo.set_status(borrowal, status, now):
                    raise ConflictError("A returned borrowal cannot change status")

            if "due_date" in data:
                due_at = parse_datetime(data["due_date"], "due_date")
                if due_at is None:
                    raise ValidationError("due_date cannot be empty")
                if due_at < borrowal.borrowed_date:
                    raise ValidationError("due_date cannot be earlier than borrowed_date")
                borrowal.due_date = due_at

            if "notes" in data:
                borrowal.notes = data["notes"]

            borrowal.updated_at = now
            BorrowalService.refresh(borrowal, now)

        return borrowal

    # -----------------------------
    # Delete
    # -----------------------------
    @staticmethod
    def delete_borrowal(borrowal_id):
        """Returns the removed (detached) borrowal."""
        borrowal_id = parse_id(borrowal_id, "borrowal id")
        now = utcnow()

        with atomic("borrowal.delete"):
            borrowal = BorrowalRepo.get(borrowal_id)
            if not borrowal:
                raise NotFoundError("Borrowal not found")

            status = borrowal.status
            if status != STATUS_RETURNED:
                BookRepo.release(borrowal.book_id, now)

            if not BorrowalRepo.delete_if_status(borrowal, status):
                raise TransactionFailure("Borrowal was modified concurrently, please retry")

        current_app.logger.info(
            f"[borrowal] deleted id={borrowal_id} status={status} book_released={status != STATUS_RETURNED}"
        )
        return borrowal

    # -----------------------------
    # Reconciliation
    # -----------------------------
    @staticmethod
    def reconcile_overdue():
        """
        Vadesi geçmiş tüm açık kayıtları overdue olarak işaretler / cezayı günceller.
        return: bu geçişte overdue'ya dönen borrowal id listesi
        """
        now = utcnow()
        newly_overdue = []
        with atomic("borrowal.reconcile"):
            for borrowal in BorrowalRepo.find_open_past_due(now):
                was_borrowed = borrowal.status == STATUS_BORROWED
                if BorrowalService.refresh(borrowal, now) and was_borrowed:
                    newly_overdue.append(borrowal.id)

        if newly_overdue:
            current_app.logger.info(f"[borrowal] reconcile: {len(newly_overdue)} newly overdue")
        return newly_overdue
