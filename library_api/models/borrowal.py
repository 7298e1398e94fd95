from decimal import Decimal
from library_api.extensions import db
from library_api.utils.clock import clock_now

STATUS_BORROWED = "borrowed"
STATUS_OVERDUE = "overdue"
STATUS_RETURNED = "returned"
STATUSES = (STATUS_BORROWED, STATUS_OVERDUE, STATUS_RETURNED)


class Borrowal(db.Model):
    __tablename__ = "borrowals"
    __table_args__ = (
        db.CheckConstraint("fine >= 0", name="ck_borrowals_fine_non_negative"),
        db.CheckConstraint(
            "status IN ('borrowed', 'overdue', 'returned')", name="ck_borrowals_status"
        ),
    )

    id = db.Column(db.Integer, primary_key=True)

    # sadece id referansları; okuma tarafı join ile zenginleştirir
    book_id = db.Column(db.Integer, db.ForeignKey("books.id"), nullable=False, index=True)
    member_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)

    borrowed_date = db.Column(db.DateTime, nullable=False)
    due_date = db.Column(db.DateTime, nullable=False, index=True)
    returned_date = db.Column(db.DateTime, nullable=True)

    status = db.Column(db.String(20), nullable=False, default=STATUS_BORROWED, index=True)
    fine = db.Column(db.Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    notes = db.Column(db.Text, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=clock_now)
    updated_at = db.Column(db.DateTime, nullable=False, default=clock_now, onupdate=clock_now)

    @property
    def is_open(self) -> bool:
        return self.status != STATUS_RETURNED
