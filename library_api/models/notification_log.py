# library_api/models/notification_log.py
from library_api.extensions import db
from library_api.utils.clock import clock_now

TYPE_OVERDUE_MAIL = "overdue_mail"


class NotificationLog(db.Model):
    """Üyeye giden her hatırlatma denemesi; başarılı olan tekrar gönderilmez."""
    __tablename__ = "notification_logs"

    id = db.Column(db.Integer, primary_key=True)

    # borrowal silinirse log kalır
    borrowal_id = db.Column(
        db.Integer, db.ForeignKey("borrowals.id", ondelete="SET NULL"), nullable=True, index=True
    )
    type = db.Column(db.String(50), nullable=False, default=TYPE_OVERDUE_MAIL)

    email = db.Column(db.String(255), nullable=True)
    message = db.Column(db.String(1000), nullable=True)
    success = db.Column(db.Boolean, nullable=False, default=True)
    error_message = db.Column(db.String(500), nullable=True)

    sent_at = db.Column(db.DateTime, nullable=False, default=clock_now)
