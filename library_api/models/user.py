from library_api.extensions import db
from library_api.utils.clock import clock_now

ROLE_ADMIN = "admin"
ROLE_MEMBER = "member"


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=ROLE_MEMBER)

    # üye profili
    phone = db.Column(db.String(50), nullable=True)
    nic = db.Column(db.String(50), nullable=True)
    address = db.Column(db.String(500), nullable=True)
    occupation = db.Column(db.String(200), nullable=True)
    photo_url = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=clock_now)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
