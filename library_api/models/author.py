from library_api.extensions import db
from library_api.utils.clock import clock_now

class Author(db.Model):
    __tablename__ = "authors"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    photo_url = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=clock_now)
    updated_at = db.Column(db.DateTime, nullable=False, default=clock_now, onupdate=clock_now)
