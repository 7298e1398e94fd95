from library_api.extensions import db
from library_api.models.author import Author  # noqa: F401  (relationship hedefleri)
from library_api.models.genre import Genre  # noqa: F401
from library_api.utils.clock import clock_now


class Book(db.Model):
    __tablename__ = "books"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, index=True)
    isbn = db.Column(db.String(32), nullable=False, index=True)

    author_id = db.Column(db.Integer, db.ForeignKey("authors.id"), nullable=True, index=True)
    genre_id = db.Column(db.Integer, db.ForeignKey("genres.id"), nullable=True, index=True)

    # availability ledger: sadece borrowal servisi değiştirir
    is_available = db.Column(db.Boolean, nullable=False, default=True)

    summary = db.Column(db.Text, nullable=True)
    photo_url = db.Column(db.String(500), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=clock_now)
    updated_at = db.Column(db.DateTime, nullable=False, default=clock_now, onupdate=clock_now)

    author = db.relationship("Author", backref="books")
    genre = db.relationship("Genre", backref="books")
