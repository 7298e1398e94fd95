from datetime import datetime

from sqlalchemy import or_, update

from library_api.models.book import Book
from library_api.extensions import db

class BookRepo:
    @staticmethod
    def list_all():
        return Book.query.order_by(Book.created_at.desc(), Book.id.desc()).all()

    @staticmethod
    def get(book_id: int):
        return db.session.get(Book, book_id)

    @staticmethod
    def search(term: str):
        pattern = f"%{term}%"
        return Book.query.filter(
            or_(Book.name.ilike(pattern), Book.isbn.ilike(pattern), Book.summary.ilike(pattern))
        ).order_by(Book.name.asc()).all()

    @staticmethod
    def count_by_genre(genre_id: int) -> int:
        return Book.query.filter_by(genre_id=genre_id).count()

    @staticmethod
    def list_by_genre(genre_id: int):
        return Book.query.filter_by(genre_id=genre_id).order_by(Book.name.asc()).all()

    @staticmethod
    def add(book: Book):
        db.session.add(book)
        db.session.flush()
        return book

    @staticmethod
    def delete(book: Book):
        db.session.delete(book)

    @staticmethod
    def claim(book_id: int, now: datetime) -> bool:
        """
        Atomik check-and-set: kitap hâlâ müsaitse müsait değil yap.
        Eşzamanlı iki istekten sadece biri satır günceller.
        """
        result = db.session.execute(
            update(Book)
            .where(Book.id == book_id, Book.is_available.is_(True))
            .values(is_available=False, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        BookRepo._expire_cached(book_id)
        return result.rowcount == 1

    @staticmethod
    def release(book_id: int, now: datetime) -> bool:
        result = db.session.execute(
            update(Book)
            .where(Book.id == book_id)
            .values(is_available=True, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        BookRepo._expire_cached(book_id)
        return result.rowcount == 1

    @staticmethod
    def _expire_cached(book_id: int):
        cached = db.session.identity_map.get(db.session.identity_key(Book, book_id))
        if cached is not None:
            db.session.expire(cached)
