from sqlalchemy import func

from library_api.models.book import Book
from library_api.models.genre import Genre
from library_api.extensions import db

class GenreRepo:
    @staticmethod
    def list_with_book_counts():
        return (
            db.session.query(Genre, func.count(Book.id))
            .outerjoin(Book, Book.genre_id == Genre.id)
            .group_by(Genre.id)
            .order_by(Genre.name.asc())
            .all()
        )

    @staticmethod
    def get(genre_id: int):
        return db.session.get(Genre, genre_id)

    @staticmethod
    def get_by_name(name: str):
        return Genre.query.filter(func.lower(Genre.name) == name.lower()).first()

    @staticmethod
    def get_by_slug(slug: str):
        return Genre.query.filter_by(slug=slug).first()

    @staticmethod
    def add(genre: Genre):
        db.session.add(genre)
        db.session.flush()
        return genre

    @staticmethod
    def delete(genre: Genre):
        db.session.delete(genre)
