from library_api.models.author import Author
from library_api.extensions import db

class AuthorRepo:
    @staticmethod
    def list_all():
        return Author.query.order_by(Author.name.asc()).all()

    @staticmethod
    def get(author_id: int):
        return db.session.get(Author, author_id)

    @staticmethod
    def add(author: Author):
        db.session.add(author)
        db.session.flush()
        return author

    @staticmethod
    def delete(author: Author):
        db.session.delete(author)
