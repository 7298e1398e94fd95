from library_api.errors import ConflictError, NotFoundError, ValidationError
from library_api.models.book import Book
from library_api.repositories.author_repo import AuthorRepo
from library_api.repositories.book_repo import BookRepo
from library_api.repositories.borrowal_repo import BorrowalRepo
from library_api.repositories.genre_repo import GenreRepo
from library_api.utils.parsing import clean_str, parse_id
from library_api.utils.transaction import atomic

EDITABLE_FIELDS = ("name", "isbn", "summary", "photo_url")


class BookService:
    @staticmethod
    def list_books():
        return BookRepo.list_all()

    @staticmethod
    def get_book(book_id):
        book = BookRepo.get(parse_id(book_id, "book id"))
        if not book:
            raise NotFoundError("Book not found")
        return book

    @staticmethod
    def search_books(query):
        term = clean_str(query)
        if not term:
            raise ValidationError("Search query is required")
        return BookRepo.search(term)

    @staticmethod
    def _apply_refs(book: Book, data: dict):
        if "author_id" in data:
            if data["author_id"] in (None, ""):
                book.author_id = None
            else:
                author_id = parse_id(data["author_id"], "author_id")
                if not AuthorRepo.get(author_id):
                    raise NotFoundError("Author not found")
                book.author_id = author_id

        if "genre_id" in data:
            if data["genre_id"] in (None, ""):
                book.genre_id = None
            else:
                genre_id = parse_id(data["genre_id"], "genre_id")
                if not GenreRepo.get(genre_id):
                    raise NotFoundError("Genre not found")
                book.genre_id = genre_id

    @staticmethod
    def create_book(data: dict):
        name = clean_str(data.get("name"))
        isbn = clean_str(data.get("isbn"))
        if not name or not isbn:
            raise ValidationError("name and isbn are required")

        with atomic("book.create"):
            book = Book(
                name=name,
                isbn=isbn,
                summary=data.get("summary"),
                photo_url=clean_str(data.get("photo_url")),
                is_available=True,
            )
            BookService._apply_refs(book, data)
            BookRepo.add(book)
        return book

    @staticmethod
    def update_book(book_id, data: dict):
        # is_available sadece borrowal işlemleriyle değişir
        if "is_available" in data:
            raise ValidationError("is_available is managed by borrowals and cannot be edited")

        with atomic("book.update"):
            book = BookService.get_book(book_id)
            for k in EDITABLE_FIELDS:
                if k in data:
                    setattr(book, k, clean_str(data[k]) if k != "summary" else data[k])
            if not book.name or not book.isbn:
                raise ValidationError("name and isbn are required")
            BookService._apply_refs(book, data)
        return book

    @staticmethod
    def delete_book(book_id):
        with atomic("book.delete"):
            book = BookService.get_book(book_id)
            if BorrowalRepo.count_open_for_book(book.id) > 0:
                raise ConflictError("Book is currently borrowed. Return it before deleting.")
            BookRepo.delete(book)
        return book
