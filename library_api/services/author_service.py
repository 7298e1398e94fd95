from library_api.errors import NotFoundError, ValidationError
from library_api.models.author import Author
from library_api.repositories.author_repo import AuthorRepo
from library_api.utils.parsing import clean_str, parse_id
from library_api.utils.transaction import atomic


class AuthorService:
    @staticmethod
    def list_authors():
        return AuthorRepo.list_all()

    @staticmethod
    def get_author(author_id):
        author = AuthorRepo.get(parse_id(author_id, "author id"))
        if not author:
            raise NotFoundError("Author not found")
        return author

    @staticmethod
    def create_author(data: dict):
        name = clean_str(data.get("name"))
        if not name:
            raise ValidationError("name is required")
        with atomic("author.create"):
            author = AuthorRepo.add(Author(
                name=name,
                description=data.get("description"),
                photo_url=clean_str(data.get("photo_url")),
            ))
        return author

    @staticmethod
    def update_author(author_id, data: dict):
        with atomic("author.update"):
            author = AuthorService.get_author(author_id)
            if "name" in data:
                name = clean_str(data["name"])
                if not name:
                    raise ValidationError("name is required")
                author.name = name
            if "description" in data:
                author.description = data["description"]
            if "photo_url" in data:
                author.photo_url = clean_str(data["photo_url"])
        return author

    @staticmethod
    def delete_author(author_id):
        with atomic("author.delete"):
            author = AuthorService.get_author(author_id)
            # kitaplar yazarsız kalır
            for book in list(author.books):
                book.author_id = None
            AuthorRepo.delete(author)
        return author
