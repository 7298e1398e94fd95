from library_api.errors import ConflictError, NotFoundError, ValidationError
from library_api.models.genre import Genre, slugify
from library_api.repositories.book_repo import BookRepo
from library_api.repositories.genre_repo import GenreRepo
from library_api.utils.parsing import clean_str, parse_id
from library_api.utils.transaction import atomic


class GenreService:
    @staticmethod
    def list_genres():
        """return: [(genre, book_count), ...]"""
        return GenreRepo.list_with_book_counts()

    @staticmethod
    def get_genre(genre_id):
        genre = GenreRepo.get(parse_id(genre_id, "genre id"))
        if not genre:
            raise NotFoundError("Genre not found")
        return genre

    @staticmethod
    def book_count(genre: Genre) -> int:
        return BookRepo.count_by_genre(genre.id)

    @staticmethod
    def books_of(genre_id):
        genre = GenreService.get_genre(genre_id)
        return genre, BookRepo.list_by_genre(genre.id)

    @staticmethod
    def _ensure_unique(name: str, exclude_id=None):
        existing = GenreRepo.get_by_name(name) or GenreRepo.get_by_slug(slugify(name))
        if existing and existing.id != exclude_id:
            raise ConflictError("Genre with this name already exists")

    @staticmethod
    def create_genre(data: dict):
        name = clean_str(data.get("name"))
        description = clean_str(data.get("description"))
        if not name or not description:
            raise ValidationError("name and description are required")
        if not slugify(name):
            raise ValidationError("name must contain letters or digits")

        with atomic("genre.create"):
            GenreService._ensure_unique(name)
            genre = Genre(description=description)
            genre.rename(name)
            GenreRepo.add(genre)
        return genre

    @staticmethod
    def update_genre(genre_id, data: dict):
        with atomic("genre.update"):
            genre = GenreService.get_genre(genre_id)
            if "name" in data:
                name = clean_str(data["name"])
                if not name or not slugify(name):
                    raise ValidationError("name is required")
                if name != genre.name:
                    GenreService._ensure_unique(name, exclude_id=genre.id)
                    genre.rename(name)
            if "description" in data:
                description = clean_str(data["description"])
                if not description:
                    raise ValidationError("description is required")
                genre.description = description
        return genre

    @staticmethod
    def delete_genre(genre_id):
        with atomic("genre.delete"):
            genre = GenreService.get_genre(genre_id)
            count = BookRepo.count_by_genre(genre.id)
            if count > 0:
                raise ConflictError(
                    f"Cannot delete genre. {count} book(s) are currently assigned to this genre."
                )
            GenreRepo.delete(genre)
        return genre
