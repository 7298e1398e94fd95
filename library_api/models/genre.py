import re
from library_api.extensions import db
from library_api.utils.clock import clock_now

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    return _SLUG_RE.sub("-", (name or "").lower()).strip("-")


class Genre(db.Model):
    __tablename__ = "genres"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False, unique=True)
    description = db.Column(db.String(1000), nullable=False)
    slug = db.Column(db.String(140), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=clock_now)
    updated_at = db.Column(db.DateTime, nullable=False, default=clock_now, onupdate=clock_now)

    def rename(self, name: str):
        self.name = name.strip()
        self.slug = slugify(self.name)
