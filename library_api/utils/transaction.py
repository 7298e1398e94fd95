from contextlib import contextmanager

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from library_api.errors import LibraryError, TransactionFailure
from library_api.extensions import db


@contextmanager
def atomic(label: str = "tx"):
    """
    Tek commit noktası: blok içindeki tüm yazımlar birlikte commit edilir,
    herhangi bir hata olursa hepsi geri alınır.
    """
    try:
        yield db.session
        db.session.commit()
    except LibraryError:
        db.session.rollback()
        raise
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception(f"[{label}] rollback: {e}")
        raise TransactionFailure("Operation could not be completed, please retry") from e
    except Exception:
        db.session.rollback()
        raise
