from library_api.models.user import User, ROLE_MEMBER
from library_api.extensions import db

class UserRepo:
    @staticmethod
    def get_by_email(email: str):
        return User.query.filter_by(email=email).first()

    @staticmethod
    def get_by_id(user_id: int):
        return db.session.get(User, user_id)

    @staticmethod
    def list_all():
        return User.query.order_by(User.id.asc()).all()

    @staticmethod
    def list_members():
        return User.query.filter_by(role=ROLE_MEMBER).order_by(User.name.asc()).all()

    @staticmethod
    def add(user: User):
        db.session.add(user)
        db.session.flush()
        return user

    @staticmethod
    def delete(user: User):
        db.session.delete(user)
