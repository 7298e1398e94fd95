from werkzeug.security import generate_password_hash, check_password_hash
from flask_jwt_extended import create_access_token

from library_api.errors import ConflictError, NotFoundError, ValidationError
from library_api.models.user import User, ROLE_MEMBER
from library_api.repositories.user_repo import UserRepo
from library_api.utils.parsing import clean_str
from library_api.utils.transaction import atomic

PROFILE_FIELDS = ("phone", "nic", "address", "occupation", "photo_url")


class AuthService:
    @staticmethod
    def hash_password(password: str) -> str:
        return generate_password_hash(password)

    @staticmethod
    def register(name: str, email: str, password: str, role: str = ROLE_MEMBER, **profile):
        name = clean_str(name)
        email = (clean_str(email) or "").lower()
        if not name or not email or not password:
            raise ValidationError("name, email and password are required")

        with atomic("auth.register"):
            if UserRepo.get_by_email(email):
                raise ConflictError("User already exists")

            user = User(
                name=name,
                email=email,
                password_hash=AuthService.hash_password(password),
                role=role,
            )
            for field in PROFILE_FIELDS:
                if field in profile:
                    setattr(user, field, clean_str(profile[field]))
            UserRepo.add(user)
        return user

    @staticmethod
    def login(email: str, password: str):
        """
        return: (access_token, user)
        """
        user = UserRepo.get_by_email((clean_str(email) or "").lower())
        if not user:
            raise NotFoundError("User not found")
        if not password or not check_password_hash(user.password_hash, password):
            raise ValidationError("Password incorrect")

        token = create_access_token(
            identity=str(user.id),
            additional_claims={"role": user.role, "email": user.email}
        )
        return token, user
