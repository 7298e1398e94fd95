from library_api.errors import ConflictError, NotFoundError, ValidationError
from library_api.models.user import ROLE_ADMIN, ROLE_MEMBER
from library_api.repositories.borrowal_repo import BorrowalRepo
from library_api.repositories.user_repo import UserRepo
from library_api.services.auth_service import AuthService, PROFILE_FIELDS
from library_api.utils.parsing import clean_str, parse_id
from library_api.utils.transaction import atomic

ROLES = (ROLE_ADMIN, ROLE_MEMBER)


class UserService:
    @staticmethod
    def list_users():
        return UserRepo.list_all()

    @staticmethod
    def list_members():
        return UserRepo.list_members()

    @staticmethod
    def get_user(user_id):
        user = UserRepo.get_by_id(parse_id(user_id, "user id"))
        if not user:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def create_user(data: dict):
        role = clean_str(data.get("role")) or ROLE_MEMBER
        if role not in ROLES:
            raise ValidationError(f"Invalid role: {role}")
        profile = {k: data[k] for k in PROFILE_FIELDS if k in data}
        return AuthService.register(
            data.get("name"), data.get("email"), data.get("password"), role=role, **profile
        )

    @staticmethod
    def update_user(user_id, data: dict, acting_as_admin: bool = False):
        with atomic("user.update"):
            user = UserService.get_user(user_id)

            if "role" in data:
                role = clean_str(data["role"])
                if role != user.role:
                    if not acting_as_admin:
                        raise ValidationError("Only admins can change roles")
                    if role not in ROLES:
                        raise ValidationError(f"Invalid role: {role}")
                    user.role = role

            if "name" in data:
                name = clean_str(data["name"])
                if not name:
                    raise ValidationError("name is required")
                user.name = name

            if "email" in data:
                email = (clean_str(data["email"]) or "").lower()
                if not email:
                    raise ValidationError("email is required")
                other = UserRepo.get_by_email(email)
                if other and other.id != user.id:
                    raise ConflictError("Email already in use")
                user.email = email

            for field in PROFILE_FIELDS:
                if field in data:
                    setattr(user, field, clean_str(data[field]))

            if data.get("password"):
                user.password_hash = AuthService.hash_password(data["password"])
        return user

    @staticmethod
    def delete_user(user_id):
        with atomic("user.delete"):
            user = UserService.get_user(user_id)
            if BorrowalRepo.count_open_for_member(user.id) > 0:
                raise ConflictError("User has books that are not returned yet")
            UserRepo.delete(user)
        return user
