import click
from flask import current_app

from library_api.errors import LibraryError
from library_api.models.user import ROLE_ADMIN
from library_api.repositories.user_repo import UserRepo
from library_api.services.auth_service import AuthService
from library_api.utils.transaction import atomic


def register_commands(app):
    @app.cli.command("create-admin")
    @click.argument("email")
    @click.argument("password")
    @click.option("--name", default="Administrator", show_default=True)
    def create_admin(email, password, name):
        """Create an admin account, or promote an existing user to admin."""
        existing = UserRepo.get_by_email(email.strip().lower())
        if existing:
            with atomic("cli.create_admin"):
                existing.role = ROLE_ADMIN
                existing.password_hash = AuthService.hash_password(password)
            click.echo(f"Promoted {existing.email} to admin.")
            return

        try:
            user = AuthService.register(name, email, password, role=ROLE_ADMIN)
        except LibraryError as e:
            raise click.ClickException(e.message)
        current_app.logger.info(f"[cli] admin created id={user.id}")
        click.echo(f"Created admin {user.email} (id={user.id}).")
