from library_api.extensions import db
from library_api.models.user import User

from conftest import login


def test_create_admin_command(app, client):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["create-admin", "Boss@Library.test", "pw", "--name", "Head Librarian"])
    assert result.exit_code == 0, result.output
    assert "Created admin boss@library.test" in result.output

    user = User.query.filter_by(email="boss@library.test").one()
    assert user.is_admin
    assert login(client, "boss@library.test", "pw")["data"]["role"] == "admin"


def test_create_admin_promotes_existing_member(app, member):
    result = app.test_cli_runner().invoke(args=["create-admin", member.email, "new-pass"])

    assert result.exit_code == 0, result.output
    assert "Promoted" in result.output
    db.session.expire_all()
    assert User.query.filter_by(email=member.email).one().role == "admin"


def test_create_admin_needs_a_password(app):
    result = app.test_cli_runner().invoke(args=["create-admin", "x@library.test", ""])
    assert result.exit_code != 0
    assert "required" in result.output
