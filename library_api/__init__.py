from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from library_api.config import Config
from library_api.extensions import db, migrate, jwt, mail
from library_api.utils.clock import SystemClock


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # 1) Extension'lar
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    mail.init_app(app)

    # 2) "now" kaynağı; testler FixedClock ile değiştirir
    app.extensions["clock"] = SystemClock()

    # 3) Modeller (create_all / migrate için metadata'ya kayıt)
    from library_api.models import author, book, borrowal, genre, notification_log, user  # noqa: F401

    # 4) API blueprintleri
    from library_api.controllers.auth_controller import auth_bp
    from library_api.controllers.author_controller import author_bp
    from library_api.controllers.book_controller import book_bp
    from library_api.controllers.borrowal_controller import borrowal_bp
    from library_api.controllers.genre_controller import genre_bp
    from library_api.controllers.notification_controller import notif_bp
    from library_api.controllers.user_controller import user_bp
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(author_bp, url_prefix="/api/author")
    app.register_blueprint(book_bp, url_prefix="/api/book")
    app.register_blueprint(borrowal_bp, url_prefix="/api/borrowal")
    app.register_blueprint(genre_bp, url_prefix="/api/genre")
    app.register_blueprint(notif_bp, url_prefix="/api/notifications")
    app.register_blueprint(user_bp, url_prefix="/api/user")

    _register_error_handlers(app)

    from library_api.commands import register_commands
    register_commands(app)

    @app.get("/health")
    def health():
        return jsonify({"ok": True})

    if app.config.get("AUTO_CREATE_TABLES"):
        with app.app_context():
            db.create_all()

    # Scheduler (overdue sweep)
    from library_api.tasks.scheduler import start_scheduler
    start_scheduler(app)

    return app


def _register_error_handlers(app):
    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"success": False, "error": e.name.lower().replace(" ", "_"), "message": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        db.session.rollback()
        app.logger.exception(f"[app] Unhandled error: {e}")
        return jsonify({"success": False, "error": "internal", "message": "Internal server error"}), 500
