from flask import Flask
from sqlalchemy.exc import OperationalError

from springlib.config import Config
from springlib.errors import TransportFailure
from springlib.extensions import db, jwt, migrate
from springlib.utils.responses import api_error, api_response

API_PREFIX = "/api/v1"


def _register_jwt_handlers():
    # keep auth failures inside the standard response envelope
    @jwt.unauthorized_loader
    def _missing_token(reason):
        return api_error(f"Authentication required: {reason}", 401)

    @jwt.invalid_token_loader
    def _invalid_token(reason):
        return api_error(f"Invalid token: {reason}", 401)

    @jwt.expired_token_loader
    def _expired_token(_header, _payload):
        return api_error("Token has expired", 401)


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    # 1) database first
    db.init_app(app)
    migrate.init_app(app, db)

    # models must be imported before create_all / migrations see them
    from springlib.models import book, loan, user  # noqa: F401

    if app.config.get("AUTO_CREATE_TABLES"):
        with app.app_context():
            db.create_all()

    # 2) auth
    jwt.init_app(app)
    _register_jwt_handlers()

    # 3) API blueprints
    from springlib.controllers.admin_controller import admin_bp
    from springlib.controllers.auth_controller import auth_bp
    from springlib.controllers.book_controller import book_bp
    from springlib.controllers.loan_controller import loan_bp
    app.register_blueprint(auth_bp, url_prefix=f"{API_PREFIX}/auth")
    app.register_blueprint(book_bp, url_prefix=f"{API_PREFIX}/books")
    app.register_blueprint(loan_bp, url_prefix=f"{API_PREFIX}/loans")
    app.register_blueprint(admin_bp, url_prefix=f"{API_PREFIX}/admin")

    @app.errorhandler(OperationalError)
    def _db_unreachable(e):
        db.session.rollback()
        app.logger.error(f"[db] {e}")
        return api_error(TransportFailure())

    @app.get("/health")
    def health():
        return api_response({"ok": True})

    from springlib.cli import register_commands
    register_commands(app)

    # pending sweep
    from springlib.tasks.scheduler import start_scheduler
    start_scheduler(app)

    return app
