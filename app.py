# app.py
import os
import logging
from logging.handlers import RotatingFileHandler

from flask import Flask, render_template, request
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_login import LoginManager, current_user, login_required

# ----- Extensions (import these in models.py) -----
db = SQLAlchemy()
bcrypt = Bcrypt()
login_manager = LoginManager()

LOG_FILE_NAME = "aitexgen.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Checkout/session/metadata modules all log under services.*
SERVICES_LOGGER = "services"


def _find_file_handler(logger: logging.Logger, path: str):
    for h in logger.handlers:
        if isinstance(h, RotatingFileHandler) and h.baseFilename == path:
            return h
    return None


def _configure_logging(app: Flask) -> None:
    """
    INFO to logs/aitexgen.log (1 MB x 3), shared by app.logger and the
    services.* loggers. Reusing an app (tests, reloader) reuses the handler.
    """
    log_dir = app.config.get("LOG_DIR") or os.path.join(
        os.path.dirname(os.path.abspath(__file__)), "logs"
    )
    os.makedirs(log_dir, exist_ok=True)
    path = os.path.abspath(os.path.join(log_dir, LOG_FILE_NAME))

    targets = (app.logger, logging.getLogger(SERVICES_LOGGER))
    handler = next(filter(None, (_find_file_handler(t, path) for t in targets)), None)
    if handler is None:
        handler = RotatingFileHandler(path, maxBytes=1_000_000, backupCount=3)
        handler.setLevel(logging.INFO)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))

    for target in targets:
        target.setLevel(logging.INFO)
        if _find_file_handler(target, path) is None:
            target.addHandler(handler)

    app.logger.info("Checkout logs -> %s", path)


def _init_extensions(app: Flask) -> None:
    db.init_app(app)
    bcrypt.init_app(app)
    login_manager.init_app(app)
    # /account and /billing/* bounce here; the form returns to ?next=
    login_manager.login_view = "auth.login"
    login_manager.login_message = "Sign in to manage your subscription."
    login_manager.login_message_category = "info"

    from models import User  # after db is bound

    @login_manager.user_loader
    def load_user(user_id: str):
        if not str(user_id).isdigit():
            return None
        return db.session.get(User, int(user_id))


def create_app(overrides: dict | None = None):
    app = Flask(
        __name__,
        static_folder="static",
        template_folder=os.path.join(
            os.path.dirname(os.path.abspath(__file__)), "templates"
        ),
    )

    # config.py from the project root, then test/deploy overrides
    app.config.from_object("config")
    if overrides:
        app.config.update(overrides)

    _init_extensions(app)
    _configure_logging(app)

    # ----- Blueprints -----
    from auth.routes import auth_bp
    from billing.routes import billing_bp
    from subscribe import bp as subscribe_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(billing_bp)
    app.register_blueprint(subscribe_bp)

    # ----- Routes -----
    @app.route("/")
    def index():
        return render_template("index.html")

    @app.route("/pricing")
    def pricing():
        from services.tiers import SubscriptionTier
        return render_template("pricing.html", tiers=list(SubscriptionTier))

    @app.route("/account")
    @login_required
    def account():
        u = current_user
        return render_template(
            "account.html",
            plan=(getattr(u, "plan", None) or "FREE"),
            stripe_customer_id=getattr(u, "stripe_customer_id", None),
            checkout_success=request.args.get("checkout") == "success",
            portal_error=request.args.get("portal_error"),
        )

    # Dev convenience: create tables if they don't exist
    with app.app_context():
        db.create_all()
        app.logger.info("Database tables ensured (create_all).")

    return app


if __name__ == "__main__":
    app = create_app()
    # Use Flask's reloader for local dev
    app.run(debug=True)
