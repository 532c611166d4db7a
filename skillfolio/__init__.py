# Import logging and OS utilities for app bootstrap.
import logging
import os

# Import Flask and dotenv to build the configured application.
from dotenv import load_dotenv
from flask import Flask, jsonify, request

from skillfolio.config import INSTANCE_DIR, config
from skillfolio.extensions import db, migrate

logger = logging.getLogger("skillfolio")


# Build and configure the Flask application.
def create_app(config_name=None):
    load_dotenv()
    config_name = config_name or os.environ.get("FLASK_CONFIG", "default")

    app = Flask(__name__, instance_path=str(INSTANCE_DIR))
    app.config.from_object(config[config_name])

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    # Ensure the instance folder exists for the SQLite database file.
    INSTANCE_DIR.mkdir(parents=True, exist_ok=True)

    # Initialise extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so their tables are registered on the metadata.
    from skillfolio import models  # noqa: F401

    _register_blueprints(app)
    _register_error_handlers(app)

    from skillfolio.seed import register_seed_command
    register_seed_command(app)

    with app.app_context():
        db.create_all()

    logger.info("Skillfolio app created with %s config", config_name)
    return app


# Register all API blueprints and route groups.
def _register_blueprints(app):
    from skillfolio.routes.admin_routes import admin_bp
    from skillfolio.routes.auth_routes import auth_bp
    from skillfolio.routes.badges_routes import admin_badges_bp, badges_bp
    from skillfolio.routes.forum_routes import admin_forum_bp, forum_bp
    from skillfolio.routes.goals_routes import goals_bp
    from skillfolio.routes.learning_routes import learning_bp
    from skillfolio.routes.main_routes import main_bp
    from skillfolio.routes.notifications_routes import notifications_bp
    from skillfolio.routes.profile_routes import profile_bp
    from skillfolio.routes.progress_routes import register_progress_routes

    for blueprint in (
        main_bp,
        auth_bp,
        profile_bp,
        learning_bp,
        goals_bp,
        badges_bp,
        forum_bp,
        notifications_bp,
        admin_bp,
        admin_badges_bp,
        admin_forum_bp,
    ):
        app.register_blueprint(blueprint)
    register_progress_routes(app)


# Return JSON errors for API paths.
def _register_error_handlers(app):
    @app.errorhandler(404)
    def handle_404(err):
        if request.path.startswith("/api/"):
            return jsonify({"success": False, "error": "Not found"}), 404
        return ("Not found", 404)

    @app.errorhandler(405)
    def handle_405(err):
        if request.path.startswith("/api/"):
            return jsonify({"success": False, "error": "Method not allowed"}), 405
        return ("Method not allowed", 405)

    @app.errorhandler(500)
    def handle_500(err):
        logger.exception("Unhandled server error")
        db.session.rollback()
        if request.path.startswith("/api/"):
            return jsonify({"success": False, "error": "Internal server error"}), 500
        return ("Internal server error", 500)
