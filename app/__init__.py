import os

from flask import Flask, jsonify, current_app, send_from_directory
from flask_cors import CORS
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import RequestEntityTooLarge
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .extensions import db, migrate, jwt, mail
from .routes import auth, users, courses, lessons, progress


def create_app(config_class=Config):
    app = Flask(__name__)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1)
    app.config.from_object(config_class)
    CORS(app, resources={r"/*": {"origins": app.config["CORS_ORIGINS"]}})

    os.makedirs(app.config["UPLOAD_FOLDER"], exist_ok=True)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    mail.init_app(app)

    # Register blueprints
    app.register_blueprint(auth.bp, url_prefix="/api")
    app.register_blueprint(users.bp, url_prefix="/api/users")
    app.register_blueprint(courses.bp, url_prefix="/api")
    app.register_blueprint(lessons.bp, url_prefix="/api")
    app.register_blueprint(progress.bp, url_prefix="/api")

    @app.route("/uploads/<path:filename>", methods=["GET"])
    def uploaded_file(filename):
        return send_from_directory(current_app.config["UPLOAD_FOLDER"], filename)

    register_error_handlers(app)

    with app.app_context():
        db.create_all()
        seed_root_admin()

    return app


def register_error_handlers(app):
    @app.errorhandler(RequestEntityTooLarge)
    def too_large(e):
        return jsonify({"error": "Upload is too large"}), 413

    @app.errorhandler(SQLAlchemyError)
    def store_error(e):
        db.session.rollback()
        current_app.logger.error(f"Store error: {e}")
        return jsonify({"error": str(e)}), 500

    @app.errorhandler(OSError)
    def filesystem_error(e):
        db.session.rollback()
        current_app.logger.error(f"Filesystem error: {e}")
        return jsonify({"error": str(e)}), 500


def seed_root_admin():
    """Create the root admin account once, verified and ready to log in."""
    from .models import User

    email = current_app.config["ROOT_ADMIN_EMAIL"].strip().lower()
    if User.query.filter_by(email=email).first():
        return

    admin = User(name="Admin", email=email, role="admin", status="verified")
    admin.set_password(current_app.config["ROOT_ADMIN_PASSWORD"])
    db.session.add(admin)
    db.session.commit()
    current_app.logger.info(f"Seeded root admin account {email}")
