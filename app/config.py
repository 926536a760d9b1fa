import os
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name, default):
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "default-secret")

    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///school.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "jwt-secret")

    # File store
    UPLOAD_FOLDER = os.getenv(
        "UPLOAD_FOLDER",
        os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "static", "uploads"),
    )
    MAX_FILE_SIZE = int(os.getenv("MAX_FILE_SIZE", 2 * 1024 * 1024 * 1024))  # 2 GB per file
    MAX_FILES_PER_REQUEST = 20
    MAX_CONTENT_LENGTH = MAX_FILE_SIZE * MAX_FILES_PER_REQUEST

    # Client app (used in verification links)
    CLIENT_URL = os.getenv("CLIENT_URL", "http://localhost:5173")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    # Root admin seeded on startup
    ROOT_ADMIN_EMAIL = os.getenv("ROOT_ADMIN_EMAIL", "admin@lms.com")
    ROOT_ADMIN_PASSWORD = os.getenv("ROOT_ADMIN_PASSWORD", "admin123")

    # Mail Configuration
    MAIL_SERVER = os.getenv("MAIL_SERVER", "smtp.gmail.com")
    MAIL_PORT = int(os.getenv("MAIL_PORT", 587))
    MAIL_USE_TLS = _env_flag("MAIL_USE_TLS", "True")
    MAIL_USE_SSL = _env_flag("MAIL_USE_SSL", "False")
    MAIL_USERNAME = os.getenv("MAIL_USERNAME")
    MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
    MAIL_DEFAULT_SENDER = os.getenv("MAIL_DEFAULT_SENDER", "LMS <no-reply@lms.local>")
    MAIL_SUPPRESS_SEND = _env_flag("MAIL_SUPPRESS_SEND", "False")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "test-jwt-secret-with-enough-length-for-hs256"
    MAIL_SUPPRESS_SEND = True
    MAX_FILE_SIZE = 1024 * 1024
    MAX_CONTENT_LENGTH = MAX_FILE_SIZE * Config.MAX_FILES_PER_REQUEST
