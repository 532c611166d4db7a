import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
INSTANCE_DIR = BASE_DIR / "instance"


def _env_flag(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name, default):
    raw = os.environ.get(name) or default
    return {item.strip().lower() for item in raw.split(",") if item.strip()}


class Config:
    """Base configuration"""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'your-secret-key-here-change-in-production'

    # Database settings
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or f"sqlite:///{INSTANCE_DIR / 'skillfolio.db'}"
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Session cookie settings
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = _env_flag('SESSION_COOKIE_SECURE', False)

    # WTForms settings
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = None

    # Accounts registered with these emails are granted admin access.
    ADMIN_EMAILS = _env_list('ADMIN_EMAILS', 'admin@email.com')

    # Learning rules
    QUIZ_PASS_PERCENT = int(os.environ.get('QUIZ_PASS_PERCENT', 70))
    XP_PER_LESSON = int(os.environ.get('XP_PER_LESSON', 10))
    FINAL_EXAM_XP = int(os.environ.get('FINAL_EXAM_XP', 50))
    REQUIRE_QUIZ_FOR_COMPLETION = _env_flag('REQUIRE_QUIZ_FOR_COMPLETION', True)

    # Forum limits
    FORUM_PAGE_SIZE = 12
    FORUM_POST_RATE_LIMIT = 8
    FORUM_REPLY_RATE_LIMIT = 15
    FORUM_LIKE_RATE_LIMIT = 40
    FORUM_REPORT_RATE_LIMIT = 5
    RATE_LIMIT_ENABLED = True

    # Debug mode
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'must-set-secret-key-in-production'
    SESSION_COOKIE_SECURE = _env_flag('SESSION_COOKIE_SECURE', True)


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    DEBUG = False
    WTF_CSRF_ENABLED = False
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    RATE_LIMIT_ENABLED = False


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
