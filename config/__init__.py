import os


def get_settings_module() -> str:
    """Pick the settings module from APP_ENV (defaults to development)."""
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def logging_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": "%(asctime)s %(levelname)s [%(name)s] %(message)s"},
        },
        "handlers": {
            "console": {"class": "logging.StreamHandler", "formatter": "default"},
        },
        "loggers": {
            "mysql.connector": {"level": "WARNING"},
            "werkzeug": {"level": "INFO"},
        },
        "root": {"handlers": ["console"], "level": level},
    }
