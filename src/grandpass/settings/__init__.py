import os


def get_settings_module() -> str:
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "grandpass.settings.production"

    if env in {"test", "testing"}:
        return "grandpass.settings.testing"

    return "grandpass.settings.development"
