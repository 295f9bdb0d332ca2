import os


def get_settings_module() -> str:
    # Lê o ambiente de APP_ENV, padrão 'development'
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "edusched.config.production"

    if env in {"test", "testing"}:
        return "edusched.config.testing"

    return "edusched.config.development"
