from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central settings object.
    The host provides env vars; locally you can use backend/.env.
    """
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Gemini
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = ""  # empty = each lookup mode picks its own model
    GEMINI_API_BASE: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_TIMEOUT_SECONDS: float = 60.0

    # Versioning
    APP_VERSION: str = "0.1.0"
    BUILD_ID: str = "dev"

    LOG_LEVEL: str = "INFO"


# App-level settings (title, version, logging). Request handlers use get_settings().
settings = Settings()


def get_settings() -> Settings:
    """
    FastAPI dependency. Built per request so the API key is read at call time;
    tests override this instead of touching the environment.
    """
    return Settings()
