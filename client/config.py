from pydantic_settings import BaseSettings
from pathlib import Path


class Settings(BaseSettings):
    ENVIRONMENT: str = "development"  # development | test | staging | production
    APP_NAME: str = "Health Tracker"
    API_BASE_URL: str = "http://localhost:5000"
    DATA_DIR: Path = Path("data")
    TOKEN_FILE_NAME: str = "session.json"
    TOKEN_STORAGE_KEY: str = "token"
    LOGIN_ROUTE: str = "/login"
    HOME_ROUTE: str = "/"
    PUBLIC_ROUTES: list[str] = ["/login", "/register"]
    PROTECTED_ROUTES: list[str] = [
        "/",
        "/profile",
        "/workouts",
        "/diet-plans",
        "/sleep",
        "/analytics",
    ]
    REQUEST_TIMEOUT_SECONDS: float | None = None  # no client-side timeout
    USER_AGENT: str = "HealthTracker/1.0"
    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def is_production_like(self) -> bool:
        return (self.ENVIRONMENT or "").strip().lower() in {"production", "prod", "staging"}

    @property
    def token_path(self) -> Path:
        return self.DATA_DIR / self.TOKEN_FILE_NAME

    def validate_configuration(self) -> None:
        if not self.is_production_like:
            return

        errors: list[str] = []
        if not (self.API_BASE_URL or "").strip().lower().startswith("https://"):
            errors.append("API_BASE_URL must use https in production-like environments")
        if not (self.TOKEN_STORAGE_KEY or "").strip():
            errors.append("TOKEN_STORAGE_KEY must not be empty")
        if self.LOGIN_ROUTE not in self.PUBLIC_ROUTES:
            errors.append("LOGIN_ROUTE must be one of PUBLIC_ROUTES")
        if errors:
            joined = "; ".join(errors)
            raise RuntimeError(f"Insecure production configuration: {joined}")


settings = Settings()
