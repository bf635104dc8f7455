from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///wedding.db"
    test_database_url: str = "sqlite://"
    secret_key: str = ""
    environment: str = "production"
    invitation_mode: str = "code"
    default_max_guests: int = 6
    session_duration_days: int = 30
    rate_limit_count: int = 5
    rate_limit_window_seconds: int = 60
    meal_options: list[str] = [
        "Standard",
        "Vegetarian",
        "Ovo-Lacto Vegetarian",
        "Ovo-Lacto with Fish",
        "Muslim",
        "Gluten-Free",
        "Lactose-Free",
        "Child",
    ]
    admin_keys: list[str] = []
    public_base_url: str = "http://localhost:8000"
    cors_origins: list[str] = ["http://localhost:3000"]

    model_config = {"env_prefix": "RSVP_", "env_file": ".env"}

    @property
    def is_development(self) -> bool:
        return self.environment.strip().lower() in ("development", "dev")


settings = Settings()
