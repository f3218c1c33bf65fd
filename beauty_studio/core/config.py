from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "Beauty Studio Booking API"
    API_PREFIX: str = "/api"

    # Server
    PORT: int = 8000
    ENVIRONMENT: str = "development"
    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    # Supabase
    SUPABASE_URL: str = ""
    SUPABASE_KEY: str = ""
    BOOKINGS_TABLE: str = "bookings"

    # Security
    SECRET_KEY: str = "dev_secret_key"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12

    # Demo admin identity
    ADMIN_EMAIL: str = "admin@makeupstudio.com"
    ADMIN_PASSWORD: str = "admin123"
    ADMIN_NAME: str = "Admin User"

    # Notifications
    SMTP_SERVER: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""

    # Studio business rules (schedule, holidays, templates)
    STUDIO_CONFIG_PATH: str = "data/studio_config.json"

    # Used by the Python client
    API_BASE_URL: str = "http://localhost:8000/api"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

settings = Settings()
