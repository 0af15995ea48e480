from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    project_name: str = "Journal API"
    backend_cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    postgres_host: str = "db"
    postgres_port: int = 5432
    postgres_user: str = "journal"
    postgres_password: str = "journal"
    postgres_db: str = "journal"
    sqlalchemy_database_uri: str | None = None

    secret_key: str = "change-me-to-a-long-random-secret-value"
    access_token_expire_minutes: int = 60
    jwt_algorithm: str = "HS256"
    bcrypt_rounds: int = 12
    password_min_length: int = 6

    upload_dir: str = "uploads"
    profile_image_max_bytes: int = 2 * 1024 * 1024
    profile_image_quality: int = 80
    profile_image_max_pixels: int = 4096 * 4096

    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_from: str | None = None
    smtp_use_tls: bool = True
    contact_inbox: str | None = None

    class Config:
        env_file = ".env"

    @property
    def database_url(self) -> str:
        if self.sqlalchemy_database_uri:
            return self.sqlalchemy_database_uri
        return (
            f"postgresql+psycopg2://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


settings = Settings()
