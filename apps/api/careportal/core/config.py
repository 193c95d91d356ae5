from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_env: str = "dev"
    internal_admin_token: str = "change-me"
    root_path: str = ""
    log_level: str = "INFO"

    postgres_db: str = "care_portal"
    postgres_user: str = "care_user"
    postgres_password: str = "care_pass"
    postgres_host: str = "db"
    postgres_port: int = 5432

    # Accept path only; application errors are never retried.
    respond_max_attempts: int = 3

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def database_url(self) -> str:
        return (
            f"postgresql+psycopg2://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )


settings = Settings()
