from typing import Optional
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    url: Optional[str] = Field(default=None, alias="DATABASE_URL")
    host: str = Field(default="localhost", alias="POSTGRES_HOST")
    port: int = Field(default=5432, alias="POSTGRES_DB_PORT")
    db_name: str = Field(default="cardly", alias="POSTGRES_DB_NAME")
    user: str = Field(default="postgres", alias="POSTGRES_DB_USER")
    password: str = Field(default="postgres", alias="POSTGRES_DB_PASSWORD")

    @computed_field
    def connection_string(self) -> str:
        if self.url:
            return self.url
        return (
            f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.db_name}"
        )

    @computed_field
    def is_sqlite(self) -> bool:
        return self.connection_string.startswith("sqlite")


class MailSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    enabled: bool = Field(default=True, alias="MAIL_ENABLED")
    host: Optional[str] = Field(default=None, alias="SMTP_HOST")
    port: int = Field(default=587, alias="SMTP_PORT")
    username: Optional[str] = Field(default=None, alias="SMTP_USERNAME")
    password: Optional[str] = Field(default=None, alias="SMTP_PASSWORD")
    starttls: bool = Field(default=True, alias="SMTP_STARTTLS")
    timeout: float = Field(default=10.0, alias="SMTP_TIMEOUT")
    sender: str = Field(default="no-reply@cardly.local", alias="MAIL_FROM")

    @computed_field
    def is_configured(self) -> bool:
        return self.enabled and bool(self.host)


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )
    name: str = Field(default="cardly", alias="APP_NAME")
    version: str = Field(default="v1", alias="API_VERSION")
    port: int = Field(default=9000, alias="APP_PORT")
    mode: str = Field(default="prod", alias="MODE")
    secret_key: str = Field(default="change-me", alias="SECRET_KEY")
    public_url: str = Field(default="http://localhost:9000", alias="APP_PUBLIC_URL")
    expose_store_errors: bool = Field(default=True, alias="APP_EXPOSE_STORE_ERRORS")
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")

    @computed_field
    def is_production(self) -> bool:
        return self.mode != "dev"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=lambda: AppSettings())
    database: DatabaseSettings = Field(default_factory=lambda: DatabaseSettings())
    mail: MailSettings = Field(default_factory=lambda: MailSettings())


settings = Settings()
