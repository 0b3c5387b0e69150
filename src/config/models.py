from pydantic import BaseModel, Field, SecretStr, field_validator

from src.domain.subscriber import ValidationFailure, parse_email


class ApplicationSettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(8000, ge=0, le=65535)
    base_url: str = "http://127.0.0.1:8000"


class DatabaseSettings(BaseModel):
    path: str = "./data/newsletter.db"
    migrations_dir: str = "migrations"
    timeout_seconds: float = Field(5.0, gt=0)


class EmailClientSettings(BaseModel):
    # Empty base_url selects the dev adapter (log only)
    base_url: str = ""
    sender_email: str
    authorization_token: SecretStr = SecretStr("")
    timeout_seconds: float = Field(10.0, gt=0)

    @field_validator("sender_email")
    @classmethod
    def validate_sender(cls, v: str) -> str:
        try:
            return parse_email(v).value
        except ValidationFailure as e:
            raise ValueError(e.reason) from e


class AuthSettings(BaseModel):
    password_hash_workers: int = Field(4, ge=1)


class Settings(BaseModel):
    application: ApplicationSettings = Field(default_factory=ApplicationSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    email_client: EmailClientSettings
    auth: AuthSettings = Field(default_factory=AuthSettings)
