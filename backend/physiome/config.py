from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class MailSettings:
    """SMTP submission settings shared by the transport and the dispatcher."""
    host: str = "smtp.gmail.com"
    port: int = 587
    secure: bool = False          # True -> implicit TLS, False -> STARTTLS
    user: Optional[str] = None
    password: Optional[str] = None
    from_address: Optional[str] = None
    timeout: float = 30.0
    tls_reject_unauthorized: bool = False

    def masked(self) -> dict:
        """Config summary that is safe to log or return to admins."""
        user = "NOT_SET"
        if self.user:
            local, _, domain = self.user.partition("@")
            user = f"{local[:3]}***@{domain}" if domain else f"{local[:3]}***"
        return {
            "MAIL_HOST": self.host,
            "MAIL_PORT": self.port,
            "MAIL_SECURE": self.secure,
            "MAIL_USER": user,
            "MAIL_PASS": "SET (hidden)" if self.password else "NOT_SET",
            "MAIL_FROM": self.from_address or "NOT_SET",
        }


class Settings(BaseSettings):
    """Application settings."""

    # Database
    database_url: str = "sqlite+aiosqlite:///./physiome.db"

    # Auth
    jwt_secret: str = "dev-secret-change-me"

    # Mail
    mail_host: str = "smtp.gmail.com"
    mail_port: int = 587
    mail_secure: str = "false"
    mail_user: Optional[str] = None
    mail_pass: Optional[str] = None
    mail_from: Optional[str] = None
    mail_timeout: float = 30.0

    # Frontend used for deep links in emails
    frontend_url: str = "http://localhost:5173"

    node_env: str = "development"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        return self.node_env == "production"

    @property
    def is_development(self) -> bool:
        return self.node_env == "development"

    @property
    def mail(self) -> MailSettings:
        # MAIL_SECURE is only honoured when it is literally "true"
        return MailSettings(
            host=self.mail_host or "smtp.gmail.com",
            port=self.mail_port or 587,
            secure=self.mail_secure == "true",
            user=self.mail_user,
            password=self.mail_pass,
            from_address=self.mail_from,
            timeout=self.mail_timeout,
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
