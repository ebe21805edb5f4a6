"""
Application Configuration

Reads service, branding, logo and SMTP settings from the environment.
"""

import os
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "y")


def _env_list(name: str, default: str = "") -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class MailerConfig:
    """Offer letter mailer configuration management"""

    def __init__(self):
        # Service settings
        self.app_env = os.getenv("APP_ENV", "production").lower()
        self.host = os.getenv("HOST", "0.0.0.0")
        self.port = int(os.getenv("PORT", "3001"))
        self.max_csv_rows = int(os.getenv("MAX_CSV_ROWS", "5000"))
        self.job_ttl_seconds = int(os.getenv("JOB_TTL_SECONDS", "3600"))

        # Letter branding
        self.company_name = os.getenv("COMPANY_NAME", "SKH Group")
        self.signatory_name = os.getenv("SIGNATORY_NAME", "Anshika Khurana")
        self.signatory_phone = os.getenv("SIGNATORY_PHONE", "7060522828")
        self.logo_url = os.getenv("LOGO_URL", "").strip()
        self.logo_path = os.getenv("LOGO_PATH", "").strip()
        self.logo_timeout = float(os.getenv("LOGO_TIMEOUT", "10"))

        # SMTP relay
        self.smtp_host = os.getenv("SMTP_HOST", "smtp.gmail.com").strip()
        self.smtp_port = int(os.getenv("SMTP_PORT", "587"))
        self.smtp_username = os.getenv("SMTP_USERNAME", "").strip()
        self.smtp_password = os.getenv("SMTP_PASSWORD", "").strip()
        self.smtp_starttls = _env_flag("SMTP_STARTTLS", "true")
        self.smtp_use_ssl = _env_flag("SMTP_USE_SSL", "false")
        self.smtp_timeout = float(os.getenv("SMTP_TIMEOUT", "30"))

        # Sender identity
        self.mail_from = os.getenv("MAIL_FROM", self.smtp_username).strip()
        self.mail_from_name = os.getenv("MAIL_FROM_NAME", "Factorykaam")
        self.mail_cc = _env_list("MAIL_CC")

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"

    @property
    def sender(self) -> str:
        """Formatted sender identity for the From header"""
        return f'"{self.mail_from_name}" <{self.mail_from}>'

    def validate_config(self) -> tuple[bool, Optional[str]]:
        """Validate SMTP configuration"""
        if not self.smtp_host:
            return False, "SMTP_HOST is required"
        if not self.mail_from:
            return False, "MAIL_FROM (or SMTP_USERNAME) is required"
        if self.smtp_username and not self.smtp_password:
            return False, "SMTP_PASSWORD is required when SMTP_USERNAME is set"
        if self.smtp_starttls and self.smtp_use_ssl:
            return False, "SMTP_STARTTLS and SMTP_USE_SSL are mutually exclusive"

        return True, None

    def summary(self) -> dict:
        """Non-secret configuration values for health responses"""
        return {
            "app_env": self.app_env,
            "max_csv_rows": self.max_csv_rows,
            "job_ttl_seconds": self.job_ttl_seconds,
            "company_name": self.company_name,
            "logo_configured": bool(self.logo_url or self.logo_path),
            "smtp_host": self.smtp_host,
            "smtp_port": self.smtp_port,
            "cc_recipients": len(self.mail_cc),
        }


# Global configuration instance
_config: Optional[MailerConfig] = None


def get_config() -> MailerConfig:
    """Get or create global configuration"""
    global _config
    if _config is None:
        _config = MailerConfig()
    return _config


def reset_config():
    """Drop the cached configuration so the environment is read again"""
    global _config
    _config = None
