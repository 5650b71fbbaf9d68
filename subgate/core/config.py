from pydantic_settings import BaseSettings, NoDecode
from pydantic import field_validator
from typing import Annotated, Optional, List, Union


class Settings(BaseSettings):
    # Database
    database_url: str

    # Firebase
    firebase_project_id: str
    firebase_credentials_path: str

    # API
    api_v1_str: str = "/api/v1"

    # Environment
    environment: str = "development"
    debug: bool = True

    # CORS
    cors_origins: Annotated[List[str], NoDecode] = ["http://localhost:5000"]

    # Admins (emails allowed to approve and manage subscriptions)
    admin_emails: Annotated[List[str], NoDecode] = []

    # Transactional mail API
    mail_api_url: Optional[str] = None
    mail_api_key: Optional[str] = None
    mail_from: str = "no-reply@localhost"
    mail_timeout_seconds: float = 30.0

    # Daily expiration sweep
    sweep_scheduler_enabled: bool = False
    sweep_hour: int = 0
    sweep_minute: int = 0
    scheduler_timezone: str = "UTC"

    @field_validator('cors_origins', 'admin_emails', mode='before')
    @classmethod
    def parse_comma_separated(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse list settings from environment variable (comma-separated) or use default list."""
        if isinstance(v, str):
            # Split by comma and strip whitespace
            return [item.strip() for item in v.split(',') if item.strip()]
        return v

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Allow extra fields from environment


settings = Settings()
