"""
Configuration Settings.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings."""

    # App info
    app_name: str = "Shanti AI Chat"
    app_version: str = "1.0.0"
    debug: bool = False

    # Credential storage
    storage_type: str = "local"
    local_storage_path: str = "./data"

    # CORS - the auth API is open to any origin
    cors_origins: list[str] = ["*"]

    # LLM Provider settings
    llm_provider: str = "openrouter"  # "openrouter" or "openai"
    llm_api_key: Optional[str] = None
    llm_model: Optional[str] = None  # uses provider default if not set
    llm_base_url: Optional[str] = None  # uses provider default if not set
    llm_referer: Optional[str] = None  # sent as HTTP-Referer to OpenRouter
    llm_timeout_seconds: float = 60.0

    # Chat client
    auth_base_url: str = "http://localhost:8000"
    auth_timeout_seconds: float = 15.0
    client_storage_path: str = "./client_data/local_storage.json"

    # Logging configuration
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_file_path: str = "./logs/shanti.log"
    log_file_enabled: bool = True
    log_console_enabled: bool = True
    log_json_format: bool = True  # JSON format for files, human-readable for console
    log_api_requests: bool = True  # Log all API requests/responses

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
