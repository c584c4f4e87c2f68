"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
    - Empty smtp_host disables delivery: mails are logged instead of sent (local dev)
"""

import sys
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://hackshield:hackshield@db:5432/hackshield"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres hands out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Auth
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 30
    system_api_key: str = "system-key-placeholder"

    # API
    cors_origins: list[str] = ["http://localhost:3000"]
    public_base_url: str = "http://localhost:8000"

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    # IDE workspace (filesystem roots)
    workspace_root: str = "./var/workspaces"
    preview_root: str = "./var/previews"
    deployment_root: str = "./var/deployments"
    upload_root: str = "./var/uploads"

    # Code execution + terminal
    execution_timeout_seconds: float = 5.0
    compile_timeout_seconds: float = 10.0
    terminal_timeout_seconds: float = 10.0
    terminal_max_output_bytes: int = 1024 * 1024
    python_command: str = sys.executable or "python3"
    node_command: str = "node"

    # Limits
    max_workspace_file_bytes: int = 5 * 1024 * 1024
    max_ppt_bytes: int = 50 * 1024 * 1024
    max_leave_attempts: int = 3
    max_team_members: int = 5

    # Mail
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_from: str = "noreply@hackshield.dev"
    smtp_use_ssl: bool = False

    # Anthropic (coding assistant)
    anthropic_api_key: str = "sk-ant-placeholder"
    anthropic_max_retries: int = 3
    anthropic_timeout_seconds: int = 60
    anthropic_base_delay_ms: int = 1000
    anthropic_max_delay_ms: int = 30_000
    assistant_model: str = "claude-sonnet-4-5"
    assistant_max_tokens: int = 1024

    @property
    def assistant_enabled(self) -> bool:
        """Placeholder key means no remote assistant; canned guidance is used."""
        return bool(self.anthropic_api_key) and not self.anthropic_api_key.endswith(
            "placeholder",
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
