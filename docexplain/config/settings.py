from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    http_host: str = "0.0.0.0"
    http_port: int = 8000
    allowed_origins: str = "*"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "docexplain"
    db_username: str = "docexplain"
    db_password: str = "secret"

    agent_provider: str = "mistral"
    mistral_api_key: str = ""
    mistral_base_url: str = "https://api.mistral.ai/v1"
    summary_agent_id: str = "ag:ab291cb7:20250507:untitled-agent:64806fa7"
    explain_agent_id: str = "ag:ab291cb7:20250510:explain:9b572715"

    max_single_request_bytes: int = 5 * 1024 * 1024
    single_pass_max_tokens: int = 4000
    outline_max_tokens: int = 2000
    detail_max_tokens: int = 4000

    http_timeout_seconds: float = 30.0
    completion_timeout_seconds: float = 300.0
    extended_timeout_seconds: float = 75.0
    progressive_timeout_seconds: float = 120.0

    error_details_max_chars: int = 500
    parse_details_max_chars: int = 1000

    daily_summary_limit: int = 3

    pdf_engine: str = "pdfplumber"
