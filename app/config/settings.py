from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "finimport"
    db_username: str = "finimport"
    db_password: str = "secret"

    pdf_engine: str = "pymupdf"
    pdf_render_dpi: int = 200
    ocr_max_workers: int = 4

    llm_provider: str = "none"
    llm_api_key: str = ""
    llm_model_name: str = "gpt-4o-mini"
    llm_base_url: str = ""
    llm_timeout_seconds: int = 30
    llm_tier3_model_name: str = ""

    ai_daily_budget_usd: float = 0.10
    ai_monthly_budget_usd: float = 2.00

    categorization_min_confidence: float = 0.70
    categorization_batch_size: int = 10
    learning_threshold: int = 2

    duplicate_date_tolerance_days: int = 1
    duplicate_exact_similarity: float = 0.95
    duplicate_probable_similarity: float = 0.5

    low_confidence_threshold: float = 0.5
