"""Configuration management via environment variables.

Reads from .env file (via pydantic-settings) with sensible defaults.
All values can be overridden via environment variables.

Required for live data:
    OPENDART_API_KEY   — OpenDART certification key (crtfc_key)

Optional:
    ANTHROPIC_API_KEY  — For Claude-powered financial interpretation
    MOCK_ANALYSIS      — Serve template analyses instead of calling Claude
    COMPANIES_PATH     — companies.json produced by `dart_tools.py convert`
    PORT               — Server port
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # OpenDART disclosure API
    opendart_api_key: str = ""
    opendart_base_url: str = "https://opendart.fss.or.kr/api"
    opendart_timeout: int = 30

    # Claude API for narrative interpretation
    anthropic_api_key: str = ""
    analysis_model: str = "claude-sonnet-4-20250514"
    analysis_max_tokens: int = 4096
    # Low temperature keeps the section headings stable
    analysis_temperature: float = 0.3
    probe_models: list[str] = ["claude-sonnet-4-20250514", "claude-3-5-haiku-latest"]
    mock_analysis: bool = False

    # Company directory (JSON array of corp-code records)
    companies_path: str = "data/companies.json"

    # Request defaults
    default_bsns_year: str = "2024"
    default_reprt_code: str = "11011"

    port: int = 8000
    log_level: str = "info"

    # Strip whitespace and quotes from string fields; .env values often have
    # trailing spaces or quotes that break API keys
    @field_validator("opendart_api_key", "anthropic_api_key", "opendart_base_url", mode="before")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip().strip('"').strip("'").strip()
        return v

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


_config: Settings | None = None


def get_config() -> Settings:
    """Get or create the shared Settings singleton."""
    global _config
    if _config is None:
        _config = Settings()
    return _config
