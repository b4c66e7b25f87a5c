from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    listing_provider: str = "mock"  # "mock" | "http"
    listing_api_url: str = ""
    listing_api_key: str = ""
    http_timeout: float = 30.0
    log_level: str = "INFO"
