## Application settings configuration
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    env: str = "dev"
    debug: bool = False
    database_url: str = "sqlite:///./goalmap.db"
    redis_url: str = "redis://localhost:6379/0"

    # Ollama settings
    ollama_base_url: str = "http://localhost:11434/v1"
    ollama_model: str = "llama3.1"

    # Hosted providers
    LLM_PROVIDER: str = "ollama"  # ollama/groq/gemini
    GROQ_API_KEY: str | None = None
    GROQ_BASE_URL: str = "https://api.groq.com/openai/v1"
    GROQ_MODEL: str = "llama-3.1-8b-instant"

    GEMINI_API_KEY: str | None = None
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/openai/"
    GEMINI_MODEL: str = "gemini-2.0-flash"

    llm_temperature: float = 0.2

    # Job runner
    roadmap_retries: int = 2  # extra attempts after the first one
    worker_poll_timeout: int = 30


@lru_cache
def get_settings() -> Settings:
    return Settings()
