from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # App
    ENV: str
    PORT: int

    # Database (PostgreSQL)
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # Identity provider tokens (verified only, issued externally)
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"

    # OpenAI (primary extraction provider)
    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = "gpt-4-turbo"
    OPENAI_TIMEOUT: int = 30  # Timeout in seconds

    # Gemini (fallback extraction provider)
    GEMINI_API_KEY: str | None = None
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GEMINI_TIMEOUT: int = 30  # Timeout in seconds

    # Document numbering
    NUMBERING_LOOKUP_TIMEOUT: float = 5.0  # Seconds before falling back to a timestamp number

    # Business context for extraction prompts of users without a profile
    BUSINESS_NAME: str = "My Business"
    DEFAULT_TAX_RATE: str = "0"

    # Frontend
    WEB_APP_URL: str = "http://localhost:3000"

    model_config = {
        "env_file": ".env",
        "extra": "ignore"
    }

settings = Settings()
