from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Language-generation capability (Azure OpenAI chat completions)
    AZURE_OPENAI_ENDPOINT: Optional[str] = None
    AZURE_OPENAI_KEY: Optional[str] = None
    AZURE_OPENAI_VERSION: Optional[str] = None
    AZURE_OPENAI_DEPLOYMENT: Optional[str] = None
    LLM_TIMEOUT_SECONDS: float = 30.0

    # Relational store the generated SQL runs against
    SQL_DATABASE_URL: Optional[str] = None
    SQL_DIALECT: str = "SQL Server T-SQL"
    SQL_QUERY_TIMEOUT_SECONDS: float = 30.0
    SQL_POOL_SIZE: int = 5
    SQL_ECHO: bool = False

    # Generation budgets
    SQL_MAX_TOKENS: int = 300
    SUMMARY_MAX_TOKENS: int = 200
    ANSWER_MAX_TOKENS: int = 200
    KNOWLEDGE_TEMPERATURE: float = 0.2

    FRONTEND_URL: Optional[str] = None
    DASHBOARD_URL: Optional[str] = None
    LOG_LEVEL: str = "INFO"

    # This tells Pydantic to read from the .env file
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def llm_configured(self) -> bool:
        return all(
            [
                self.AZURE_OPENAI_ENDPOINT,
                self.AZURE_OPENAI_KEY,
                self.AZURE_OPENAI_VERSION,
                self.AZURE_OPENAI_DEPLOYMENT,
            ]
        )

    @property
    def cors_origins(self) -> list:
        return [url for url in (self.FRONTEND_URL, self.DASHBOARD_URL) if url]


# Create a single instance of the settings to use everywhere
settings = Settings()
