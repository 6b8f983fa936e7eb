from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Параметры базы данных (хранилище задач)
    database_url: str | None = Field(default=None)
    db_host: str = Field(default="localhost")
    db_port: int = Field(default=5432)
    db_name: str = Field(default="smarttasks")
    db_user: str = Field(default="user")
    db_password: str = Field(default="password")
    db_generate_schemas: bool = Field(default=False)

    # Redis настройки для Dramatiq
    redis_url: str = Field(default="redis://localhost:6379/0")
    embedding_job_time_limit_ms: int = Field(default=60_000)

    # Провайдер эмбеддингов и подсказок (OpenAI)
    openai_api_key: str | None = Field(default=None)
    openai_base_url: str | None = Field(default=None)
    embedding_model: str = Field(default="text-embedding-3-small")
    embedding_dimensions: int = Field(default=1536)
    gpt_model_fast: str = Field(default="gpt-4o-mini")

    # Клиентский доступ
    client_api_key: str | None = Field(default=None)
    cors_origins: str = Field(default="*")

    # Поиск и бэкфилл
    search_match_threshold: float = Field(default=0.5)
    search_match_count: int = Field(default=5)
    backfill_delay_seconds: float = Field(default=0.1)

    log_level: str = Field(default="INFO")

    @property
    def postgres_dsn(self) -> str:
        """Конструирует DSN для PostgreSQL из отдельных параметров"""
        return f"postgres://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def db_url(self) -> str:
        """DATABASE_URL имеет приоритет над отдельными параметрами"""
        return self.database_url or self.postgres_dsn

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


settings = None

def get_settings() -> Settings:
    """Получить настройки приложения с ленивой инициализацией"""
    global settings
    if settings is None:
        settings = Settings()
    return settings

def reset_settings():
    """Сбросить кэшированные настройки (для тестирования)"""
    global settings
    settings = None
