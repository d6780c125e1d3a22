# app/config.py


from dotenv import load_dotenv
from pathlib import Path
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()  # read .env before Settings() so os.getenv callers see it too

BASE_DIR = Path(__file__).resolve().parent.parent

class Settings(BaseSettings):
    # environment
    app_env: str = "local"
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    # persistence: "supabase" (REST client) or "sql" (SQLAlchemy)
    persistence_backend: str = "sql"

    # Supabase
    supabase_url: str | None = None          # SUPABASE_URL
    supabase_key: str | None = None          # SUPABASE_KEY

    # SQL (Postgres in production, SQLite locally)
    database_url: str = f"sqlite:///{BASE_DIR / 'training_quiz.db'}"

    # quiz policy
    pass_threshold: float = 0.6

    # live sessions idle this long are dropped from memory
    session_idle_ttl_seconds: float = 4 * 60 * 60

    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

settings = Settings()

if __name__ == "__main__":
    print("BASE_DIR:", BASE_DIR)
    print("PERSISTENCE_BACKEND:", settings.persistence_backend)
    print("DATABASE_URL:", settings.database_url)
    print("SUPABASE_URL:", settings.supabase_url)
