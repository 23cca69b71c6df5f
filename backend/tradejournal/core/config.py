from pydantic import BaseModel
from typing import List
import os
from dotenv import load_dotenv

load_dotenv()

def _csv_env(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [part.strip() for part in raw.split(",") if part.strip()]

class Settings(BaseModel):
    app_env: str = os.getenv("APP_ENV", "dev")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./trading_journal.db")
    notes_db_path: str = os.getenv("NOTES_DB_PATH", "./trading_journal_notes.db")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    cors_origins: List[str] = _csv_env("CORS_ORIGINS", "http://localhost:3000")

    # brokerage fee applied when an imported row has none (negative = cost)
    default_fee: float = float(os.getenv("DEFAULT_FEE", "-0.65"))
    profit_factor_sentinel: float = float(os.getenv("PROFIT_FACTOR_SENTINEL", "999"))
    periods_per_year: int = int(os.getenv("PERIODS_PER_YEAR", "252"))
    max_import_bytes: int = int(os.getenv("MAX_IMPORT_BYTES", "5000000"))

settings = Settings()
