from pydantic import BaseModel
from dotenv import load_dotenv
import os

# Pick up a local .env before reading defaults
load_dotenv()

class Settings(BaseModel):
    submit_timeout_sec: float = float(os.getenv("WELLGUIDE_SUBMIT_TIMEOUT_SEC", "10"))
    submit_delay_sec: float = float(os.getenv("WELLGUIDE_SUBMIT_DELAY_SEC", "1.0"))
    result_ttl_sec: int = int(os.getenv("WELLGUIDE_RESULT_TTL_SEC", "3600"))
    session_ttl_sec: int = int(os.getenv("WELLGUIDE_SESSION_TTL_SEC", "1800"))
    log_level: str = os.getenv("WELLGUIDE_LOG_LEVEL", "INFO")

settings = Settings()
