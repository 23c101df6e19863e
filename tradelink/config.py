import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# SQLite fallback keeps local development zero-config
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./tradelink.db")

# Frontend base URL (CORS default)
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

# Scheduling defaults applied to newly created contractors
DEFAULT_WORKING_HOURS_START = os.getenv("DEFAULT_WORKING_HOURS_START", "09:00")
DEFAULT_WORKING_HOURS_END = os.getenv("DEFAULT_WORKING_HOURS_END", "17:00")
DEFAULT_MEETING_DURATION = int(os.getenv("DEFAULT_MEETING_DURATION", "30"))
# 0=Sunday .. 6=Saturday
DEFAULT_WORKING_DAYS = [
    int(day) for day in os.getenv("DEFAULT_WORKING_DAYS", "1,2,3,4,5").split(",") if day.strip()
]

# Realtors may book up to this many days in advance
MAX_BOOKING_DAYS_AHEAD = int(os.getenv("MAX_BOOKING_DAYS_AHEAD", "30"))
