import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./tutorpair.db")

# Fixed "now" for manual testing, e.g. 2025-01-20T10:00:00 (blank = real time)
SIMULATION_DATETIME = os.getenv("SIMULATION_DATETIME", "").strip() or None

# Completion scheduler period in seconds
COMPLETION_INTERVAL_SECONDS = int(os.getenv("COMPLETION_INTERVAL_SECONDS", "60"))

# Timeslot catalog: ordered day tokens (offset from the week's Monday) and period ranges
TIMESLOT_DAYS = [
    d.strip() for d in os.getenv("TIMESLOT_DAYS", "MON,TUE,WED,THU,FRI").split(",") if d.strip()
]
TIMESLOT_PERIOD_TIMES = [
    p.strip()
    for p in os.getenv(
        "TIMESLOT_PERIOD_TIMES",
        "09:00-09:50,09:55-10:45,11:05-11:55,12:00-12:50,14:05-14:55,15:00-15:50,16:00-17:15",
    ).split(",")
    if p.strip()
]

# Optional hard cutoff on tutor/tutee level difference (unset = weight-only incentive)
_max_level_gap = os.getenv("MAX_LEVEL_GAP", "").strip()
MAX_LEVEL_GAP = int(_max_level_gap) if _max_level_gap else None

# Frontend origins allowed by CORS
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "http://localhost:5173,http://localhost:3000",
).split(",")

# Restrict registration to one email domain, e.g. school.example.org (blank = any)
ALLOWED_EMAIL_DOMAIN = os.getenv("ALLOWED_EMAIL_DOMAIN", "").strip() or None
