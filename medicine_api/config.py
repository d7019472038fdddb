# config.py

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()  # Load .env variables before reading them


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value < 1:
        logging.getLogger(__name__).warning("Ignoring invalid %s=%r, using %d", name, raw, default)
        return default
    return value


SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")

KNOWLEDGE_BASE_PATH = Path(os.getenv("MEDICINE_KB_PATH") or Path(__file__).parent / "knowledge_base.json")

# Candidate caps differ per entry point; see recommendation_engine
STRUCTURED_CANDIDATE_CAP = _int_env("STRUCTURED_CANDIDATE_CAP", 6)
FREE_TEXT_CANDIDATE_CAP = _int_env("FREE_TEXT_CANDIDATE_CAP", 8)
KEYWORD_CANDIDATE_CAP = _int_env("KEYWORD_CANDIDATE_CAP", 6)

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
