# supabase_client.py

import logging
from typing import Optional

from supabase import Client, create_client

from medicine_api import config

logger = logging.getLogger(__name__)

_client: Optional[Client] = None


def get_supabase() -> Client:
    """Creates the Supabase client on first use from SUPABASE_URL / SUPABASE_KEY."""
    global _client
    if _client is None:
        if not config.SUPABASE_URL or not config.SUPABASE_KEY:
            raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be set")
        logger.info("Connecting to Supabase at %s", config.SUPABASE_URL)
        _client = create_client(config.SUPABASE_URL, config.SUPABASE_KEY)
    return _client
