# supabase_client.py — Supabase client construction

from supabase import create_client, Client
from lifelog.config import SUPABASE_URL, SUPABASE_ANON_KEY


def create_session_client() -> Client:
    """
    New Supabase client with the anonymous key.
    Each client carries its own auth session, so every SessionController
    gets a fresh one.
    """
    if not SUPABASE_URL or not SUPABASE_ANON_KEY:
        raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY must be set in environment variables")

    return create_client(SUPABASE_URL, SUPABASE_ANON_KEY)
