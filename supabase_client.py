# supabase_client.py
from supabase import create_client, Client

from config import PosSettings, load_settings


def get_client(settings: PosSettings = None) -> Client:
    if settings is None:
        settings = load_settings()

    if not settings.supabase_url or not settings.supabase_key:
        raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be set in the environment")

    return create_client(settings.supabase_url, settings.supabase_key)
