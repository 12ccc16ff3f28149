from fastapi import Request
from supabase import create_client, Client
from textpost.config import Settings


def create_supabase(settings: Settings) -> Client:
    """Build the single Supabase client shared by all requests for the process lifetime."""
    return create_client(settings.supabase_url, settings.supabase_key)


def get_supabase(request: Request) -> Client:
    return request.app.state.supabase
