from slowapi import Limiter
from slowapi.util import get_remote_address

from textpost.config import Settings


def create_limiter(settings: Settings) -> Limiter:
    """One limiter per app; its in-memory counters die with the app."""
    return Limiter(
        key_func=get_remote_address,
        default_limits=[settings.rate_limit],
        storage_uri="memory://",
    )
