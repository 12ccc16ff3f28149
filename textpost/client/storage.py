import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

IDENTITY_KEY = "textpost_user"
TOKEN_KEY = "textpost_access_token"


def default_store_path() -> Path:
    return Path(os.environ.get("TEXTPOST_SESSION_FILE", Path.home() / ".textpost" / "session.json"))


@dataclass(frozen=True)
class StoredIdentity:
    display_name: str
    access_token: Optional[str] = None  # set for Supabase Auth sessions


class IdentityStore:
    """Local persistence of the signed-in identity, so a restart skips login."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else default_store_path()

    def load(self) -> Optional[StoredIdentity]:
        if not self.path.is_file():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return None
        name = data.get(IDENTITY_KEY) if isinstance(data, dict) else None
        if not name:
            return None
        return StoredIdentity(display_name=name, access_token=data.get(TOKEN_KEY))

    def save(self, identity: StoredIdentity) -> None:
        data = {IDENTITY_KEY: identity.display_name}
        if identity.access_token:
            data[TOKEN_KEY] = identity.access_token
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")
        self.path.chmod(0o600)

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
