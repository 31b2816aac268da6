# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Where the client keeps its credentials between runs.

The persisted document mirrors what the web frontend kept in localStorage:

    {"token": "<access>", "refreshToken": "<refresh>", "user": {...}}
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

logger = logging.getLogger("tracker.client")


class TokenStore:
    """In-memory holder for the access token, refresh token and user."""

    def __init__(self):
        self.access_token: Optional[str] = None
        self.refresh_token: Optional[str] = None
        self.user: Optional[dict] = None

    def save(self, access_token: str, refresh_token: str, user: Optional[dict] = None) -> None:
        self.access_token = access_token
        self.refresh_token = refresh_token
        if user is not None:
            self.user = user
        self._persist()

    def clear(self) -> None:
        self.access_token = None
        self.refresh_token = None
        self.user = None
        self._persist()

    def _persist(self) -> None:
        pass


MemoryTokenStore = TokenStore


class FileTokenStore(TokenStore):
    """
    TokenStore backed by a JSON file.  A missing or corrupt file loads as an
    empty session and is overwritten on the next save.
    """

    def __init__(self, path):
        super().__init__()
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, ValueError):
            logger.warning("discarding unreadable token file %s", self.path)
            return
        if not isinstance(raw, dict):
            return
        self.access_token = raw.get("token") or None
        self.refresh_token = raw.get("refreshToken") or None
        user = raw.get("user")
        self.user = user if isinstance(user, dict) else None

    def _persist(self) -> None:
        if not (self.access_token or self.refresh_token or self.user):
            try:
                self.path.unlink()
            except FileNotFoundError:
                pass
            return

        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"token": self.access_token, "refreshToken": self.refresh_token, "user": self.user}
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(json.dumps(payload), encoding="utf-8")
        # tokens are credentials: owner read/write only
        os.chmod(tmp, 0o600)
        os.replace(tmp, self.path)
