"""
Persistent client storage.

A small JSON key/value file that survives process restarts. The client
keeps exactly one entry in it: the access token under ``TOKEN_KEY``.
"""

import logging
from pathlib import Path
from typing import Optional

from ..utils.file_utils import save_json, load_json


logger = logging.getLogger(__name__)


TOKEN_KEY = "token"


class TokenStore:
    """
    File-backed token storage.

    A missing file or missing key means "logged out".

    Examples:
        >>> store = TokenStore(Path("/tmp/storage.json"))
        >>> store.save("t1")
        >>> store.load()
        't1'
        >>> store.clear()
        >>> store.load() is None
        True
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> dict:
        data = load_json(self.path)
        if not isinstance(data, dict):
            return {}
        return data

    def load(self) -> Optional[str]:
        """Return the stored token, or None when logged out."""
        token = self._read().get(TOKEN_KEY)
        if isinstance(token, str) and token:
            return token
        return None

    def save(self, token: str):
        """
        Persist the token.

        Raises:
            OSError: If the storage file cannot be written
        """
        data = self._read()
        data[TOKEN_KEY] = token
        if not save_json(data, self.path):
            raise OSError(f"Could not write token storage: {self.path}")
        logger.debug(f"Token stored in {self.path}")

    def clear(self):
        """Remove the token; other keys are left untouched."""
        data = self._read()
        if TOKEN_KEY not in data:
            return
        del data[TOKEN_KEY]
        if not save_json(data, self.path):
            raise OSError(f"Could not write token storage: {self.path}")
        logger.debug(f"Token removed from {self.path}")
