import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class SessionStorage:
    """
    Keeps the access token and the cached user profile between runs.

    Both values live in one JSON file and are always written and
    removed together.
    """

    def __init__(self, path):
        self.path = Path(path)

    def load(self):
        """returns: (token, profile dict) or (None, None)"""
        if not self.path.exists():
            return None, None
        with self.path.open(encoding="utf-8") as handle:
            data = json.load(handle)
        token = data.get("token")
        profile = data.get("user")
        if not token or not profile:
            return None, None
        return token, profile

    def save(self, token, profile):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        # an existing file keeps its old mode through os.open
        os.chmod(self.path, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump({"token": token, "user": profile}, handle)
        logger.debug("Saved session to %s", self.path)

    def clear(self):
        if self.path.exists():
            self.path.unlink()
            logger.debug("Cleared session at %s", self.path)
