import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

DEFAULT_API_URL = "http://localhost:8000/api/v1"
DEFAULT_SESSION_FILE = Path.home() / ".expensedesk" / "session.json"


@dataclass
class ClientSettings:
    api_url: str = DEFAULT_API_URL
    timeout: float = 30.0
    session_file: Path = DEFAULT_SESSION_FILE

    @classmethod
    def from_env(cls, env_file=None):
        """
        Read EXPENSEDESK_* variables, after loading a .env file when one exists.

        Without ``env_file`` the nearest .env from the working directory
        upwards is used, which from a checkout is the repository root
        file the backend settings read too.
        """
        env_file = env_file or find_dotenv(usecwd=True)
        if env_file:
            load_dotenv(env_file)
        return cls(
            api_url=os.getenv("EXPENSEDESK_API_URL", DEFAULT_API_URL).rstrip("/"),
            timeout=float(os.getenv("EXPENSEDESK_TIMEOUT", "30")),
            session_file=Path(
                os.getenv("EXPENSEDESK_SESSION_FILE", str(DEFAULT_SESSION_FILE))
            ).expanduser(),
        )
