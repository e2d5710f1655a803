"""Stored API credentials and the Telethon session file."""
import logging
from pathlib import Path
from pydantic import BaseModel, ValidationError
from ..config import config_dir

log = logging.getLogger(__name__)


class Credentials(BaseModel):
    api_id: int
    api_hash: str


class TelegramSession:
    """Credentials file plus the sqlite session Telethon keeps next to it."""

    def __init__(self, directory: Path | None = None):
        self.directory = directory or config_dir()

    @property
    def credentials_file(self) -> Path:
        return self.directory / "credentials.json"

    @property
    def session_name(self) -> Path:
        """Name handed to Telethon, which adds the .session suffix."""
        return self.directory / "session"

    def _session_files(self) -> list[Path]:
        base = self.session_name.with_suffix(".session")
        return [base, base.with_name(base.name + "-journal")]

    def save_credentials(self, api_id: int, api_hash: str) -> None:
        path = self.credentials_file
        path.write_text(Credentials(api_id=api_id, api_hash=api_hash).model_dump_json())
        path.chmod(0o600)
        log.info(f"Credentials saved to {path}")

    def load_credentials(self) -> tuple[int, str]:
        """(api_id, api_hash), or (0, "") when nothing usable is stored."""
        path = self.credentials_file
        try:
            creds = Credentials.model_validate_json(path.read_text())
        except FileNotFoundError:
            return 0, ""
        except (OSError, ValidationError) as e:
            log.warning(f"Ignoring credentials in {path}: {e}")
            return 0, ""
        return creds.api_id, creds.api_hash

    def exists(self) -> bool:
        return self._session_files()[0].exists()

    def delete(self) -> None:
        """Forget the login: session, journal and credentials."""
        for path in (*self._session_files(), self.credentials_file):
            path.unlink(missing_ok=True)
        log.info("Session deleted")
