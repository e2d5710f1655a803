"""Configuration - single source of truth."""
import os
from pathlib import Path
from dataclasses import dataclass, field
from .errors import ConfigError

KB = 1024
# Telegram accepts parts that divide 512 KiB and are a multiple of 1 KiB.
MAX_PART_SIZE = 512 * KB


@dataclass
class Config:
    """App configuration."""
    api_id: int = 0
    api_hash: str = ""

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            api_id=int(os.getenv("TG_API_ID", "0")),
            api_hash=os.getenv("TG_API_HASH", ""),
        )


@dataclass
class UploadOptions:
    """Upload options."""
    paths: list[str] = field(default_factory=list)
    includes: list[str] = field(default_factory=list)
    excludes: list[str] = field(default_factory=list)
    chat: str = ""
    topic: int = 0
    to: str = ""
    caption: str = ""
    remove: bool = False
    photo: bool = False
    limit: int = 2
    delay: float = 0.0
    part_size: int = MAX_PART_SIZE
    threads: int = 4

    def validate(self) -> None:
        """Reject option combinations before anything is opened."""
        if not self.paths:
            raise ConfigError("at least one --path is required")
        if self.topic and not self.chat:
            raise ConfigError("--chat should be set when --topic is set")
        if self.chat and self.to:
            raise ConfigError("--chat and --to cannot be set at the same time")
        if self.limit < 1:
            raise ConfigError(f"--limit must be at least 1, got {self.limit}")
        if self.threads < 1:
            raise ConfigError(f"--threads must be at least 1, got {self.threads}")
        if self.delay < 0:
            raise ConfigError(f"--delay must not be negative, got {self.delay}")
        if self.part_size <= 0 or self.part_size % KB or MAX_PART_SIZE % self.part_size:
            raise ConfigError(
                f"part size must be a multiple of 1 KiB dividing 512 KiB, got {self.part_size}"
            )


# Paths
def config_dir() -> Path:
    path = Path.home() / ".config" / "tgpush"
    path.mkdir(parents=True, exist_ok=True)
    return path

def session_path() -> Path:
    return config_dir() / "session"
