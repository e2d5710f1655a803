"""Shared fixtures: a fake peer directory and a file factory."""
import pytest
from unittest.mock import AsyncMock, MagicMock


@pytest.fixture
def peers():
    """Peer directory resolving 'name' to 'peer:name'."""
    directory = MagicMock()
    directory.resolve = AsyncMock(side_effect=lambda ref: f"peer:{ref}")
    directory.self_peer = AsyncMock(return_value="peer:self")
    return directory


@pytest.fixture
def make_file(tmp_path):
    """Write bytes to tmp_path/name and return the path."""
    def _make(name: str, data: bytes = b"hello world"):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path
    return _make
