"""Tests for option validation."""
import pytest
from tgpush.config import KB, UploadOptions
from tgpush.errors import ConfigError


def options(**kwargs) -> UploadOptions:
    kwargs.setdefault("paths", ["."])
    return UploadOptions(**kwargs)


class TestValidate:

    def test_defaults_are_valid(self):
        options().validate()

    @pytest.mark.parametrize("kwargs, message", [
        ({"paths": []}, "--path"),
        ({"topic": 3}, "--chat should be set"),
        ({"chat": "me", "to": '"me"'}, "cannot be set at the same time"),
        ({"limit": 0}, "--limit"),
        ({"threads": 0}, "--threads"),
        ({"delay": -1.0}, "--delay"),
        ({"part_size": 100}, "part size"),
        ({"part_size": 384 * KB}, "part size"),
        ({"part_size": 1024 * KB}, "part size"),
    ])
    def test_rejected(self, kwargs, message):
        with pytest.raises(ConfigError, match=message):
            options(**kwargs).validate()

    def test_chat_with_topic(self):
        options(chat="group", topic=3).validate()

    @pytest.mark.parametrize("size", [1, 64, 128, 256, 512])
    def test_part_sizes(self, size):
        options(part_size=size * KB).validate()
