"""
Unit tests for the retained key store.
"""

import threading

import pytest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from purpleair_api import AuthError, KeyStore, KeyType


class TestKeyStore:
    """Tests for KeyStore slots."""

    def test_empty(self):
        keys = KeyStore()

        assert keys.read_key is None
        assert keys.write_key is None

    def test_retain_read_and_write(self):
        keys = KeyStore()

        assert keys.retain("r", KeyType.READ) is True
        assert keys.retain("w", KeyType.WRITE) is True
        assert keys.read_key == "r"
        assert keys.write_key == "w"

    def test_replace_same_class(self):
        keys = KeyStore(read_key="old")
        keys.retain("new", KeyType.READ)

        assert keys.read_key == "new"

    @pytest.mark.parametrize("key_type", [
        KeyType.UNKNOWN, KeyType.READ_DISABLED, KeyType.WRITE_DISABLED
    ])
    def test_other_types_not_retained(self, key_type):
        keys = KeyStore(read_key="r", write_key="w")

        assert keys.retain("x", key_type) is False
        assert keys.read_key == "r"
        assert keys.write_key == "w"

    def test_require_missing_read(self):
        with pytest.raises(AuthError) as exc_info:
            KeyStore(write_key="w").require_read()

        assert exc_info.value.key_type == KeyType.UNKNOWN
        assert "read key" in str(exc_info.value)

    def test_require_missing_write(self):
        with pytest.raises(AuthError, match="write key"):
            KeyStore(read_key="r").require_write()

    def test_require_present(self):
        keys = KeyStore(read_key="r", write_key="w")

        assert keys.require_read() == "r"
        assert keys.require_write() == "w"

    def test_repr_hides_values(self):
        text = repr(KeyStore(read_key="secret"))

        assert "secret" not in text
        assert "read=set" in text
        assert "write=unset" in text

    def test_concurrent_retain(self):
        """Test that concurrent writers leave one of their values."""
        keys = KeyStore()
        values = [f"key-{i}" for i in range(20)]
        threads = [
            threading.Thread(target=keys.retain, args=(v, KeyType.READ)) for v in values
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert keys.read_key in values
