"""
Retained access keys.

One read key and one write key are kept at a time. Setting a key of the
same class replaces the previous one; there is no way to clear a slot.
"""

import logging
import threading
from typing import Optional

from .errors import AuthError
from .models import KeyType


logger = logging.getLogger(__name__)


class KeyStore:
    """Holds the retained read and write keys for a client."""

    def __init__(self, read_key: Optional[str] = None, write_key: Optional[str] = None):
        self._lock = threading.Lock()
        self._read_key = read_key
        self._write_key = write_key

    def retain(self, key: str, key_type: KeyType) -> bool:
        """
        Store a checked key in the slot for its classification.

        Args:
            key: Access key value
            key_type: Classification reported by the service

        Returns:
            True if the key was stored (READ or WRITE), False otherwise
        """
        with self._lock:
            if key_type == KeyType.READ:
                self._read_key = key
            elif key_type == KeyType.WRITE:
                self._write_key = key
            else:
                return False

        logger.info("Retained API %s key", key_type.value.lower())
        return True

    @property
    def read_key(self) -> Optional[str]:
        with self._lock:
            return self._read_key

    @property
    def write_key(self) -> Optional[str]:
        with self._lock:
            return self._write_key

    def require_read(self) -> str:
        """Retained read key, or AuthError if none is set."""
        key = self.read_key
        if not key:
            raise AuthError("PurpleAir read key is not set", key_type=KeyType.UNKNOWN)
        return key

    def require_write(self) -> str:
        """Retained write key, or AuthError if none is set."""
        key = self.write_key
        if not key:
            raise AuthError("PurpleAir write key is not set", key_type=KeyType.UNKNOWN)
        return key

    def __repr__(self) -> str:
        return (
            f"KeyStore(read={'set' if self._read_key else 'unset'}, "
            f"write={'set' if self._write_key else 'unset'})"
        )
