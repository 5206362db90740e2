"""
Field-level encryption for Silent Help.

Protects sensitive free text (journal entries, message content) at rest
with authenticated encryption keyed per user.

Key Features:
- Per-user keys derived from the master key with scrypt (memory hard)
- AES-256-GCM with a fresh 128-bit IV per encryption and a 128-bit tag
- The user id is bound to every ciphertext as associated data
- Decryption failures are returned as values with one generic message

Dependencies:
- cryptography>=42.0.0 (for AES-256-GCM and scrypt)

Usage:
    from silent_help.lib.encryption import EncryptionCodec

    codec = EncryptionCodec()
    blob = codec.encrypt("dear diary", user_id="3f2c9a8e-...")
    result = codec.decrypt(blob, user_id="3f2c9a8e-...")
    if result.success:
        text = result.content
"""

from __future__ import annotations

import base64
import os
import re
import secrets
import threading
from dataclasses import dataclass

import structlog
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from silent_help.lib.exceptions import ConfigurationError, DecryptionError, EncryptionError

logger = structlog.get_logger(__name__)


MASTER_KEY_ENV = "SILENT_HELP_MASTER_KEY"
KDF_COST_ENV = "SILENT_HELP_KDF_COST"

MIN_MASTER_KEY_LENGTH = 32

GENERIC_DECRYPT_ERROR = "Failed to decrypt content. Data may be corrupted or key mismatch."

_NON_HEX = re.compile(r"[^0-9a-fA-F]")
_KEY_ID_PATTERN = re.compile(r"[a-f0-9]{64}")


# =============================================================================
# Data Structures
# =============================================================================


@dataclass(frozen=True)
class EncryptedBlob:
    """
    Container for one encrypted text field.

    Attributes:
        ciphertext: Base64-encoded ciphertext (tag not included)
        iv: Base64-encoded 16-byte initialization vector
        auth_tag: Base64-encoded 16-byte GCM authentication tag
    """

    ciphertext: str
    iv: str
    auth_tag: str

    def to_db_dict(self) -> dict[str, str]:
        """Serialize as the three sibling values stored next to the owning record."""
        return {
            "ciphertext": self.ciphertext,
            "iv": self.iv,
            "auth_tag": self.auth_tag,
        }

    @classmethod
    def from_db_dict(cls, data: dict[str, object]) -> EncryptedBlob:
        """Deserialize from database storage."""
        values: dict[str, str] = {}
        for name in ("ciphertext", "iv", "auth_tag"):
            value = data.get(name)
            if not isinstance(value, str):
                raise ValueError(f"Expected str for {name}, got {type(value)}")
            values[name] = value
        return cls(**values)


@dataclass(frozen=True)
class DecryptResult:
    """Outcome of a decryption attempt."""

    success: bool
    content: str = ""
    error: str | None = None

    def unwrap(self) -> str:
        """Return the plaintext, or raise DecryptionError with the generic message."""
        if not self.success:
            raise DecryptionError(self.error or GENERIC_DECRYPT_ERROR)
        return self.content


# =============================================================================
# Encryption Codec
# =============================================================================


class EncryptionCodec:
    """
    Encrypts and decrypts single text fields for a user.

    Key Management:
    - Master key: loaded once, from the constructor or SILENT_HELP_MASTER_KEY,
      the first time a key is needed. Must be at least 32 characters.
    - User keys: scrypt(master_key, salt) where the salt is derived
      deterministically from the user id. Recomputed on every call and
      never cached.

    Security Properties:
    - AES-256-GCM, 16-byte random IV, 16-byte tag
    - user_id passed as associated data, so blobs never authenticate
      under a different user even when two ids map to the same salt
    - A missing or short master key raises ConfigurationError; there is
      no fallback key

    Example:
        >>> codec = EncryptionCodec(master_key="x" * 32)
        >>> blob = codec.encrypt("hello", user_id="a1b2c3")
        >>> codec.decrypt(blob, user_id="a1b2c3").content
        'hello'
    """

    KEY_SIZE = 32  # 256 bits for AES-256
    SALT_SIZE = 32
    IV_SIZE = 16  # 128 bits
    TAG_SIZE = 16  # 128 bits

    # scrypt parameters (n=2**14, r=8, p=1 matches the deployed format)
    KDF_COST = 2**14
    KDF_BLOCK_SIZE = 8
    KDF_PARALLELISM = 1

    def __init__(
        self,
        master_key: str | None = None,
        kdf_cost: int | None = None,
    ):
        """
        Initialize the codec.

        Args:
            master_key: Master encryption key. If None, SILENT_HELP_MASTER_KEY
                is read the first time a key is needed.
            kdf_cost: scrypt CPU/memory cost ``n``. If None, uses
                SILENT_HELP_KDF_COST or KDF_COST.
        """
        self._configured_key = master_key
        self._master_key: bytes | None = None
        self._kdf_cost = kdf_cost
        self._lock = threading.Lock()

    def _get_master_key(self) -> bytes:
        """
        Resolve and validate the master key.

        Raises:
            ConfigurationError: If the key is missing or shorter than 32 characters
        """
        if self._master_key is not None:
            return self._master_key

        with self._lock:
            if self._master_key is None:
                key = self._configured_key
                if key is None:
                    key = os.environ.get(MASTER_KEY_ENV)
                if not key:
                    raise ConfigurationError(
                        f"{MASTER_KEY_ENV} environment variable is not set"
                    )
                if len(key) < MIN_MASTER_KEY_LENGTH:
                    raise ConfigurationError(
                        f"{MASTER_KEY_ENV} must be at least {MIN_MASTER_KEY_LENGTH} characters"
                    )
                self._master_key = key.encode("utf-8")
                self._configured_key = None
        return self._master_key

    def _get_kdf_cost(self) -> int:
        cost = self._kdf_cost
        if cost is None:
            env_cost = os.environ.get(KDF_COST_ENV)
            if env_cost:
                try:
                    cost = int(env_cost)
                except ValueError:
                    raise ConfigurationError(f"{KDF_COST_ENV} must be an integer") from None
            else:
                cost = self.KDF_COST

        if cost < 2 or cost & (cost - 1):
            raise ConfigurationError("scrypt cost must be a power of two greater than 1")
        return cost

    def _derive_user_key(self, user_id: str) -> bytes:
        """
        Derive the 256-bit key for a user.

        Not cached: the key exists only for the duration of one call.
        """
        master_key = self._get_master_key()
        kdf = Scrypt(
            salt=derive_user_salt(user_id),
            length=self.KEY_SIZE,
            n=self._get_kdf_cost(),
            r=self.KDF_BLOCK_SIZE,
            p=self.KDF_PARALLELISM,
        )
        return kdf.derive(master_key)

    def encrypt(self, plaintext: str, user_id: str) -> EncryptedBlob:
        """
        Encrypt a text field for a user.

        Args:
            plaintext: The text to protect (may be empty)
            user_id: Owner of the content

        Returns:
            EncryptedBlob with base64 ciphertext, IV and tag

        Raises:
            ConfigurationError: If the master key is missing or too short
            EncryptionError: On any other failure (generic message only)
            ValueError: If user_id is empty
        """
        if not user_id:
            raise ValueError("user_id is required for encryption")

        # Configuration problems are fatal and must surface as-is
        self._get_master_key()
        self._get_kdf_cost()

        try:
            key = self._derive_user_key(user_id)
            iv = os.urandom(self.IV_SIZE)
            sealed = AESGCM(key).encrypt(iv, plaintext.encode("utf-8"), user_id.encode("utf-8"))
        except Exception as e:
            logger.error("content_encryption_failed", error=type(e).__name__)
            raise EncryptionError("Failed to encrypt content") from None

        ciphertext, tag = sealed[: -self.TAG_SIZE], sealed[-self.TAG_SIZE :]
        return EncryptedBlob(
            ciphertext=base64.b64encode(ciphertext).decode("ascii"),
            iv=base64.b64encode(iv).decode("ascii"),
            auth_tag=base64.b64encode(tag).decode("ascii"),
        )

    def decrypt(self, blob: EncryptedBlob, user_id: str) -> DecryptResult:
        """
        Decrypt a blob produced by encrypt().

        Every failure (tag mismatch, wrong user, corrupted or truncated
        fields, invalid base64) yields the same generic DecryptResult so
        callers cannot tell a key mismatch from a damaged tag.

        Raises:
            ConfigurationError: If the master key is missing or too short
        """
        self._get_master_key()
        self._get_kdf_cost()

        try:
            if not user_id:
                raise ValueError("user_id is required for decryption")
            iv = base64.b64decode(blob.iv, validate=True)
            tag = base64.b64decode(blob.auth_tag, validate=True)
            ciphertext = base64.b64decode(blob.ciphertext, validate=True)
            if len(iv) != self.IV_SIZE or len(tag) != self.TAG_SIZE:
                raise ValueError("IV or tag has the wrong length")

            key = self._derive_user_key(user_id)
            plaintext = AESGCM(key).decrypt(iv, ciphertext + tag, user_id.encode("utf-8"))
            content = plaintext.decode("utf-8")
        except Exception as e:
            logger.warning("content_decryption_failed", error=type(e).__name__)
            return DecryptResult(success=False, content="", error=GENERIC_DECRYPT_ERROR)

        return DecryptResult(success=True, content=content)


# =============================================================================
# Key Helpers
# =============================================================================


def derive_user_salt(user_id: str) -> bytes:
    """
    Derive the 32-byte scrypt salt for a user id.

    Non-hex characters are stripped, a trailing odd digit is dropped,
    the remaining hex is decoded and truncated or zero-padded to 32
    bytes. UUID user ids therefore yield their 16 raw bytes plus padding.
    """
    digits = _NON_HEX.sub("", user_id)
    if len(digits) % 2:
        digits = digits[:-1]
    raw = bytes.fromhex(digits)[: EncryptionCodec.SALT_SIZE]
    return raw.ljust(EncryptionCodec.SALT_SIZE, b"\x00")


def generate_user_key_id() -> str:
    """
    Generate a random 256-bit key identifier (64 lowercase hex chars).

    Used for external key-id bookkeeping when an account is created;
    it is unrelated to the encryption key itself.
    """
    return secrets.token_hex(32)


def is_valid_key_id(key_id: str) -> bool:
    """Check that a key id is exactly 64 lowercase hex characters."""
    return isinstance(key_id, str) and _KEY_ID_PATTERN.fullmatch(key_id) is not None


def secure_compare(a: str, b: str) -> bool:
    """
    Compare two strings in constant time for equal lengths.

    A length mismatch returns False immediately. Otherwise every
    character pair is XORed into an accumulator and the result is only
    checked after the full scan.
    """
    if len(a) != len(b):
        return False

    result = 0
    for x, y in zip(a, b):
        result |= ord(x) ^ ord(y)

    return result == 0


# =============================================================================
# Convenience Functions
# =============================================================================

_encryption_codec: EncryptionCodec | None = None


def get_encryption_codec() -> EncryptionCodec:
    """Get the process-wide codec (configured from the environment)."""
    global _encryption_codec
    if _encryption_codec is None:
        _encryption_codec = EncryptionCodec()
    return _encryption_codec


def encrypt_content(plaintext: str, user_id: str) -> EncryptedBlob:
    """Encrypt with the process-wide codec."""
    return get_encryption_codec().encrypt(plaintext, user_id)


def decrypt_content(blob: EncryptedBlob, user_id: str) -> DecryptResult:
    """Decrypt with the process-wide codec."""
    return get_encryption_codec().decrypt(blob, user_id)
