"""
Custom exception hierarchy for the Silent Help safety core.

All exceptions inherit from SilentHelpException, enabling a catch-all
for safety-core errors while keeping the ability to catch specific
error types.

Messages raised from this hierarchy must never carry plaintext,
master key material, derived keys or IVs.
"""

from __future__ import annotations


class SilentHelpException(Exception):
    """Base exception for all Silent Help errors."""


class ConfigurationError(SilentHelpException):
    """Missing or invalid configuration (master key absent or too short, bad KDF cost)."""


class EncryptionError(SilentHelpException):
    """Generic encryption failure. Never includes plaintext or key material."""


class DecryptionError(EncryptionError):
    """Decryption failed (tag mismatch, corrupted input, wrong key).

    Only raised when a caller explicitly unwraps a failed DecryptResult;
    the codec itself reports decryption failures as values.
    """
