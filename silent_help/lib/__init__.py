"""
Lib package for Silent Help.

Contains shared utilities:
- encryption.py: Field-level encryption (AES-256-GCM, scrypt user keys)
- clinical_safety.py: AI output safety filter
- lexicon.py: Clinical lexicons and shared enums
- exceptions.py: Exception hierarchy
- logging.py: structlog configuration
"""

from silent_help.lib.clinical_safety import (
    SafetyCheckResult,
    SafetyFilter,
    check_response_safety,
)
from silent_help.lib.encryption import (
    DecryptResult,
    EncryptedBlob,
    EncryptionCodec,
    decrypt_content,
    encrypt_content,
    generate_user_key_id,
    get_encryption_codec,
    is_valid_key_id,
    secure_compare,
)
from silent_help.lib.exceptions import (
    ConfigurationError,
    DecryptionError,
    EncryptionError,
    SilentHelpException,
)
from silent_help.lib.lexicon import HazardId, Severity, SuggestedAction

__all__ = [
    # Clinical safety
    "SafetyCheckResult",
    "SafetyFilter",
    "check_response_safety",
    # Encryption
    "DecryptResult",
    "EncryptedBlob",
    "EncryptionCodec",
    "decrypt_content",
    "encrypt_content",
    "generate_user_key_id",
    "get_encryption_codec",
    "is_valid_key_id",
    "secure_compare",
    # Exceptions
    "ConfigurationError",
    "DecryptionError",
    "EncryptionError",
    "SilentHelpException",
    # Lexicon
    "HazardId",
    "Severity",
    "SuggestedAction",
]
