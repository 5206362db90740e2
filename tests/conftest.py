"""
Shared test fixtures for Silent Help.

This module provides common fixtures used across all test modules:
- Environment setup (dev mode, no ambient master key)
- EncryptionCodec with a fixed test key and a cheap scrypt cost
- HazardLogger with a recording alert handler
- SafetyPipeline wired to both

Usage:
    All fixtures are automatically available to any test in the tests/ directory.
"""

from __future__ import annotations

import os

import pytest

# ---------------------------------------------------------------------------
# 1. Environment setup -- must run before any application imports
# ---------------------------------------------------------------------------

os.environ.setdefault("SILENT_HELP_DEV_MODE", "1")
os.environ.pop("SILENT_HELP_MASTER_KEY", None)
os.environ.pop("SILENT_HELP_KDF_COST", None)

from silent_help.lib.encryption import EncryptionCodec  # noqa: E402
from silent_help.services.hazard_log import HazardLogger  # noqa: E402
from silent_help.services.safety_pipeline import SafetyPipeline  # noqa: E402

# Low scrypt cost keeps bit-flip sweeps fast; production uses 2**14
TEST_KDF_COST = 2**10


# ---------------------------------------------------------------------------
# 2. master_key / codec
# ---------------------------------------------------------------------------

@pytest.fixture()
def master_key() -> str:
    """A deterministic 40-character test master key. NOT used in production."""
    return "test-master-key-for-silent-help-0123456"


@pytest.fixture()
def codec(master_key):
    """Provide an ``EncryptionCodec`` with the test key and a cheap KDF cost."""
    return EncryptionCodec(master_key=master_key, kdf_cost=TEST_KDF_COST)


# ---------------------------------------------------------------------------
# 3. hazard_logger -- records alerts instead of paging anyone
# ---------------------------------------------------------------------------

@pytest.fixture()
def alerts():
    """List that collects entries passed to the hazard alert handler."""
    return []


@pytest.fixture()
def hazard_logger(alerts):
    """Provide a fresh ``HazardLogger`` whose alerts land in ``alerts``."""
    return HazardLogger(alert_handler=alerts.append)


# ---------------------------------------------------------------------------
# 4. pipeline
# ---------------------------------------------------------------------------

@pytest.fixture()
def pipeline(codec, hazard_logger):
    """Provide a ``SafetyPipeline`` wired to the test codec and logger."""
    return SafetyPipeline(codec=codec, hazard_logger=hazard_logger)


# ---------------------------------------------------------------------------
# 5. user ids
# ---------------------------------------------------------------------------

@pytest.fixture()
def user_a() -> str:
    return "3f2c9a8e-1b4d-4c6e-9f0a-7d5e3b1c2a90"


@pytest.fixture()
def user_b() -> str:
    return "8c1e5d7a-2f3b-4a9c-b6d0-1e4f7a2c9b35"
