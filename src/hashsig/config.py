"""
Selects the parameter preset used by default.

`HASHSIG_ENV` picks the preset behind every `TARGET_*` instance:

- `prod` (the default): 32-byte digests and up to 2^20 leaves per key.
- `test`: 16-byte digests and up to 2^10 leaves, so keys are small and the
  test suite stays fast. Such keys protect nothing.

The variable is read once, at import time.
"""

import os

_SUPPORTED_HASHSIG_ENVS: list[str] = ["prod", "test"]

HASHSIG_ENV = os.environ.get("HASHSIG_ENV", "prod").lower()
"""The active preset name, 'prod' or 'test'."""

if HASHSIG_ENV not in _SUPPORTED_HASHSIG_ENVS:
    raise ValueError(
        f"Invalid HASHSIG_ENV environment variable: '{HASHSIG_ENV}'. "
        f"Supported values: {_SUPPORTED_HASHSIG_ENVS}"
    )
