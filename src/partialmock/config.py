"""Runtime configuration for partialmock.

Explicit values passed to :func:`configure` take precedence over the
``PARTIALMOCK_*`` environment variables, which are read at use time.
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass

logger = logging.getLogger(__name__)

METHOD_PLACEHOLDER = "<meth>"
DEFAULT_BACKUP_PATTERN = "saved method <meth>"
TEST_CASE_BACKUP_PATTERN = "original <meth>"

REENTRANT_REJECT = "reject"
REENTRANT_ALLOW = "allow"
_REENTRANT_POLICIES = {REENTRANT_REJECT, REENTRANT_ALLOW}


@dataclass
class _Config:
    backup_pattern: str | None = None
    reentrant_calls: str | None = None


_config = _Config()
_config_lock = threading.Lock()


def validate_backup_pattern(pattern: str) -> str:
    if not isinstance(pattern, str) or METHOD_PLACEHOLDER not in pattern:
        raise ValueError(
            f"backup pattern must be a string containing {METHOD_PLACEHOLDER!r}: {pattern!r}"
        )
    return pattern


def configure(
    backup_pattern: str | None = None,
    reentrant_calls: str | None = None,
) -> None:
    """Configure partialmock.

    Args:
        backup_pattern: Naming pattern for backup keys; must contain ``<meth>``.
        reentrant_calls: ``"reject"`` to raise on nested caller-scoped mock
            calls, ``"allow"`` to let them run with a single shared call context.
    """
    if backup_pattern is not None:
        validate_backup_pattern(backup_pattern)
    if reentrant_calls is not None:
        reentrant_calls = reentrant_calls.strip().lower()
        if reentrant_calls not in _REENTRANT_POLICIES:
            raise ValueError("reentrant_calls must be 'reject' or 'allow'")
    with _config_lock:
        if backup_pattern is not None:
            _config.backup_pattern = backup_pattern
        if reentrant_calls is not None:
            _config.reentrant_calls = reentrant_calls


def reset_config() -> None:
    """Forget every value set through :func:`configure`."""
    with _config_lock:
        _config.backup_pattern = None
        _config.reentrant_calls = None


def resolve_backup_pattern() -> str:
    if _config.backup_pattern is not None:
        return _config.backup_pattern

    env_value = os.getenv("PARTIALMOCK_BACKUP_PATTERN")
    if env_value is not None:
        try:
            return validate_backup_pattern(env_value)
        except ValueError:
            logger.warning(
                "Ignoring invalid PARTIALMOCK_BACKUP_PATTERN=%r; using default %r",
                env_value,
                DEFAULT_BACKUP_PATTERN,
            )
    return DEFAULT_BACKUP_PATTERN


def resolve_reject_reentrant() -> bool:
    if _config.reentrant_calls is not None:
        return _config.reentrant_calls == REENTRANT_REJECT

    env_value = os.getenv("PARTIALMOCK_REENTRANT_CALLS")
    if env_value is not None:
        policy = env_value.strip().lower()
        if policy in _REENTRANT_POLICIES:
            return policy == REENTRANT_REJECT
        logger.warning(
            "Ignoring invalid PARTIALMOCK_REENTRANT_CALLS=%r; rejecting reentrant calls",
            env_value,
        )
    return True
