# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Audit trail for authentication events.

Every event goes to the application log; a copy is kept in ``audit_logs``
when the database accepts it. A failed insert never fails the request that
produced the event.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from authapp.shared.logging import logger

_SENSITIVE_KEYS = ("password", "token", "digest", "session", "secret", "key")


class AuditAction(str, Enum):
    REGISTER = "register"
    REGISTER_FAILED = "register_failed"
    LOGIN_SUCCESS = "login_success"
    LOGIN_FAILED = "login_failed"
    LOGIN_LOCKED = "login_locked"
    LOGOUT = "logout"
    SESSION_REVOKED = "session_revoked"


def _redact(details: dict[str, Any]) -> dict[str, Any]:
    return {
        key: "***REDACTED***" if any(word in key.lower() for word in _SENSITIVE_KEYS) else value
        for key, value in details.items()
    }


def _persist(
    action: AuditAction,
    user_id: int | None,
    ip_address: str | None,
    success: bool,
    details: dict[str, Any],
) -> None:
    from authapp.infrastructure.db.models import AuditLog
    from authapp.infrastructure.db.session import SessionLocal

    db = SessionLocal()
    try:
        db.add(
            AuditLog(
                timestamp=datetime.now(UTC),
                action=action.value,
                user_id=user_id,
                ip_address=ip_address,
                success=success,
                details_json=json.dumps(details, default=str) if details else None,
            )
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning(f"audit: could not store {action.value} ({type(exc).__name__})")
    finally:
        db.close()


def audit_log(
    action: AuditAction,
    user_id: int | None = None,
    ip_address: str | None = None,
    details: dict[str, Any] | None = None,
    success: bool = True,
) -> None:
    safe = _redact(details or {})
    line = f"AUDIT {action.value} user_id={user_id} ip={ip_address} success={success}"
    if safe:
        line += f" details={safe}"
    (logger.info if success else logger.warning)(line)
    _persist(action, user_id, ip_address, success, safe)


__all__ = ["AuditAction", "audit_log"]
