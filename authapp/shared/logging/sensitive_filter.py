# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import re
from typing import Any

_REDACTED = "***REDACTED***"

_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"(secret[_-]?key\s*[:=]\s*['\"]?)[\w\-]{8,}", re.I), rf"\1{_REDACTED}"),
    (re.compile(r"(bearer\s+)[\w\-.]{20,}", re.I), rf"\1{_REDACTED}"),
    (re.compile(r"((?:token|session)\s*[:=]\s*['\"]?)[\w\-.]{20,}", re.I), rf"\1{_REDACTED}"),
    (re.compile(r"(password\s*[:=]\s*['\"]?)[^'\"\s,}]+", re.I), rf"\1{_REDACTED}"),
    (re.compile(r"\$argon2(?:id|i|d)?\$\S+"), "***DIGEST***"),
    (re.compile(r"((?:pbkdf2|scrypt):[^$\s]*\$)\S+"), r"\1***DIGEST***"),
    (re.compile(r"(\w+(?:\+\w+)?://[^:/\s]+:)[^@\s]+@"), rf"\1{_REDACTED}@"),
    (re.compile(r"[\w.%+-]+@([\w-]+(?:\.[\w-]+)*\.[a-z]{2,})", re.I), r"***@\1"),
    (re.compile(r"((?:authorization|cookie)\s*:\s*['\"]?)[^'\"]{10,}", re.I), rf"\1{_REDACTED}"),
)


def sanitize_message(message: str) -> str:
    for pattern, replacement in _RULES:
        message = pattern.sub(replacement, message)
    return message


def sanitize_record(record: dict[str, Any]) -> bool:
    """Loguru filter: scrub credentials, digests and emails before any sink sees them."""
    record["message"] = sanitize_message(record["message"])
    return True


__all__ = ["sanitize_message", "sanitize_record"]
