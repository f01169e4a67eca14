# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError


def describe_pydantic_errors(exc: PydanticValidationError) -> list[str]:
    """One human-readable line per failed field, in submission order."""
    lines: list[str] = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part is not None)
        # "Value error, Enter a valid email" -> "Enter a valid email"
        text = str(error.get("msg", "")).removeprefix("Value error, ")
        lines.append(f"{field}: {text}" if field else text)
    return lines


__all__ = ["describe_pydantic_errors"]
