# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Error taxonomy.

Each error carries a stable machine ``code``, the HTTP ``status`` it maps to
and an optional ``context`` mapping. The text shown to users comes from the
class-level ``public_message`` so it never depends on runtime data.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, ClassVar


@dataclass(slots=True)
class AppError(Exception):
    code: str
    status: HTTPStatus
    context: Mapping[str, Any] | None = None

    public_message: ClassVar[str] = "Something went wrong"

    def __post_init__(self) -> None:
        Exception.__init__(self, self.code)

    @property
    def message(self) -> str:
        return type(self).public_message

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.code, "message": self.message}
        if self.context:
            body["context"] = dict(self.context)
        return body


class DomainError(AppError):
    """Business rule violations; subclasses pin ``error_code`` and ``error_status``."""

    error_code: ClassVar[str] = "domain_error"
    error_status: ClassVar[HTTPStatus] = HTTPStatus.BAD_REQUEST

    def __init__(self, *, context: Mapping[str, Any] | None = None) -> None:
        cls = type(self)
        super().__init__(code=cls.error_code, status=cls.error_status, context=context)


class InfrastructureError(AppError):
    public_message = "Something went wrong, please try again later"

    def __init__(
        self,
        code: str = "infrastructure_error",
        *,
        status: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(code=code, status=status, context=context)

    def to_dict(self) -> dict[str, Any]:
        # context is for the logs only
        return {"error": self.code, "message": self.message}


class ValidationError(AppError):
    public_message = "Please check the submitted fields"

    def __init__(
        self, code: str = "validation_error", *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(code=code, status=HTTPStatus.UNPROCESSABLE_ENTITY, context=context)


class StoreUnavailableError(InfrastructureError):
    def __init__(self, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(
            "store_unavailable", status=HTTPStatus.SERVICE_UNAVAILABLE, context=context
        )


class HashingError(InfrastructureError):
    def __init__(self, context: Mapping[str, Any] | None = None) -> None:
        super().__init__("hashing_error", context=context)


class UploadRejectedError(ValidationError):
    public_message = "The uploaded image was rejected"

    def __init__(self, reason: str) -> None:
        super().__init__("upload_rejected", context={"reason": reason})
