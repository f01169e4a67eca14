# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from .services.auth_service import AuthService
from .services.session_manager import SessionManager
from .use_cases.users.register_user import ImageUpload, RegisterCommand

__all__ = [
    "AuthService",
    "ImageUpload",
    "RegisterCommand",
    "SessionManager",
]
