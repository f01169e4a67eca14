from __future__ import annotations

import os
import tempfile
from pathlib import Path

_TMP = Path(tempfile.mkdtemp(prefix="authapp-tests-"))

os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TMP / 'test.db'}")
os.environ.setdefault("UPLOAD_DIR", str(_TMP / "uploads"))
os.environ.setdefault("LOG_FILE", str(_TMP / "app.log"))
os.environ.setdefault("ENABLE_RATE_LIMIT", "false")
os.environ.setdefault("ENABLE_CSRF", "false")
os.environ.setdefault("APP_ENV", "test")

import pytest  # noqa: E402


@pytest.fixture()
def reset_database():
    from authapp.infrastructure.db import ENGINE, Base
    from authapp.infrastructure.db import models  # noqa: F401

    Base.metadata.drop_all(bind=ENGINE)
    Base.metadata.create_all(bind=ENGINE)
    yield
    Base.metadata.drop_all(bind=ENGINE)


@pytest.fixture()
def upload_dir() -> Path:
    return Path(os.environ["UPLOAD_DIR"])
