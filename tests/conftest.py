import os
import tempfile

# Must be set before db/main are imported by any test module
_TMP = tempfile.mkdtemp(prefix="ace-exam-")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TMP}/exam-test.db")
os.environ.setdefault("EXAM_API_KEY", "test-key")

import pytest  # noqa: E402

from clock import FixedClock  # noqa: E402
from db import init_db  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def _schema():
    init_db()


@pytest.fixture
def clock():
    # 2026-01-01T00:00:00Z
    return FixedClock(1767225600000)
