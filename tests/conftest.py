"""Root test configuration: remove SQLite files a test run may leave in the project root"""

from pathlib import Path

import pytest


_STRAY_DATABASES = [Path(__file__).parent.parent / name for name in ("modcontent.db", "test.db")]


@pytest.fixture(scope="session", autouse=True)
def remove_stray_databases():
    yield
    for path in _STRAY_DATABASES:
        path.unlink(missing_ok=True)
