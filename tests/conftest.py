import datetime
import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtWidgets import QApplication  # noqa: E402

UTC = datetime.timezone.utc


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def at():
    def make(hour: int, minute: int = 0, day: int = 6, month: int = 1, year: int = 2025):
        return datetime.datetime(year, month, day, hour, minute, tzinfo=UTC)

    return make
