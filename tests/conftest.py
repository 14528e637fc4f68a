import pytest
from PyQt6.QtCore import QCoreApplication, QEventLoop, QTimer

from barreplay.data.models import Bar


@pytest.fixture(scope="session")
def qapp():
    """QTimer needs an event dispatcher; QCoreApplication is enough (no display)."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def spin(qapp):
    """spin(ms): run the Qt event loop for ``ms`` milliseconds."""
    def _spin(ms: int) -> None:
        loop = QEventLoop()
        QTimer.singleShot(ms, loop.quit)
        loop.exec()
    return _spin


def make_bars(closes, start=1_700_000_000, step=60):
    return [
        Bar(time=start + i * step, open=c, high=c + 1, low=c - 1, close=c, volume=100.0)
        for i, c in enumerate(closes)
    ]


@pytest.fixture
def bars10():
    return make_bars([float(i) for i in range(1, 11)])
