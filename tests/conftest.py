import pytest
from PyQt6.QtCore import QCoreApplication, QEventLoop, QTimer

from rotatonator.core.data import RosterConfig
from rotatonator.core.signals import Signals

from helpers import FakeClock, Recorder


@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def spin(qapp):
    """Run the Qt event loop for a number of milliseconds."""

    def run(ms: int) -> None:
        loop = QEventLoop()
        QTimer.singleShot(ms, loop.quit)
        loop.exec()

    return run


@pytest.fixture
def signals(qapp):
    return Signals()


@pytest.fixture
def recorder(signals):
    return Recorder(signals)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def roster():
    return RosterConfig(healers=["Alice", "Bob", "Carol"], player_name="Bob", chain_interval=3.0)
