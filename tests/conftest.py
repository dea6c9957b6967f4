"""pytest configuration for ipdis tests."""

import io
import os
import socket
import stat

import pytest

from ipdis.core.rate_limiter import Clock
from ipdis.utils.logger import LogLevel, Logger, get_log_level, set_log_level


class FakeClock(Clock):
    """Clock moved by hand."""

    def __init__(self, start: float = 0.0):
        self.time = start

    def now(self) -> float:
        return self.time

    def advance(self, seconds: float) -> None:
        self.time += seconds


@pytest.fixture(autouse=True)
def restore_log_level():
    level = get_log_level()
    yield
    set_log_level(level)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def log_stream():
    return io.StringIO()


@pytest.fixture
def logger(log_stream):
    return Logger("test", min_level=LogLevel.DEBUG, stream=log_stream)


@pytest.fixture
def udp_socket():
    """Factory of localhost UDP sockets bound to ephemeral ports, closed at teardown."""
    sockets = []

    def make(timeout: float = 5.0) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        sock.bind(("127.0.0.1", 0))
        sock.settimeout(timeout)
        sockets.append(sock)
        return sock

    yield make
    for sock in sockets:
        sock.close()


@pytest.fixture
def make_script(tmp_path):
    """Factory writing executable inventory files."""

    def make(name: str, body: str, executable: bool = True):
        path = tmp_path / name
        path.write_text(body)
        if executable:
            os.chmod(path, os.stat(path).st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return make
