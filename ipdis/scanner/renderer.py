"""
Terminal rendering of the beacon table.
"""

import sys
from typing import Iterable, Optional, TextIO

from colorama import Cursor, Fore, Style
from colorama.ansi import clear_screen

from ..core.data_models import BeaconAnswer

SPINNER_FRAMES = "⣾⣽⣻⢿⡿⣟⣯⣷"


def _printable(text: str) -> str:
    # JSON strings may carry lone surrogates
    return text.encode("utf-8", errors="backslashreplace").decode("utf-8")


class TableRenderer:
    """
    Redraws the whole table on every tick.

    Output looks like::

        ⣾ Looking for devices (2 found)
        ---
        192.168.1.10:
          - {"hostname":"kitchen"}
        ...
    """

    def __init__(self, stream: Optional[TextIO] = None, clear: bool = True):
        self.stream = stream
        self.clear = clear
        self._tick = 0

    def _out(self) -> TextIO:
        return self.stream if self.stream is not None else sys.stdout

    def _write(self, text: str = "") -> None:
        print(text, file=self._out())

    def render(self, beacons: Iterable[BeaconAnswer]) -> None:
        beacons = list(beacons)
        if self.clear:
            self._out().write(clear_screen() + Cursor.POS(1, 1))

        frame = SPINNER_FRAMES[self._tick % len(SPINNER_FRAMES)]
        self._tick += 1
        self._write(
            f"{Fore.BLUE}{frame}{Style.RESET_ALL} Looking for devices "
            f"{Style.DIM}({len(beacons)} found){Style.RESET_ALL}"
        )

        self._write("---")
        for beacon in beacons:
            self._write(f"{Style.BRIGHT}{beacon.addr}:{Style.RESET_ALL}")
            self._write(f"  - {_printable(str(beacon.payload))}")
        self._write("...")
        self._out().flush()
