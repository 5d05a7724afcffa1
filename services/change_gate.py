from __future__ import annotations

from models.records import Reading


class ChangeGate:
    """Forwards a reading only when its text differs from the last one written.

    ``last_written`` advances as soon as a reading is admitted, before the
    write is attempted; a failed write is not retried for the same value.
    """

    def __init__(self) -> None:
        self.last_written = ""

    def admit(self, reading: Reading) -> bool:
        if reading.text == self.last_written:
            return False
        self.last_written = reading.text
        return True
