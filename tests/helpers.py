"""Test doubles shared across the test suite."""

import random


class FixedRandom(random.Random):
    """Random source whose damage jitter is always ``value``."""

    def __init__(self, value: int = 0) -> None:
        super().__init__()
        self.value = value

    def randrange(self, *args, **kwargs) -> int:
        return self.value


class ScriptedChoice:
    """Returns characters from pre-baked ids, one per ``choice`` call."""

    def __init__(self, *ids: str) -> None:
        self._chars = iter("".join(ids))

    def choice(self, seq):
        return next(self._chars)


class FakeSocket:
    """Stands in for a WebSocket; records everything sent to it."""

    def __init__(self, broken: bool = False) -> None:
        self.sent: list[dict] = []
        self.broken = broken

    async def send_json(self, data: dict) -> None:
        if self.broken:
            raise RuntimeError("Cannot call 'send' once a close message has been sent.")
        self.sent.append(data)

    def events(self, name: str | None = None) -> list[dict]:
        """Payloads received, optionally only for one event name."""
        return [m["data"] for m in self.sent if name is None or m["event"] == name]

    def names(self) -> list[str]:
        return [m["event"] for m in self.sent]

    def clear(self) -> None:
        self.sent.clear()
