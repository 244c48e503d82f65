import random

from otpad.errors import EntropyUnavailable


def random_split_bytes(data: bytes, seed: int = 0) -> list[bytes]:
    """Split data into chunks of random size (including empty chunks)."""
    rng = random.Random(seed)
    chunks = []
    i = 0
    while i < len(data):
        n = rng.randint(0, 11)
        chunks.append(data[i : i + n])
        i += n
    return chunks


class CounterPadSource:
    """Deterministic pad source returning start, start+1, ..."""

    def __init__(self, start: int = 1):
        self.next = start
        self.drawn = []

    def next_word(self) -> int:
        word = self.next & 0xFFFFFFFFFFFFFFFF
        self.next += 1
        self.drawn.append(word)
        return word


class FailingPadSource(CounterPadSource):
    """Counter source whose draw number ``fail_at`` (0-based) fails."""

    def __init__(self, fail_at: int = 0):
        super().__init__()
        self.fail_at = fail_at
        self.calls = 0

    def next_word(self) -> int:
        call = self.calls
        self.calls += 1
        if call == self.fail_at:
            raise EntropyUnavailable("simulated generator failure")
        return super().next_word()
