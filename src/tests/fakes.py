"""Test doubles."""


class ScriptedRandom:
    """Random source returning preset values; the last one repeats."""

    def __init__(self, *values: float):
        self.values = list(values) or [0.5]
        self.calls = 0

    def random(self) -> float:
        value = self.values[min(self.calls, len(self.values) - 1)]
        self.calls += 1
        return value


# random() values that force an outcome for any failure rate strictly between 0 and 100
SUCCEED = 0.999
FAIL = 0.0
