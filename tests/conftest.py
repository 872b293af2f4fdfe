import pytest


class ScriptedRoller:
    """Deterministic roller returning preset values and recording each die size."""

    def __init__(self, values):
        self.values = list(values)
        self.sides_seen = []

    def roll(self, sides):
        self.sides_seen.append(sides)
        value = self.values.pop(0)
        assert 1 <= value <= sides
        return value


@pytest.fixture
def scripted():
    return ScriptedRoller
