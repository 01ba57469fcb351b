"""
Fixtures shared by the whole test suite.
"""

import pytest

from pitsim.character.combatant import CombatantBlueprint
from pitsim.character.definitions import CreatureDefinition
from pitsim.core.config import BUNDLED_DATA_DIR
from pitsim.core.constants import Team
from pitsim.core.content import ContentRepository


class ScriptedRandom:
    """Stands in for random.Random and hands out queued values in order."""

    def __init__(self, ints=(), floats=()):
        self.ints = list(ints)
        self.floats = list(floats)

    def randint(self, a, b):
        value = self.ints.pop(0)
        if not a <= value <= b:
            raise AssertionError(f"scripted value {value} outside [{a}, {b}]")
        return value

    def randrange(self, stop):
        return 0

    def random(self):
        return self.floats.pop(0) if self.floats else 0.0


@pytest.fixture
def scripted_rng():
    """Factory for generators returning scripted dice."""
    return ScriptedRandom


@pytest.fixture
def repository():
    """The repository loaded with the bundled data files."""
    ContentRepository.reset()
    repo = ContentRepository(BUNDLED_DATA_DIR)
    yield repo
    ContentRepository.reset()


@pytest.fixture
def make_combatant():
    """Factory for combatants built from inline stats."""

    def factory(team=Team.A, position=(0, 0), items=(), skills=(), ammo=None, **stats):
        stats.setdefault("id", "dummy")
        stats.setdefault("name", "Dummy")
        creature = CreatureDefinition(**stats)
        blueprint = CombatantBlueprint(
            creature=creature,
            items=list(items),
            skills=list(skills),
            ammo=dict(ammo or {}),
        )
        return blueprint.spawn(team, position)

    return factory
