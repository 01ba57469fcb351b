"""
Decision context, memory and actions of the AI.

The engine builds a fresh AIContext for every decision: a read-only view of
the acting combatant, what it can see and the oracles it may query. State
that must survive between decisions lives in AIMemory.
"""

from __future__ import annotations

import math
import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property

from pitsim.character.combatant import Combatant
from pitsim.character.definitions import AttackDefinition, SkillDefinition
from pitsim.core.utils import Cell, chebyshev_distance, step_away
from pitsim.pathfinding.astar import find_path
from pitsim.pathfinding.grid import BlockedFn, WalkableFn

# Can `observer` see `target`?
VisibilityFn = Callable[[Combatant, Combatant], bool]

# Directions in circular order, used to try alternatives around a blocked step.
_RING: tuple[Cell, ...] = ((1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1), (1, -1))


def always_visible(observer: Combatant, target: Combatant) -> bool:
    return True


def within_vision_range(observer: Combatant, target: Combatant) -> bool:
    return observer.distance_to(target) <= observer.vision_range


class ActionKind(Enum):
    ATTACK = "attack"
    SKILL = "skill"
    MOVE = "move"
    WAIT = "wait"


@dataclass(frozen=True)
class AIAction:
    """The action chosen by a goal."""

    kind: ActionKind
    reasoning: str = ""
    target: Combatant | None = None
    attack: AttackDefinition | None = None
    skill: SkillDefinition | None = None
    destination: Cell | None = None

    @staticmethod
    def wait(reasoning: str) -> AIAction:
        return AIAction(ActionKind.WAIT, reasoning)

    @staticmethod
    def move(destination: Cell, reasoning: str) -> AIAction:
        return AIAction(ActionKind.MOVE, reasoning, destination=destination)


@dataclass(frozen=True)
class CombatOption:
    """An attack or a skill the actor could use, with its reach."""

    attack: AttackDefinition | None = None
    skill: SkillDefinition | None = None

    @property
    def name(self) -> str:
        if self.attack is not None:
            return self.attack.name
        return self.skill.name if self.skill is not None else "?"

    @property
    def range(self) -> int:
        if self.attack is not None:
            return self.attack.reach
        return self.skill.range if self.skill is not None else 0

    def reaches(self, actor: Combatant, target: Combatant) -> bool:
        if self.attack is not None:
            return actor.can_attack(target, self.attack)
        return self.skill is not None and actor.can_use_skill_on(target, self.skill)

    def estimate_damage(self, actor: Combatant) -> float:
        """Rough average damage, only used to judge finishing shots."""
        if self.skill is not None:
            return 3.5 + max(0, actor.will)
        bonus = actor.strength if self.attack is not None and self.attack.is_melee else 0
        return 4 + bonus

    def to_action(self, target: Combatant, reasoning: str) -> AIAction:
        if self.attack is not None:
            return AIAction(ActionKind.ATTACK, reasoning, target=target, attack=self.attack)
        return AIAction(ActionKind.SKILL, reasoning, target=target, skill=self.skill)


@dataclass
class AIMemory:
    """Per-actor state carried from one decision to the next."""

    last_known_position: Cell | None = None
    turns_since_seen: int = 0
    search_turns_remaining: int = 0
    scoot_turns_remaining: int = 0
    scoot_safe_distance: int = 0
    # Set by the engine before scoring: the actor is in the middle of a scoot.
    scooting: bool = False
    history: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class AIContext:
    """Read-only snapshot handed to every goal."""

    actor: Combatant
    enemies: tuple[Combatant, ...]
    allies: tuple[Combatant, ...]
    memory: AIMemory
    is_walkable: WalkableFn
    is_blocked: BlockedFn
    rng: random.Random
    turn: int = 0

    # ---- Target ----

    @cached_property
    def target(self) -> Combatant | None:
        """Nearest visible enemy, first listed on ties."""
        if not self.enemies:
            return None
        return min(self.enemies, key=self.actor.distance_to)

    @property
    def target_visible(self) -> bool:
        return self.target is not None

    @property
    def distance_to_target(self) -> float:
        return self.actor.distance_to(self.target) if self.target is not None else math.inf

    @property
    def health_fraction(self) -> float:
        return self.actor.health_fraction

    @property
    def turns_since_seen(self) -> int:
        return self.memory.turns_since_seen

    @property
    def last_known_position(self) -> Cell | None:
        return self.memory.last_known_position

    @cached_property
    def lowest_health_enemy(self) -> Combatant | None:
        """Visible enemy with the least health, nearest on ties."""
        if not self.enemies:
            return None
        return min(self.enemies, key=lambda e: (e.current_health, self.actor.distance_to(e)))

    # ---- Capabilities ----

    @cached_property
    def ranged_options(self) -> tuple[CombatOption, ...]:
        options = []
        ranged = self.actor.ranged_attack
        if ranged is not None:
            options.append(CombatOption(attack=ranged))
        options.extend(CombatOption(skill=s) for s in self.actor.usable_ranged_skills)
        return tuple(options)

    @cached_property
    def melee_options(self) -> tuple[CombatOption, ...]:
        options = [CombatOption(attack=self.actor.melee_attack)]
        options.extend(CombatOption(skill=s) for s in self.actor.usable_melee_skills)
        return tuple(options)

    @property
    def has_ranged_capability(self) -> bool:
        return bool(self.ranged_options)

    def viable_options(self, options: Sequence[CombatOption], target: Combatant) -> list[CombatOption]:
        return [option for option in options if option.reaches(self.actor, target)]

    def pick(self, options: Sequence[CombatOption]) -> CombatOption:
        """Uniformly random choice among equally good options."""
        if len(options) == 1:
            return options[0]
        return options[self.rng.randrange(len(options))]

    # ---- Movement ----

    def is_free(self, cell: Cell) -> bool:
        return self.is_walkable(cell) and not self.is_blocked(cell)

    def free_neighbors(self) -> list[Cell]:
        x, y = self.actor.position
        return [(x + dx, y + dy) for dx, dy in _RING if self.is_free((x + dx, y + dy))]

    def flee_step(self, threat: Cell) -> Cell | None:
        """
        A free neighbouring cell that does not bring the actor closer to threat.

        The direct step away is tried first, then the directions 45 and 90
        degrees off it.

        Returns:
            Cell | None: None when cornered or standing on the threat.

        """
        direction = step_away(self.actor.position, threat)
        if direction == (0, 0):
            return None
        current = chebyshev_distance(self.actor.position, threat)
        index = _RING.index(direction)
        x, y = self.actor.position
        for offset in (0, 1, -1, 2, -2):
            dx, dy = _RING[(index + offset) % len(_RING)]
            cell = (x + dx, y + dy)
            if self.is_free(cell) and chebyshev_distance(cell, threat) >= current:
                return cell
        return None

    def path_step(self, goal: Cell) -> Cell | None:
        """First step of a shortest path to goal, None if unreachable."""
        path = find_path(self.actor.position, goal, self.is_walkable, self.is_blocked)
        step = path.first_step
        if step is None or not self.is_free(step):
            return None
        return step


def build_context(
    actor: Combatant,
    combatants: Sequence[Combatant],
    memory: AIMemory,
    is_walkable: WalkableFn,
    rng: random.Random,
    turn: int = 0,
    can_see: VisibilityFn = always_visible,
) -> AIContext:
    """
    Snapshots the battlefield from the point of view of actor.

    Args:
        actor (Combatant): The combatant about to act.
        combatants (Sequence[Combatant]): Everyone in the encounter.
        memory (AIMemory): The actor's memory.
        is_walkable (WalkableFn): Terrain oracle.
        rng (random.Random): The trial generator.
        turn (int): Current turn.
        can_see (VisibilityFn): Visibility oracle.

    Returns:
        AIContext: The snapshot.

    """
    living = [c for c in combatants if c.is_alive and c is not actor]
    enemies = tuple(c for c in living if c.is_enemy_of(actor) and can_see(actor, c))
    allies = tuple(c for c in living if not c.is_enemy_of(actor))
    occupied = frozenset(c.position for c in living)
    return AIContext(
        actor=actor,
        enemies=enemies,
        allies=allies,
        memory=memory,
        is_walkable=is_walkable,
        is_blocked=occupied.__contains__,
        rng=rng,
        turn=turn,
    )
