"""
Combat events and the listener interface.

The resolvers and the encounter loop report what happens through a
CombatListener. Listeners are registered explicitly; there is no global
event bus.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class EventType(Enum):
    """Enumeration of combat event types."""

    COMBAT_START = "combat_start"
    COMBAT_END = "combat_end"
    TURN_START = "turn_start"
    ACTOR_READY = "actor_ready"
    DECISION = "decision"
    ATTACK = "attack"
    SKILL = "skill"
    MOVE = "move"
    WAIT = "wait"
    REGENERATION = "regeneration"
    DEATH = "death"
    ROUND_CAPPED = "round_capped"


class CombatEvent(BaseModel):
    """Base class for all combat events."""

    event_type: EventType = Field(description="The type of the event.")
    turn: int = Field(default=0, description="Turn during which the event happened.")
    actor: Any = Field(default=None, description="The combatant that caused the event.")


class CombatStartEvent(CombatEvent):
    event_type: EventType = EventType.COMBAT_START
    combatants: list[Any] = Field(default_factory=list)


class CombatEndEvent(CombatEvent):
    event_type: EventType = EventType.COMBAT_END
    winner: str = Field(description="'A', 'B' or 'draw'.")
    combatants: list[Any] = Field(default_factory=list)


class TurnStartEvent(CombatEvent):
    event_type: EventType = EventType.TURN_START


class ActorReadyEvent(CombatEvent):
    event_type: EventType = EventType.ACTOR_READY
    energy: int = Field(description="Energy accumulated by the actor.")
    delay: int = Field(description="Energy needed to act.")


class DecisionEvent(CombatEvent):
    """The AI picked a goal and an action."""

    event_type: EventType = EventType.DECISION
    goal: str = Field(description="Name of the goal that won.")
    action: str = Field(description="Kind of action chosen.")
    reasoning: str = Field(default="", description="Why the action was chosen.")
    scores: dict[str, float] = Field(default_factory=dict)


class AttackEvent(CombatEvent):
    event_type: EventType = EventType.ATTACK
    target: Any = Field(description="The defender.")
    result: Any = Field(description="The AttackResult.")


class SkillEvent(CombatEvent):
    event_type: EventType = EventType.SKILL
    target: Any = Field(description="The target of the skill.")
    result: Any = Field(description="The SkillResult.")


class MoveEvent(CombatEvent):
    event_type: EventType = EventType.MOVE
    origin: tuple[int, int]
    destination: tuple[int, int]
    moved: bool = Field(default=True, description="False when the step was blocked.")


class WaitEvent(CombatEvent):
    event_type: EventType = EventType.WAIT
    reason: str = ""


class RegenerationEvent(CombatEvent):
    event_type: EventType = EventType.REGENERATION
    health: int = 0
    willpower: int = 0


class DeathEvent(CombatEvent):
    event_type: EventType = EventType.DEATH
    killer: Any = None


class RoundCappedEvent(CombatEvent):
    event_type: EventType = EventType.ROUND_CAPPED
    iterations: int = 0


class CombatListener:
    """Receives combat events. Subclasses override the hooks they need."""

    def on_event(self, event: CombatEvent) -> None:
        handler = getattr(self, f"on_{event.event_type.value}", None)
        if handler is not None:
            handler(event)


class EventDispatcher:
    """Fans events out to the registered listeners."""

    def __init__(self, listeners: list[CombatListener] | None = None) -> None:
        self.listeners: list[CombatListener] = list(listeners or [])

    def subscribe(self, listener: CombatListener) -> None:
        self.listeners.append(listener)

    @property
    def active(self) -> bool:
        return bool(self.listeners)

    def emit(self, event: CombatEvent) -> None:
        for listener in list(self.listeners):
            listener.on_event(event)
