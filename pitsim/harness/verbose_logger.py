"""
Narration of trials, for troubleshooting balance.

The VerboseLogger listens to the combat events and prints every readiness
check, AI decision, roll, movement, regeneration and death. Turn headers
are printed lazily, only for turns in which something happened.
"""

from pitsim.character.combatant import Combatant
from pitsim.combat.events import (
    ActorReadyEvent,
    AttackEvent,
    CombatEndEvent,
    CombatListener,
    CombatStartEvent,
    DeathEvent,
    DecisionEvent,
    MoveEvent,
    RegenerationEvent,
    RoundCappedEvent,
    SkillEvent,
    TurnStartEvent,
    WaitEvent,
)
from pitsim.core.constants import DamageModifier, Team
from pitsim.core.utils import cprint, crule


def _signed(value: int) -> str:
    return f"+{value}" if value >= 0 else str(value)


class VerboseLogger(CombatListener):
    """Prints a play-by-play of each trial with rich markup."""

    def __init__(self) -> None:
        self.trial = 0
        self.current_turn = 0
        self.turn_header_printed = False

    def start_trial(self, number: int, seed: int) -> None:
        self.trial = number
        self.current_turn = 0
        self.turn_header_printed = False
        crule(f"⚔️  Fight {number} (seed {seed})", style="bold cyan")

    def _ensure_turn_header(self) -> None:
        if not self.turn_header_printed:
            cprint(f"\n[bold]-- Turn {self.current_turn} --[/]")
            self.turn_header_printed = True

    # ============================================================================
    # EVENT HOOKS
    # ============================================================================

    def on_combat_start(self, event: CombatStartEvent) -> None:
        for team in Team:
            cprint(f"\n{team.colored_name}:")
            for combatant in event.combatants:
                if combatant.team == team:
                    self._print_stats(combatant)

    def _print_stats(self, c: Combatant) -> None:
        attacks = ", ".join(f"{a.name} ({a.dice} {a.damage_type.value})" for a in c.attacks)
        cprint(f"  {c.colored_name}")
        cprint(f"    HP: {c.current_health}/{c.max_health}, WP: {c.current_willpower}/{c.max_willpower}")
        cprint(f"    STR: {c.strength}, AGI: {c.agility}, END: {c.endurance}, WIL: {c.will}")
        cprint(f"    Speed: {c.speed}, Armor: {c.armor}, Evasion: {c.evasion}")
        cprint(f"    Position: {c.position}")
        cprint(f"    Attacks: {attacks or 'none'}")
        if c.skills:
            cprint(f"    Skills: {', '.join(s.name for s in c.skills)}")
        for label, values in (
            ("Immunities", c.immunities),
            ("Resistances", c.resistances),
            ("Vulnerabilities", c.vulnerabilities),
        ):
            if values:
                cprint(f"    {label}: {', '.join(sorted(v.value for v in values))}")

    def on_turn_start(self, event: TurnStartEvent) -> None:
        if event.turn != self.current_turn:
            self.current_turn = event.turn
            self.turn_header_printed = False

    def on_actor_ready(self, event: ActorReadyEvent) -> None:
        self._ensure_turn_header()
        actor = event.actor
        cprint(f"\n[{actor.colored_name}] Ready (energy: {event.energy}, delay: {event.delay})")
        cprint(
            f"  HP: {actor.current_health}/{actor.max_health} {actor.health_bar()}, "
            f"WP: {actor.current_willpower}/{actor.max_willpower}"
        )

    def on_decision(self, event: DecisionEvent) -> None:
        cprint(f"  AI ({event.goal}): {event.reasoning}")

    def on_attack(self, event: AttackEvent) -> None:
        result = event.result
        cprint(f"  Attack: {result.attack_name} vs {event.target.colored_name}")
        verdict = "[bold green]HIT[/]" if result.hit else "[dim]MISS[/]"
        cprint(
            f"    Roll: 2d6{_signed(result.attack_modifier)} = {result.attack_roll} vs "
            f"2d6{_signed(result.defense_modifier)} = {result.defense_roll} → {verdict}"
        )
        if not result.hit:
            return
        bonus = f" + {result.damage_bonus} (STR)" if result.damage_bonus else ""
        armor = f" - {result.armor} (armor)" if result.armor else ""
        rolled = result.damage_dice or str(result.damage_rolled)
        line = f"rolled {rolled}{bonus}{armor} = {result.raw_damage}"
        if result.modifier != DamageModifier.NONE:
            line += f" → {result.final_damage} ({result.modifier.value})"
        cprint(f"    Damage: {line} {result.damage_type.colored_name}")
        if result.blocked:
            cprint("    [yellow]Blocked![/]")
        else:
            self._print_damage(event.target, result.applied_damage)

    def on_skill(self, event: SkillEvent) -> None:
        result = event.result
        cprint(
            f"  Skill: {result.skill_name} vs {event.target.colored_name} "
            f"({result.willpower_cost} WP, {result.willpower_remaining} remaining)"
        )
        if not result.success:
            cprint("    [dim]Missed[/]")
        if result.healed:
            cprint(f"    Heals {result.healed} HP")
        if result.final_damage > 0:
            line = f"{result.final_damage} {result.damage_type.colored_name}"
            if result.modifier != DamageModifier.NONE:
                line += f" ({result.modifier.value})"
            cprint(f"    Damage: {line}")
            self._print_damage(event.target, result.applied_damage)
        elif result.success:
            cprint("    (no damage)")

    def _print_damage(self, target: Combatant, damage: int) -> None:
        before = target.current_health + damage
        line = f"    → {target.colored_name} takes {damage} damage ({before} → {target.current_health}/{target.max_health} HP)"
        if not target.is_alive:
            line += " - [bold red]DIES![/]"
        cprint(line)

    def on_move(self, event: MoveEvent) -> None:
        if event.moved:
            cprint(f"  Move: {event.origin} → {event.destination}")
        else:
            cprint(f"  Move: {event.origin} → {event.destination} [yellow](blocked)[/]")

    def on_wait(self, event: WaitEvent) -> None:
        cprint(f"  Wait: {event.reason}")

    def on_regeneration(self, event: RegenerationEvent) -> None:
        parts = []
        if event.health:
            parts.append(f"+{event.health} HP")
        if event.willpower:
            parts.append(f"+{event.willpower} WP")
        cprint(f"  [green]Regen: {', '.join(parts)}[/]")

    def on_death(self, event: DeathEvent) -> None:
        killer = event.killer.colored_name if event.killer is not None else "?"
        cprint(f"  💀 {event.actor.colored_name} is slain by {killer}")

    def on_round_capped(self, event: RoundCappedEvent) -> None:
        cprint(f"  [bold red]Round stopped after {event.iterations} actions[/]")

    def on_combat_end(self, event: CombatEndEvent) -> None:
        if event.winner == "draw":
            cprint(f"\n[bold yellow]Draw after {event.turn} turns[/]")
        else:
            cprint(f"\n[bold]Winner: {Team(event.winner).colored_name} after {event.turn} turns[/]")
        for combatant in event.combatants:
            status = "alive" if combatant.is_alive else "dead"
            cprint(f"  {combatant.colored_name}: {combatant.current_health}/{combatant.max_health} HP ({status})")
