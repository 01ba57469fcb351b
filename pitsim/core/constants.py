"""
Constants and enumerations for the simulator.

Defines the timing constants of the energy scheduler, the enumerations for
teams, damage types, attack kinds, item types and stats, and the colour
helpers used when printing them with rich markup.
"""

from enum import Enum

# ============================================================================
# TIMING
# ============================================================================

# Speed at which an action costs exactly its base delay.
AVERAGE_SPEED = 10
# Effective speed never drops below this value.
MIN_SPEED = 1
# No action can take less time than this, however fast the actor is.
MIN_DELAY = 6
# Base cost of a move, a wait, a skill or an attack with delay 1.0.
STANDARD_ACTION_DELAY = 10
# Hard cap on the number of actions processed in a single scheduler round.
MAX_ROUND_ITERATIONS = 1000

# ============================================================================
# REGENERATION
# ============================================================================

REGEN_THRESHOLD = 100
BASE_REGEN_RATE = 20
BASE_WP_REGEN_RATE = 10

# ============================================================================
# ENUMERATIONS
# ============================================================================


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.name.lower().capitalize()


class Team(NiceEnum):
    """The two sides of an encounter."""

    A = "A"
    B = "B"

    @property
    def color(self) -> str:
        """Returns the color string associated with this team."""
        return {
            Team.A: "bold blue",
            Team.B: "bold red",
        }.get(self, "dim white")

    @property
    def colored_name(self) -> str:
        return self.colorize(f"Team {self.value}")

    def colorize(self, message: str) -> str:
        """Applies team color formatting to a message."""
        return f"[{self.color}]{message}[/]"

    @property
    def opponent(self) -> "Team":
        return Team.B if self == Team.A else Team.A


class Winner(NiceEnum):
    """Outcome of a single trial."""

    A = "A"
    B = "B"
    DRAW = "draw"

    @staticmethod
    def from_team(team: Team) -> "Winner":
        return Winner.A if team == Team.A else Winner.B


class AttackType(NiceEnum):
    """Whether an attack is made in melee or at range."""

    MELEE = "Melee"
    RANGED = "Ranged"


class DamageType(NiceEnum):
    """Defines the types of damage an attack or skill can inflict."""

    BLUDGEONING = "Bludgeoning"
    SLASHING = "Slashing"
    PIERCING = "Piercing"
    POISON = "Poison"
    FIRE = "Fire"
    COLD = "Cold"
    NECROTIC = "Necrotic"

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this damage type."""
        return {
            DamageType.BLUDGEONING: "🔨",
            DamageType.SLASHING: "🗡️",
            DamageType.PIERCING: "🏹",
            DamageType.POISON: "☠️",
            DamageType.FIRE: "🔥",
            DamageType.COLD: "❄️",
            DamageType.NECROTIC: "💀",
        }.get(self, "❔")

    @property
    def color(self) -> str:
        """Returns the color string associated with this damage type."""
        return {
            DamageType.BLUDGEONING: "bold magenta",
            DamageType.SLASHING: "bold yellow",
            DamageType.PIERCING: "bold cyan",
            DamageType.POISON: "bold green",
            DamageType.FIRE: "bold red",
            DamageType.COLD: "bold blue",
            DamageType.NECROTIC: "bold white",
        }.get(self, "dim white")

    @property
    def colored_name(self) -> str:
        return self.colorize(self.display_name)

    def colorize(self, message: str) -> str:
        """Applies damage type color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class DamageModifier(NiceEnum):
    """How a defender's damage-type traits changed an incoming hit."""

    NONE = "none"
    IMMUNE = "immune"
    RESISTANT = "resistant"
    VULNERABLE = "vulnerable"

    def apply(self, damage: int) -> int:
        """
        Applies the modifier to a damage amount.

        Args:
            damage (int): The damage before the modifier.

        Returns:
            int: The damage after the modifier.

        """
        if self == DamageModifier.IMMUNE:
            return 0
        if self == DamageModifier.VULNERABLE:
            return damage * 2
        if self == DamageModifier.RESISTANT:
            return damage // 2
        return damage


class ItemType(NiceEnum):
    """Item categories found in the item data files."""

    WEAPON = "weapon"
    ARMOR = "armor"
    RING = "ring"
    AMMO = "ammo"
    POTION = "potion"
    SCROLL = "scroll"
    WAND = "wand"
    STAFF = "staff"

    @property
    def alias_prefix(self) -> str:
        """Prefix used by creature equipment lists (e.g. 'weapon_club')."""
        return f"{self.value}_"


class StatType(NiceEnum):
    """The four base attributes of a creature."""

    STRENGTH = "STRENGTH"
    AGILITY = "AGILITY"
    ENDURANCE = "ENDURANCE"
    WILL = "WILL"

    @property
    def short_name(self) -> str:
        """Returns the 3-letter abbreviation for the stat."""
        return {
            StatType.STRENGTH: "STR",
            StatType.AGILITY: "AGI",
            StatType.ENDURANCE: "END",
            StatType.WILL: "WIL",
        }.get(self, "UNK")

    @staticmethod
    def parse(name: str) -> "StatType | None":
        """
        Resolves a stat from either its full or abbreviated name.

        Args:
            name (str): The stat name, e.g. 'wil' or 'Strength'.

        Returns:
            StatType | None: The stat, or None if the name is unknown.

        """
        key = name.strip().upper()
        for stat in StatType:
            if key in (stat.name, stat.short_name):
                return stat
        return None
