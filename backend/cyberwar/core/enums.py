# =============================================================================
# Cyber Wargame Engine - Enumerations
# =============================================================================
"""
All enumeration types used throughout the game.
These define the discrete values for game elements.
"""

from enum import Enum, auto


class PlayerRole(Enum):
    """
    The two opposing roles in the game.
    """
    ATTACKER = auto()   # Red team - tries to break the network
    DEFENDER = auto()   # Blue team - protects the network

    def __str__(self) -> str:
        return self.name.lower()

    @property
    def opponent(self) -> 'PlayerRole':
        """Return the opposing role"""
        if self == PlayerRole.ATTACKER:
            return PlayerRole.DEFENDER
        return PlayerRole.ATTACKER

    @classmethod
    def parse(cls, value: str) -> 'PlayerRole':
        """Parse a role name case-insensitively"""
        return cls[value.strip().upper()]


class Criticality(Enum):
    """
    Importance tier of a network node.
    """
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: str) -> 'Criticality':
        """Accept either the display value ("High") or the member name ("HIGH")"""
        for member in cls:
            if value == member.value or value.upper() == member.name:
                return member
        raise ValueError(f"Unknown criticality: {value}")


class MoveKind(Enum):
    """
    Discriminant of a move: every move is either an attack or a defense.
    """
    ATTACK = "attack"
    DEFENSE = "defense"

    def __str__(self) -> str:
        return self.value

    @property
    def role(self) -> PlayerRole:
        """The only role allowed to play this kind of move"""
        if self == MoveKind.ATTACK:
            return PlayerRole.ATTACKER
        return PlayerRole.DEFENDER


class SecondaryEffect(Enum):
    """
    Extra effect some defense types carry on top of protection and boost.
    """
    NONE = "none"
    RESTORE = "restore"     # Recover attacked nodes that are now protected
    HARDEN = "harden"       # Strengthen owned defenses of the same type

    def __str__(self) -> str:
        return self.value


class ConfidenceLevel(Enum):
    """
    Labels used by the predictor and the odds estimator.
    """
    VERY_HIGH = "Very High"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
    VERY_LOW = "Very Low"

    def __str__(self) -> str:
        return self.value
