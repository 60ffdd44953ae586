# =============================================================================
# Cyber Wargame Engine - Core Data Structures
# =============================================================================
"""
Core data structures for representing game elements.
These are the fundamental building blocks of the game state.
"""

import os
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Set, Union

from .enums import Criticality, MoveKind, PlayerRole, SecondaryEffect


# =============================================================================
# Network Node
# =============================================================================

@dataclass
class NetworkNode:
    """
    Represents a single node in the network topology.

    Attributes:
        name: Display name, unique within a topology
        criticality: Importance tier of the node
        vulnerabilities: Attack type tags the node is exposed to
        protections: Protection tags a defense must cover to protect the node
        protected: Whether a defense currently covers the node
        attacked: Whether an attack has struck the node
    """
    name: str
    criticality: Criticality = Criticality.MEDIUM
    vulnerabilities: Set[str] = field(default_factory=set)
    protections: Set[str] = field(default_factory=set)
    protected: bool = False
    attacked: bool = False

    @property
    def is_critical(self) -> bool:
        """Check if this is a critical objective node"""
        return self.criticality == Criticality.CRITICAL

    def is_target_for(self, attack_type: str) -> bool:
        """An attack strikes unprotected nodes vulnerable to its type"""
        return not self.protected and attack_type in self.vulnerabilities

    def clone(self) -> 'NetworkNode':
        """Create a deep copy of this node"""
        return NetworkNode(
            name=self.name,
            criticality=self.criticality,
            vulnerabilities=set(self.vulnerabilities),
            protections=set(self.protections),
            protected=self.protected,
            attacked=self.attacked,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "name": self.name,
            "criticality": self.criticality.value,
            "vulnerabilities": sorted(self.vulnerabilities),
            "protections": sorted(self.protections),
            "protected": self.protected,
            "attacked": self.attacked,
        }


# =============================================================================
# Move Definitions
# =============================================================================

@dataclass
class AttackDefinition:
    """
    Catalog entry describing an attack.
    """
    id: str
    name: str
    type: str
    cost: int = 0
    success_rate: float = 0.0

    kind = MoveKind.ATTACK

    def clone(self) -> 'AttackDefinition':
        """Create a copy of this attack"""
        return AttackDefinition(
            id=self.id,
            name=self.name,
            type=self.type,
            cost=self.cost,
            success_rate=self.success_rate,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "kind": self.kind.value,
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "cost": self.cost,
            "success_rate": self.success_rate,
        }


@dataclass
class DefenseDefinition:
    """
    Catalog entry describing a defense.

    ``effectiveness`` maps an attack type to how well this defense counters
    it (0.0 - 1.0). Deployed copies of a definition may be hardened during a
    game; the catalog entry itself stays untouched.
    """
    id: str
    name: str
    type: str
    cost: int = 0
    security_boost: float = 0.0
    coverage: Set[str] = field(default_factory=set)
    effectiveness: Dict[str, float] = field(default_factory=dict)
    secondary_effect: SecondaryEffect = SecondaryEffect.NONE

    kind = MoveKind.DEFENSE

    def effectiveness_against(self, attack_type: str) -> float:
        """Effectiveness against an attack type (0.0 when not listed)"""
        return self.effectiveness.get(attack_type, 0.0)

    def covers(self, node: NetworkNode) -> bool:
        """Check if this defense protects a node"""
        return bool(self.coverage & node.protections)

    def clone(self) -> 'DefenseDefinition':
        """Create a deep copy of this defense"""
        return DefenseDefinition(
            id=self.id,
            name=self.name,
            type=self.type,
            cost=self.cost,
            security_boost=self.security_boost,
            coverage=set(self.coverage),
            effectiveness=dict(self.effectiveness),
            secondary_effect=self.secondary_effect,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "kind": self.kind.value,
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "cost": self.cost,
            "security_boost": self.security_boost,
            "coverage": sorted(self.coverage),
            "effectiveness": dict(self.effectiveness),
            "secondary_effect": self.secondary_effect.value,
        }


MoveDefinition = Union[AttackDefinition, DefenseDefinition]


@dataclass(frozen=True)
class Move:
    """
    A move request: an explicit kind plus the catalog id to play.
    """
    kind: MoveKind
    move_id: str

    @classmethod
    def attack(cls, move_id: str) -> 'Move':
        return cls(MoveKind.ATTACK, move_id)

    @classmethod
    def defense(cls, move_id: str) -> 'Move':
        return cls(MoveKind.DEFENSE, move_id)

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.move_id}"


# =============================================================================
# Player State
# =============================================================================

@dataclass
class PlayerState:
    """
    Represents the state of a player (attacker or defender).

    ``history`` holds per-state copies of every move played, oldest first.
    For the defender it doubles as the list of owned (deployed) defenses.
    """
    role: PlayerRole
    resources: int = 0
    available_moves: Set[str] = field(default_factory=set)
    history: List[MoveDefinition] = field(default_factory=list)

    @property
    def last_move(self) -> Optional[MoveDefinition]:
        """The most recent move, or None before the first one"""
        return self.history[-1] if self.history else None

    def can_afford(self, cost: int) -> bool:
        """Check if player can afford a move"""
        return self.resources >= cost

    def spend_resources(self, cost: int):
        """Deduct resources for a move"""
        self.resources = max(0, self.resources - cost)

    def grant_resources(self, amount: int):
        """Add the per-turn stipend"""
        self.resources += max(0, amount)

    def recent_types(self, count: int) -> List[str]:
        """Types of the last ``count`` moves, oldest first"""
        return [move.type for move in self.history[-count:]] if count > 0 else []

    def clone(self) -> 'PlayerState':
        """Create a deep copy of this player state"""
        return PlayerState(
            role=self.role,
            resources=self.resources,
            available_moves=set(self.available_moves),
            history=[move.clone() for move in self.history],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        last = self.last_move
        return {
            "role": self.role.name,
            "resources": self.resources,
            "available_moves": sorted(self.available_moves),
            "history": [move.id for move in self.history],
            "last_move": last.to_dict() if last else None,
        }


# =============================================================================
# Game Configuration
# =============================================================================

@dataclass
class GameConfig:
    """
    Configuration settings for a game instance.
    """
    # Security bounds
    max_security: float = 10.0
    min_security: float = 0.0
    critical_node_penalty: float = 0.8
    security_decay: float = 0.1

    # Resource settings
    initial_attacker_resources: int = 20
    initial_defender_resources: int = 15
    attacker_income: int = 1
    defender_income: int = 2

    # Victory conditions
    high_security_threshold: float = 8.0
    security_midpoint: float = 5.0
    min_turns_for_defense_win: int = 10

    # AI settings
    search_depth: int = 3
    history_limit: int = 50

    # Defense secondary effects
    restore_per_node: float = 0.5
    hardening_multiplier: float = 1.2
    legacy_catalog_mutation: bool = False

    ENV_PREFIX = "CYBERWAR_"

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> 'GameConfig':
        """
        Build a config from CYBERWAR_* environment variables.
        Unset variables keep their defaults.
        """
        environ = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}
        for f in fields(cls):
            raw = environ.get(cls.ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            if f.type in (bool, "bool"):
                overrides[f.name] = raw.strip().lower() in ("1", "true", "yes", "on")
            elif f.type in (int, "int"):
                overrides[f.name] = int(raw)
            else:
                overrides[f.name] = float(raw)
        return cls(**overrides)

    def clamp_security(self, value: float) -> float:
        """Keep a security level inside [min_security, max_security]"""
        return max(self.min_security, min(self.max_security, value))

    def income_for(self, role: PlayerRole) -> int:
        if role == PlayerRole.ATTACKER:
            return self.attacker_income
        return self.defender_income

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {f.name: getattr(self, f.name) for f in fields(self)}


# =============================================================================
# Move Outcomes
# =============================================================================

@dataclass
class AttackOutcome:
    """
    Result of resolving an attack.
    ``security_after`` is the level right after damage, before housekeeping.
    """
    attack: AttackDefinition
    damage: float
    vulnerability_modifier: float
    target_nodes: List[str] = field(default_factory=list)
    critical_hit: bool = False
    security_after: float = 0.0

    kind = MoveKind.ATTACK

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "kind": self.kind.value,
            "id": self.attack.id,
            "name": self.attack.name,
            "type": self.attack.type,
            "cost": self.attack.cost,
            "damage": round(self.damage, 2),
            "vulnerability_modifier": self.vulnerability_modifier,
            "target_nodes": list(self.target_nodes),
            "critical_hit": self.critical_hit,
            "security_after": round(self.security_after, 2),
        }


@dataclass
class DefenseOutcome:
    """
    Result of resolving a defense.
    ``security_after`` is the level right after the boost, before housekeeping.
    """
    defense: DefenseDefinition
    boost: float
    protected_nodes: List[str] = field(default_factory=list)
    restored: float = 0.0
    hardened: List[str] = field(default_factory=list)
    security_after: float = 0.0

    kind = MoveKind.DEFENSE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "kind": self.kind.value,
            "id": self.defense.id,
            "name": self.defense.name,
            "type": self.defense.type,
            "cost": self.defense.cost,
            "boost": round(self.boost, 2),
            "protected_nodes": list(self.protected_nodes),
            "restored": round(self.restored, 2),
            "hardened": list(self.hardened),
            "security_after": round(self.security_after, 2),
        }


MoveOutcome = Union[AttackOutcome, DefenseOutcome]
