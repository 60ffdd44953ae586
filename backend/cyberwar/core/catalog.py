# =============================================================================
# Cyber Wargame Engine - Catalogs & Topology
# =============================================================================
"""
Attack/defense catalogs and the default network topology.

Catalogs are read-only reference data shared by every state of a session.
Raw entries (e.g. parsed JSON) go through ``load_catalog`` which coerces
missing numeric fields to 0 instead of failing.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .data_structures import (
    AttackDefinition, DefenseDefinition, GameConfig, NetworkNode, PlayerState
)
from .enums import Criticality, MoveKind, PlayerRole, SecondaryEffect
from .game_state import GameState

logger = logging.getLogger(__name__)


# =============================================================================
# Default Data
# =============================================================================

DEFAULT_ATTACKS: List[Dict[str, Any]] = [
    {"id": "dos", "name": "DDoS Attack", "type": "network", "cost": 3, "success_rate": 0.7},
    {"id": "sql", "name": "SQL Injection", "type": "application", "cost": 4, "success_rate": 0.6},
    {"id": "phishing", "name": "Phishing Campaign", "type": "social", "cost": 2, "success_rate": 0.8},
    {"id": "malware", "name": "Malware Deploy", "type": "system", "cost": 5, "success_rate": 0.5},
    {"id": "mitm", "name": "Man-in-Middle", "type": "network", "cost": 6, "success_rate": 0.4},
    {"id": "brute", "name": "Brute Force", "type": "authentication", "cost": 3, "success_rate": 0.6},
    {"id": "zero_day", "name": "Zero-Day Exploit", "type": "system", "cost": 8, "success_rate": 0.9},
]

DEFAULT_AVAILABLE_ATTACKS = ["dos", "sql", "phishing", "malware", "brute"]

DEFAULT_DEFENSES: List[Dict[str, Any]] = [
    {
        "id": "firewall", "name": "Firewall Rules", "type": "network",
        "cost": 3, "security_boost": 0.8, "coverage": ["network"],
        "effectiveness": {"network": 0.8, "application": 0.2},
    },
    {
        "id": "waf", "name": "Web Application Firewall", "type": "application",
        "cost": 4, "security_boost": 0.7, "coverage": ["application"],
        "effectiveness": {"application": 0.8, "network": 0.3},
    },
    {
        "id": "training", "name": "Security Awareness Training", "type": "social",
        "cost": 2, "security_boost": 0.5, "coverage": ["social"],
        "effectiveness": {"social": 0.7, "authentication": 0.3},
    },
    {
        "id": "endpoint", "name": "Endpoint Protection", "type": "system",
        "cost": 4, "security_boost": 0.6, "coverage": ["system"],
        "effectiveness": {"system": 0.7, "network": 0.1},
    },
    {
        "id": "mfa", "name": "Multi-Factor Authentication", "type": "authentication",
        "cost": 3, "security_boost": 0.6, "coverage": ["authentication"],
        "effectiveness": {"authentication": 0.9, "social": 0.4},
    },
    {
        "id": "backup", "name": "Backup & Recovery", "type": "recovery",
        "cost": 5, "security_boost": 0.4, "coverage": ["system", "application"],
        "effectiveness": {"system": 0.4, "application": 0.3},
        "secondary_effect": "restore",
    },
    {
        "id": "patching", "name": "Patch Management", "type": "system",
        "cost": 3, "security_boost": 0.3, "coverage": ["system", "application"],
        "effectiveness": {"system": 0.5, "application": 0.4},
        "secondary_effect": "harden",
    },
    {
        "id": "ids", "name": "Intrusion Detection", "type": "network",
        "cost": 5, "security_boost": 0.5, "coverage": ["network", "system"],
        "effectiveness": {"network": 0.6, "system": 0.5},
        "secondary_effect": "harden",
    },
]

DEFAULT_TOPOLOGY: List[Dict[str, Any]] = [
    {
        "name": "Web Server", "criticality": "High",
        "vulnerabilities": ["application", "network"],
    },
    {
        "name": "Database", "criticality": "Critical",
        "vulnerabilities": ["application", "system"],
    },
    {
        "name": "User Accounts", "criticality": "Medium",
        "vulnerabilities": ["social", "authentication"],
    },
]

# Same network with the Database already covered at the start
GUARDED_TOPOLOGY: List[Dict[str, Any]] = [
    dict(entry, protected=True) if entry["name"] == "Database" else dict(entry)
    for entry in DEFAULT_TOPOLOGY
]

TOPOLOGIES: Dict[str, List[Dict[str, Any]]] = {
    "default": DEFAULT_TOPOLOGY,
    "guarded": GUARDED_TOPOLOGY,
}


def get_topology(name: str) -> List[Dict[str, Any]]:
    """Look up a named topology"""
    try:
        return TOPOLOGIES[name]
    except KeyError:
        raise ValueError(f"Unknown topology: {name} (choose from {', '.join(TOPOLOGIES)})")


# =============================================================================
# Catalog
# =============================================================================

@dataclass
class Catalog:
    """
    Attack and defense definitions keyed by id, in catalog order.
    """
    attacks: Dict[str, AttackDefinition] = field(default_factory=dict)
    defenses: Dict[str, DefenseDefinition] = field(default_factory=dict)

    def get(self, kind: MoveKind, move_id: str):
        """Look up a definition by kind and id (None when unknown)"""
        if kind == MoveKind.ATTACK:
            return self.attacks.get(move_id)
        return self.defenses.get(move_id)

    def attacks_for(self, ids: Iterable[str]) -> List[AttackDefinition]:
        """Attack definitions for the given ids, in catalog order"""
        wanted = set(ids)
        return [a for a in self.attacks.values() if a.id in wanted]

    def defenses_for(self, ids: Iterable[str]) -> List[DefenseDefinition]:
        """Defense definitions for the given ids, in catalog order"""
        wanted = set(ids)
        return [d for d in self.defenses.values() if d.id in wanted]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "attacks": [a.to_dict() for a in self.attacks.values()],
            "defenses": [d.to_dict() for d in self.defenses.values()],
        }


def _number(entry: Mapping[str, Any], key: str, cast, kind: str):
    """Read a numeric field, treating a missing or malformed value as 0"""
    raw = entry.get(key)
    if raw is None:
        logger.warning("%s '%s' has no '%s'; using 0", kind, entry.get("id"), key)
        return cast(0)
    try:
        return cast(raw)
    except (TypeError, ValueError):
        logger.warning("%s '%s' has non-numeric '%s'=%r; using 0",
                       kind, entry.get("id"), key, raw)
        return cast(0)


def parse_attack(entry: Mapping[str, Any]) -> AttackDefinition:
    """Build an attack definition from a raw catalog entry"""
    return AttackDefinition(
        id=str(entry["id"]),
        name=str(entry.get("name", entry["id"])),
        type=str(entry.get("type", "")),
        cost=max(0, _number(entry, "cost", int, "attack")),
        success_rate=min(1.0, max(0.0, _number(entry, "success_rate", float, "attack"))),
    )


def parse_defense(entry: Mapping[str, Any]) -> DefenseDefinition:
    """Build a defense definition from a raw catalog entry"""
    effectiveness = {}
    for attack_type, value in (entry.get("effectiveness") or {}).items():
        try:
            effectiveness[attack_type] = min(1.0, max(0.0, float(value)))
        except (TypeError, ValueError):
            logger.warning("defense '%s' has non-numeric effectiveness for '%s'; using 0",
                           entry.get("id"), attack_type)
            effectiveness[attack_type] = 0.0

    return DefenseDefinition(
        id=str(entry["id"]),
        name=str(entry.get("name", entry["id"])),
        type=str(entry.get("type", "")),
        cost=max(0, _number(entry, "cost", int, "defense")),
        security_boost=max(0.0, _number(entry, "security_boost", float, "defense")),
        coverage=set(entry.get("coverage") or []),
        effectiveness=effectiveness,
        secondary_effect=SecondaryEffect(entry.get("secondary_effect", "none")),
    )


def parse_node(entry: Mapping[str, Any]) -> NetworkNode:
    """Build a node; protection tags default to the vulnerability tags"""
    vulnerabilities = set(entry.get("vulnerabilities") or [])
    protections = entry.get("protections")
    return NetworkNode(
        name=str(entry["name"]),
        criticality=Criticality.parse(str(entry.get("criticality", "Medium"))),
        vulnerabilities=vulnerabilities,
        protections=set(protections) if protections is not None else set(vulnerabilities),
        protected=bool(entry.get("protected", False)),
        attacked=bool(entry.get("attacked", False)),
    )


def load_catalog(
    raw_attacks: Optional[Iterable[Mapping[str, Any]]] = None,
    raw_defenses: Optional[Iterable[Mapping[str, Any]]] = None,
) -> Catalog:
    """
    Build a catalog from raw entries (defaults when omitted).
    """
    attacks = [parse_attack(e) for e in (DEFAULT_ATTACKS if raw_attacks is None else raw_attacks)]
    defenses = [parse_defense(e) for e in (DEFAULT_DEFENSES if raw_defenses is None else raw_defenses)]
    return Catalog(
        attacks={a.id: a for a in attacks},
        defenses={d.id: d for d in defenses},
    )


def new_game_state(
    config: Optional[GameConfig] = None,
    catalog: Optional[Catalog] = None,
    topology: Optional[Iterable[Mapping[str, Any]]] = None,
    available_attacks: Optional[Iterable[str]] = None,
    available_defenses: Optional[Iterable[str]] = None,
) -> GameState:
    """
    Create the initial state of a game.

    Args:
        config: Game configuration (defaults when omitted)
        catalog: Catalog the availability sets refer to
        topology: Raw node entries (default three-node network when omitted)
        available_attacks: Attack ids the attacker may use
        available_defenses: Defense ids the defender may use (all by default)

    Returns:
        A fresh state with the attacker to move
    """
    config = config or GameConfig()
    catalog = catalog or load_catalog()
    nodes = [parse_node(e) for e in (DEFAULT_TOPOLOGY if topology is None else topology)]

    if available_attacks is None:
        available_attacks = [a for a in DEFAULT_AVAILABLE_ATTACKS if a in catalog.attacks]
    if available_defenses is None:
        available_defenses = list(catalog.defenses)

    return GameState(
        security_level=config.max_security,
        nodes=nodes,
        attacker=PlayerState(
            role=PlayerRole.ATTACKER,
            resources=config.initial_attacker_resources,
            available_moves=set(available_attacks),
        ),
        defender=PlayerState(
            role=PlayerRole.DEFENDER,
            resources=config.initial_defender_resources,
            available_moves=set(available_defenses),
        ),
        current_player=PlayerRole.ATTACKER,
        turn=1,
        config=config,
    )
