# =============================================================================
# Cyber Wargame Engine - Game State
# =============================================================================
"""
The complete game state representation.
This is the central data structure that captures everything about a game.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .data_structures import GameConfig, NetworkNode, PlayerState
from .enums import PlayerRole


@dataclass
class GameState:
    """
    Complete state of a game instance.

    The state is passive data: it is created by ``new_game_state`` and
    mutated only by the combat resolver. It is designed to be cheaply
    cloneable for AI search; a clone never shares a mutable node or player
    with its source.
    """

    # ==========================================================================
    # Network
    # ==========================================================================
    security_level: float = 10.0
    nodes: List[NetworkNode] = field(default_factory=list)

    # ==========================================================================
    # Players
    # ==========================================================================
    attacker: PlayerState = field(default_factory=lambda: PlayerState(PlayerRole.ATTACKER))
    defender: PlayerState = field(default_factory=lambda: PlayerState(PlayerRole.DEFENDER))
    current_player: PlayerRole = PlayerRole.ATTACKER

    # ==========================================================================
    # Progress
    # ==========================================================================
    turn: int = 1
    game_over: bool = False
    winner: Optional[PlayerRole] = None

    config: GameConfig = field(default_factory=GameConfig)

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def critical_nodes(self) -> List[NetworkNode]:
        """Get all critical objective nodes"""
        return [n for n in self.nodes if n.is_critical]

    @property
    def security_ratio(self) -> float:
        """Security level as a fraction of the maximum"""
        if self.config.max_security <= 0:
            return 0.0
        return self.security_level / self.config.max_security

    def get_player_state(self, role: PlayerRole) -> PlayerState:
        """Get state for a specific player role"""
        if role == PlayerRole.ATTACKER:
            return self.attacker
        return self.defender

    def get_current_player_state(self) -> PlayerState:
        """Get the state of the player about to move"""
        return self.get_player_state(self.current_player)

    def get_node(self, name: str) -> Optional[NetworkNode]:
        """Get a node by name"""
        for node in self.nodes:
            if node.name == name:
                return node
        return None

    def vulnerable_nodes(self, attack_type: str) -> List[NetworkNode]:
        """Unprotected nodes an attack of this type would strike"""
        return [n for n in self.nodes if n.is_target_for(attack_type)]

    def declare_winner(self, winner: PlayerRole):
        """Set the winner; game_over follows"""
        self.winner = winner
        self.game_over = True

    # ==========================================================================
    # Cloning & Serialization
    # ==========================================================================

    def clone(self) -> 'GameState':
        """
        Create a deep copy of the state for simulation.
        The config is shared since nothing mutates it during play.
        """
        return GameState(
            security_level=self.security_level,
            nodes=[n.clone() for n in self.nodes],
            attacker=self.attacker.clone(),
            defender=self.defender.clone(),
            current_player=self.current_player,
            turn=self.turn,
            game_over=self.game_over,
            winner=self.winner,
            config=self.config,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "turn": self.turn,
            "current_player": self.current_player.name,
            "network": {
                "security_level": round(self.security_level, 4),
                "max_security": self.config.max_security,
                "nodes": [n.to_dict() for n in self.nodes],
            },
            "attacker": self.attacker.to_dict(),
            "defender": self.defender.to_dict(),
            "game_over": self.game_over,
            "winner": self.winner.name if self.winner else None,
        }
