# =============================================================================
# Cyber Wargame Engine - Actions Module
# =============================================================================
"""
Handles move validation, execution, and effect resolution.
All game moves flow through MoveValidator -> CombatResolver.
"""

import logging
from typing import List, Optional, Tuple

from .catalog import Catalog
from .data_structures import (
    AttackDefinition, AttackOutcome, DefenseDefinition, DefenseOutcome,
    Move, MoveDefinition, MoveOutcome
)
from .enums import MoveKind, PlayerRole, SecondaryEffect
from .errors import (
    GameAlreadyOverError, InsufficientResourcesError, MoveNotAvailableError,
    OutOfTurnError, UnknownMoveError
)
from .game_state import GameState

logger = logging.getLogger(__name__)


# =============================================================================
# Move Validation
# =============================================================================

class MoveValidator:
    """
    Validates moves before execution.

    Checks, in order:
    - The game is still running
    - It is the mover's turn
    - The move id exists in the catalog for its kind
    - The move is in the mover's available set
    - The mover can afford it
    """

    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    def validate(self, state: GameState, move: Move) -> MoveDefinition:
        """
        Validate a move and return its catalog definition.

        Raises:
            GameAlreadyOverError, OutOfTurnError, UnknownMoveError,
            MoveNotAvailableError, InsufficientResourcesError
        """
        if state.game_over:
            raise GameAlreadyOverError("Game has ended", move.move_id)

        role = move.kind.role
        if state.current_player != role:
            raise OutOfTurnError(f"Not {role}'s turn", move.move_id)

        definition = self.catalog.get(move.kind, move.move_id)
        if definition is None:
            raise UnknownMoveError(f"Unknown {move.kind}: {move.move_id}", move.move_id)

        player = state.get_player_state(role)
        if move.move_id not in player.available_moves:
            raise MoveNotAvailableError(
                f"{definition.name} is not available to the {role}", move.move_id
            )

        if not player.can_afford(definition.cost):
            raise InsufficientResourcesError(
                f"Need {definition.cost} resources (have {player.resources})",
                move.move_id,
                required=definition.cost,
                available=player.resources,
            )

        return definition

    def legal_moves(self, state: GameState, role: PlayerRole) -> List[MoveDefinition]:
        """Affordable, available moves for a role, in catalog order"""
        if state.game_over:
            return []
        player = state.get_player_state(role)
        if role == PlayerRole.ATTACKER:
            candidates = self.catalog.attacks_for(player.available_moves)
        else:
            candidates = self.catalog.defenses_for(player.available_moves)
        return [m for m in candidates if player.can_afford(m.cost)]


# =============================================================================
# Combat Resolution
# =============================================================================

class CombatResolver:
    """
    Applies one validated move to a state, then runs end-of-ply housekeeping.

    The resolver is the only writer of GameState. A move that fails
    validation leaves the state untouched.
    """

    def __init__(self, catalog: Catalog):
        self.catalog = catalog
        self.validator = MoveValidator(catalog)

    def legal_moves(self, state: GameState, role: PlayerRole) -> List[MoveDefinition]:
        return self.validator.legal_moves(state, role)

    def apply(self, state: GameState, move: Move, simulated: bool = False) -> MoveOutcome:
        """
        Apply a move in place.

        Args:
            state: State to mutate
            move: Move request (kind + id)
            simulated: True for search moves; these never touch the catalog

        Returns:
            AttackOutcome or DefenseOutcome describing what happened
        """
        definition = self.validator.validate(state, move)

        if move.kind == MoveKind.ATTACK:
            outcome = self._resolve_attack(state, definition)
        else:
            outcome = self._resolve_defense(state, definition, simulated)

        logger.debug("Turn %d: %s played %s (security %.2f)",
                     state.turn, move.kind.role, definition.id, state.security_level)

        self._end_ply(state)
        return outcome

    def simulate(self, state: GameState, move: Move) -> Tuple[GameState, MoveOutcome]:
        """Apply a move to a clone; the given state is not modified"""
        new_state = state.clone()
        outcome = self.apply(new_state, move, simulated=True)
        return new_state, outcome

    def skip_turn(self, state: GameState):
        """
        Pass the turn for a player with no legal move.
        Only housekeeping runs.
        """
        if state.game_over:
            raise GameAlreadyOverError("Game has ended")
        logger.debug("Turn %d: %s has no legal move, skipping", state.turn, state.current_player)
        self._end_ply(state)

    # =========================================================================
    # Attack
    # =========================================================================

    def _resolve_attack(self, state: GameState, attack: AttackDefinition) -> AttackOutcome:
        config = state.config
        targets = state.vulnerable_nodes(attack.type)

        modifier = 1.0 + 0.1 * len(targets) if targets else 1.0
        damage = attack.success_rate * modifier
        state.security_level = max(config.min_security, state.security_level - damage)
        state.attacker.spend_resources(attack.cost)

        critical_hit = False
        for node in targets:
            node.attacked = True
            if node.is_critical:
                # Compounds once per critical target in the same move
                state.security_level = max(
                    config.min_security,
                    state.security_level * config.critical_node_penalty,
                )
                critical_hit = True

        state.attacker.history.append(attack.clone())

        return AttackOutcome(
            attack=attack,
            damage=damage,
            vulnerability_modifier=modifier,
            target_nodes=[n.name for n in targets],
            critical_hit=critical_hit,
            security_after=state.security_level,
        )

    # =========================================================================
    # Defense
    # =========================================================================

    def _resolve_defense(self, state: GameState, defense: DefenseDefinition,
                         simulated: bool = False) -> DefenseOutcome:
        config = state.config

        covered = [n for n in state.nodes if defense.covers(n)]
        for node in covered:
            node.protected = True

        before = state.security_level
        state.security_level = min(config.max_security, state.security_level + defense.security_boost)
        boost = state.security_level - before
        state.defender.spend_resources(defense.cost)

        restored = 0.0
        hardened: List[str] = []
        if defense.secondary_effect == SecondaryEffect.RESTORE:
            restored = self._restore_nodes(state)
        elif defense.secondary_effect == SecondaryEffect.HARDEN:
            hardened = self._harden_defenses(state, defense, simulated)

        state.defender.history.append(defense.clone())

        return DefenseOutcome(
            defense=defense,
            boost=boost,
            protected_nodes=[n.name for n in covered],
            restored=restored,
            hardened=hardened,
            security_after=state.security_level,
        )

    def _restore_nodes(self, state: GameState) -> float:
        """Recover attacked nodes that are now protected"""
        config = state.config
        recovered = [n for n in state.nodes if n.attacked and n.protected]
        if not recovered:
            return 0.0

        before = state.security_level
        state.security_level = min(
            config.max_security,
            state.security_level + config.restore_per_node * len(recovered),
        )
        for node in recovered:
            node.attacked = False
        return state.security_level - before

    def _harden_defenses(self, state: GameState, defense: DefenseDefinition,
                         simulated: bool = False) -> List[str]:
        """
        Boost owned defenses of the same type. Only the state's own copies
        change unless the legacy flag asks for the shared catalog entry too;
        simulated moves never write to the catalog.
        """
        config = state.config
        hardened = []
        for owned in state.defender.history:
            if owned.type != defense.type:
                continue
            _boost_effectiveness(owned, config.hardening_multiplier)
            hardened.append(owned.id)

            if config.legacy_catalog_mutation and not simulated:
                shared = self.catalog.defenses.get(owned.id)
                if shared is not None:
                    _boost_effectiveness(shared, config.hardening_multiplier)
        return hardened

    # =========================================================================
    # Housekeeping
    # =========================================================================

    def _end_ply(self, state: GameState):
        """Advance the turn, decay security, pay the stipend, check victory"""
        config = state.config

        state.turn += 1
        state.security_level = max(config.min_security, state.security_level - config.security_decay)
        state.current_player = state.current_player.opponent
        state.get_current_player_state().grant_resources(config.income_for(state.current_player))

        winner = check_victory(state)
        if winner is not None:
            state.declare_winner(winner)
            logger.info("Game over on turn %d: %s wins (security %.2f)",
                        state.turn, winner, state.security_level)


def _boost_effectiveness(defense: DefenseDefinition, multiplier: float):
    defense.effectiveness = {
        attack_type: min(1.0, value * multiplier)
        for attack_type, value in defense.effectiveness.items()
    }


def check_victory(state: GameState) -> Optional[PlayerRole]:
    """
    Evaluate termination rules; the first matching rule wins.

    1. Security at or below the minimum -> attacker
    2. Attacker out of resources -> defender
    3. Any critical node attacked -> attacker
    4. All critical nodes protected, security high, enough turns -> defender
    """
    config = state.config
    if state.security_level <= config.min_security:
        return PlayerRole.ATTACKER
    if state.attacker.resources <= 0:
        return PlayerRole.DEFENDER

    critical = state.critical_nodes
    if any(n.attacked for n in critical):
        return PlayerRole.ATTACKER
    if (all(n.protected for n in critical)
            and state.security_level >= config.high_security_threshold
            and state.turn > config.min_turns_for_defense_win):
        return PlayerRole.DEFENDER
    return None
