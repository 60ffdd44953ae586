# =============================================================================
# Cyber Wargame Engine - Command Line Interface
# =============================================================================
"""
Simple CLI for watching a game: a random attacker against the MinMax defender.
"""

import argparse
import logging
import random
from typing import List, Optional

from .core import TOPOLOGIES, GameConfig, GameSession, PlayerRole, get_topology


def print_header():
    """Print game header"""
    print("\n" + "=" * 60)
    print("   CYBER WARGAME ENGINE")
    print("   Random Attacker vs MinMax Defender")
    print("=" * 60 + "\n")


def print_state(session: GameSession):
    """Print current game state"""
    state = session.state
    print(f"\n{'='*50}")
    print(f"Turn {state.turn} | {state.current_player.name}'s Turn")
    print(f"{'='*50}")
    print(f"Security: {state.security_level:.2f}/{state.config.max_security:g}")
    print(f"Resources: Attacker: {state.attacker.resources} | Defender: {state.defender.resources}")

    for node in state.nodes:
        flags = []
        if node.protected:
            flags.append("protected")
        if node.attacked:
            flags.append("attacked")
        print(f"  {node.name:<15} {node.criticality.value:<9} {', '.join(flags)}")


def print_predictions(session: GameSession, limit: int = 3):
    """Print the top next-attack predictions"""
    summary = session.prediction_summary()
    print("\nNext attack forecast:")
    for row in summary["predictions"][:limit]:
        print(f"  {row['attack_name']:<22} {row['probability']:>3}%  ({row['confidence']})")
    print(f"  Pattern: {summary['summary']['recent_pattern']}")


def print_odds(session: GameSession):
    """Print the current win probability"""
    odds = session.win_probability()
    print(f"\nWin probability: Attacker {odds.attacker:.1f}% | "
          f"Defender {odds.defender:.1f}% ({odds.confidence.value})")


def play_demo(session: GameSession, rng: random.Random, max_turns: int, quiet: bool = False):
    """
    Run the attacker -> defender loop until the game ends or max_turns.

    Returns:
        The winning role, or None when the turn limit was reached
    """
    while not session.state.game_over and session.state.turn <= max_turns:
        attacks = session.available_attacks()
        if not attacks:
            if not quiet:
                print("\nAttacker cannot afford any attack, skipping")
            session.skip_turn()
        else:
            attack = rng.choice(attacks)
            report = session.play_turn(attack.id)
            if not quiet:
                outcome = report.attack
                print(f"\n-> Attacker plays {outcome.attack.name}: "
                      f"damage {outcome.damage:.2f}, targets {outcome.target_nodes or '-'}")
                if report.defense:
                    print(f"-> Defender answers {report.defense.defense.name}: "
                          f"protected {report.defense.protected_nodes or '-'}")
                elif report.defender_skipped:
                    print("-> Defender has no legal defense, skipping")

        if session.state.game_over:
            break

        if session.state.current_player == PlayerRole.DEFENDER:
            session.play_defender_turn()

        if not quiet:
            print_state(session)
            print_predictions(session)
            print_odds(session)

    return session.state.winner


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cyberwar",
        description="Watch a random attacker play against the MinMax defender.",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for the random attacker")
    parser.add_argument("--depth", type=int, default=None, help="MinMax search depth")
    parser.add_argument("--max-turns", type=int, default=60, help="Stop after this many turns")
    parser.add_argument("--topology", choices=sorted(TOPOLOGIES), default="default",
                        help="Network to defend (guarded starts with the Database protected)")
    parser.add_argument("--quiet", action="store_true", help="Only print the result")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    config = GameConfig.from_env()
    if args.depth is not None:
        config.search_depth = args.depth

    session = GameSession(config=config, topology=get_topology(args.topology))
    rng = random.Random(args.seed)

    if not args.quiet:
        print_header()
        print_state(session)

    winner = play_demo(session, rng, args.max_turns, quiet=args.quiet)

    print(f"\n{'='*60}")
    print("GAME OVER!" if winner else "TURN LIMIT REACHED")
    print(f"{'='*60}")
    print(f"Winner: {winner.name if winner else 'NONE'}")
    print(f"Turns: {session.state.turn}")
    print(f"Final security: {session.state.security_level:.2f}")
    print(f"Attacks recorded: {len(session.predictor.attack_history)}")
    print_odds(session)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
