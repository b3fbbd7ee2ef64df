"""
Bookline CLI - Command-line interface for opening drills.

Usage:
    bookline validate <tree_file>             Validate an opening tree file
    bookline lines <opening>                  List the book lines of an opening
    bookline odds <opening> [moves...]        Show reply odds at a position
    bookline drill <opening>                  Drill an opening in the terminal

<opening> is a catalog id (e.g. scotch-gambit) or a JSON tree file.
"""

import argparse
import logging
import sys
import time
from pathlib import Path


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Bookline - Opening book drills",
        prog="bookline",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate an opening tree file")
    validate_parser.add_argument("tree_file", help="Path to JSON tree file")

    # Lines command
    lines_parser = subparsers.add_parser("lines", help="List the book lines of an opening")
    lines_parser.add_argument("opening", help="Catalog id or JSON tree file")
    lines_parser.add_argument("--prefix", nargs="*", default=None, help="Prefix moves for a tree file")

    # Odds command
    odds_parser = subparsers.add_parser("odds", help="Show reply odds at a position")
    odds_parser.add_argument("opening", help="Catalog id or JSON tree file")
    odds_parser.add_argument("moves", nargs="*", help="Moves from the start (default: the prefix)")

    # Drill command
    drill_parser = subparsers.add_parser("drill", help="Drill an opening in the terminal")
    drill_parser.add_argument("opening", nargs="?", default="scotch-gambit", help="Catalog id or JSON tree file")
    drill_parser.add_argument("--prefix", nargs="*", default=None, help="Prefix moves for a tree file")
    drill_parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible replies")
    drill_parser.add_argument("--delay", type=float, default=0.5, help="Reply delay in seconds")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "validate":
        cmd_validate(args)
    elif args.command == "lines":
        cmd_lines(args)
    elif args.command == "odds":
        cmd_odds(args)
    elif args.command == "drill":
        cmd_drill(args)
    else:
        parser.print_help()
        sys.exit(1)


def _resolve_opening(opening, prefix=None):
    """Load a catalog opening, or a tree file with an optional prefix."""
    from .errors import BooklineError
    from .openings import OPENINGS, load_opening, load_opening_file

    try:
        if opening in OPENINGS:
            return load_opening(opening)
        if Path(opening).exists():
            return load_opening_file(opening, prefix or ())
        return load_opening(opening)
    except BooklineError as e:
        print(f"Error: {e}")
        for error in getattr(e, "errors", []):
            print(f"  - {error}")
        sys.exit(1)


def cmd_validate(args):
    """Validate an opening tree file."""
    from .opening_tree import load_opening_tree_file, terminal_paths, tree_depth
    from .legality import ChessLegalityOracle

    print(f"Validating: {args.tree_file}")
    result = load_opening_tree_file(args.tree_file)

    if not result.ok:
        print("\nErrors:")
        for e in result.errors:
            print(f"  - {e}")
        sys.exit(1)

    lines = terminal_paths(result.tree)
    print(f"Lines: {len(lines)}")
    print(f"Depth: {tree_depth(result.tree)}")

    unplayable = ChessLegalityOracle().unplayable_lines(result.tree)
    if unplayable:
        print("\nWarnings:")
        for line in unplayable:
            print(f"  - not legal SAN: {' '.join(line)}")

    print("OK")


def cmd_lines(args):
    """List every book line of an opening."""
    from .opening_tree import terminal_paths, tree_depth

    opening = _resolve_opening(args.opening, args.prefix)
    lines = terminal_paths(opening.tree)

    print(f"{opening.name}: {len(lines)} line(s), depth {tree_depth(opening.tree)}")
    for line in lines:
        print(f"  {' '.join(line)}")


def cmd_odds(args):
    """Show the automated side's reply odds at a position."""
    from .opening_tree import navigate_to_path
    from .bots import move_probabilities

    opening = _resolve_opening(args.opening)
    moves = args.moves or list(opening.prefix)
    node = navigate_to_path(opening.tree, moves)

    if node is None:
        print(f"Error: Not a book line: {' '.join(moves)}")
        sys.exit(1)

    if not node.children:
        print("End of line.")
        return

    for move, probability in move_probabilities(node.children).items():
        annotation = node.children[move].annotation
        suffix = f"  ({annotation})" if annotation else ""
        print(f"  {move:<8} {probability:6.1%}{suffix}")


def sleep_scheduler(delay, callback):
    """Blocking scheduler for the terminal drill."""
    if delay > 0:
        time.sleep(delay)
    callback()


def cmd_drill(args):
    """Drill an opening in the terminal."""
    from .engine_core import PrefixNotFoundError
    from .legality import ChessLegalityOracle
    from .session import SessionManager

    opening = _resolve_opening(args.opening, args.prefix)
    oracle = ChessLegalityOracle()

    unplayable = oracle.unplayable_lines(opening.tree)
    if unplayable:
        print("Error: Book lines are not legal SAN:")
        for line in unplayable:
            print(f"  - {' '.join(line)}")
        sys.exit(1)

    manager = SessionManager(oracle=oracle, reply_delay=args.delay, scheduler=sleep_scheduler)

    try:
        session = manager.create_session(opening, seed=args.seed)
    except PrefixNotFoundError as e:
        print(f"Error: {e}")
        sys.exit(1)

    loop = session.loop
    print(f"Drilling {opening.name}")
    if opening.prefix:
        print(f"Start: {' '.join(opening.prefix)}")
    print("Enter moves as SAN (Nf3) or squares (g1f3).")
    print("Commands: reset, toggle <move>, variations, quit\n")

    result = loop.begin()
    print(result.feedback)

    while True:
        try:
            text = input("> ").strip()
        except EOFError:
            break

        if not text:
            continue
        if text in ("quit", "exit"):
            break

        if text == "reset":
            result = loop.reset()
        elif text == "variations":
            _print_variations(session)
            continue
        elif text.startswith("toggle "):
            move = text.split(maxsplit=1)[1]
            if not loop.toggle_variation(move):
                print(f"Cannot toggle {move}.")
            _print_variations(session)
            continue
        else:
            result = loop.play_text(text)

        for error in result.errors:
            print(f"! {error}")
        if result.feedback:
            print(result.feedback)
        if result.annotation:
            print(f"  {result.annotation}")

    manager.end_session(session.session_id)


def _print_variations(session):
    from .openings import available_variations

    allowed = session.engine.allowed_replies
    for variation in available_variations(session.opening):
        mark = "x" if variation.move in allowed else " "
        print(f"  [{mark}] {variation.move:<8} {variation.probability:6.1%}")


if __name__ == "__main__":
    main()
