#!/usr/bin/env python3
"""starforge - generate a star system from the command line.

Generates (or loads) a system, prints a summary table and optionally saves
it or dumps it as JSON.
"""

import argparse
import json
import logging
import sys

from pydantic import ValidationError

from starforge.engine import GenerationOptions, generate_system
from starforge.interface import SystemDisplay
from starforge.models import load_rulepack, load_starter_rulepack
from starforge.utils.serialization import load_system, save_system, system_to_dict

STAR_TYPES = [
    "Random",
    "Type O",
    "Type B",
    "Type A",
    "Type F",
    "Type G",
    "Type K",
    "Type M",
    "Type G Binary",
    "Type K Binary",
    "Type M Binary",
    "Type WD",
    "Type red-giant",
    "Type BH_active",
]


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="starforge - procedural star-system generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --seed alpha-42                      # Generate and print a system
  %(prog)s --seed alpha-42 --star-type "Type M Binary"
  %(prog)s --seed alpha-42 --json               # Dump the processed system as JSON
  %(prog)s --seed alpha-42 --save alpha.json    # Save to state/alpha.json
  %(prog)s --load alpha.json                    # Print a saved system
        """,
    )
    parser.add_argument("--seed", type=str, default="starforge", help="Seed string (default: starforge)")
    parser.add_argument(
        "--star-type",
        choices=STAR_TYPES,
        default="Random",
        help="Primary star choice (default: Random)",
    )
    parser.add_argument("--empty", action="store_true", help="Generate only the stars")
    parser.add_argument(
        "--planet-count", type=int, default=None, help="Force the number of planet slots"
    )
    parser.add_argument(
        "--rulepack", type=str, metavar="FILE", help="Rulepack JSON (default: bundled starter pack)"
    )
    parser.add_argument("--load", type=str, metavar="FILE", help="Load system from JSON file")
    parser.add_argument("--save", type=str, metavar="FILE", help="Save system to JSON file")
    parser.add_argument("--json", action="store_true", help="Print the system as JSON instead of a table")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    log_level = logging.DEBUG if args.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    if args.load:
        try:
            system = load_system(args.load)
        except FileNotFoundError:
            print(f"Error: File {args.load} not found.", file=sys.stderr)
            sys.exit(1)
        except (ValueError, json.JSONDecodeError) as e:
            print(f"Error loading system: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        try:
            pack = load_rulepack(args.rulepack) if args.rulepack else load_starter_rulepack()
        except FileNotFoundError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        except ValidationError as e:
            print(f"Error: invalid rulepack: {e}", file=sys.stderr)
            sys.exit(1)

        if args.planet_count is not None and args.planet_count < 0:
            parser.error("--planet-count must be >= 0")

        system = generate_system(
            args.seed,
            pack,
            GenerationOptions(planet_count=args.planet_count),
            star_choice=args.star_type,
            empty=args.empty,
        )

    if args.json:
        print(json.dumps(system_to_dict(system), indent=2))
    else:
        SystemDisplay().show_system(system)

    if args.save:
        path = save_system(system, args.save)
        print(f"Saved to {path}", file=sys.stderr)


if __name__ == "__main__":
    main()
