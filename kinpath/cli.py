"""Command line entry point.

    kinpath import family.json --tree "Ali's family"
    kinpath find TREE_ID PERSON_A PERSON_B --max-depth 10 --locale ar
    kinpath seed-types
"""
import argparse
import logging
import sys
from pathlib import Path

import kuzu

from . import config
from .db import open_database, seed_relationship_types
from .engine import find_relationship_path
from .importer import import_graph_file
from .kuzu_provider import KuzuGraphProvider
from .pathfinder import SearchCancelled
from .provider import GraphProviderError
from .vocabulary import LOCALES, RelationshipVocabulary


def _vocabulary(conn) -> RelationshipVocabulary:
    vocabulary = RelationshipVocabulary.from_kuzu(conn)
    return vocabulary if len(vocabulary) else RelationshipVocabulary.default()


def cmd_import(conn, args) -> int:
    summary = import_graph_file(conn, args.file, args.tree)
    for err in summary["errors"]:
        print(f"  - [{err['type']}] {err['message']}", file=sys.stderr)
    print(f"Imported tree {summary['tree']['id']}: {summary['people']} people, "
          f"{summary['parent_edges']} parent edges, {summary['unions']} unions")
    return 0


def cmd_find(conn, args) -> int:
    result = find_relationship_path(
        KuzuGraphProvider(conn), args.tree_id, args.person_a, args.person_b,
        max_depth=args.max_depth, locale=args.locale, vocabulary=_vocabulary(conn),
        timeout=args.timeout,
    )
    if args.json:
        print(result.model_dump_json(indent=2))
    else:
        print(result.display_label)
        if result.found and result.path_length > 0:
            print(" -> ".join(result.path_ids))
            print(result.trail)
    return 0 if result.error is None else 1


def cmd_seed_types(conn, args) -> int:
    written = seed_relationship_types(conn, RelationshipVocabulary.default())
    print(f"Seeded {written} relationship types")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kinpath", description="Family relationship resolution")
    parser.add_argument("--db", type=Path, default=config.DB_PATH, help="KuzuDB path")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("import", help="Import a JSON family graph into a new tree")
    p.add_argument("file", type=Path)
    p.add_argument("--tree", required=True, help="Name of the tree to create")
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("find", help="Describe how PERSON_B is related to PERSON_A")
    p.add_argument("tree_id")
    p.add_argument("person_a")
    p.add_argument("person_b")
    p.add_argument("--max-depth", type=int, default=config.MAX_DEPTH)
    p.add_argument("--locale", choices=LOCALES, default=config.DEFAULT_LOCALE)
    p.add_argument("--timeout", type=float, default=None, help="Seconds; 0 disables")
    p.add_argument("--json", action="store_true", help="Print the full result as JSON")
    p.set_defaults(func=cmd_find)

    p = sub.add_parser("seed-types", help="Load the bundled relationship vocabulary into the graph")
    p.set_defaults(func=cmd_seed_types)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=config.LOG_LEVEL)
    if getattr(args, "max_depth", 0) < 0:
        print("--max-depth must be >= 0", file=sys.stderr)
        return 2
    conn = kuzu.Connection(open_database(args.db))
    try:
        return args.func(conn, args)
    except FileNotFoundError as e:
        print(f"File not found: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except SearchCancelled:
        print("Relationship search timed out", file=sys.stderr)
        return 3
    except GraphProviderError as e:
        print(f"Family graph unavailable: {e}", file=sys.stderr)
        return 3


if __name__ == "__main__":
    sys.exit(main())
