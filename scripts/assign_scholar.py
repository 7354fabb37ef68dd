from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from src.normalize.schema import EXAMINATION_RECORDS_TABLE, scholar_name
from src.store.base import BaseStore, RemoteFailure
from src.store.memory import InMemoryStore
from src.store.registry import create_store
from src.workflow.assignment import assign_scholar, load_candidate_scholars, unassign_scholar
from src.workflow.errors import ValidationError

logger = logging.getLogger("assign_scholar")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Assign scholars to supervisors.")
    parser.add_argument("--store-file", type=Path, default=None)
    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument("--table", type=str, default=EXAMINATION_RECORDS_TABLE)
    commands = parser.add_subparsers(dest="command", required=True)

    assign = commands.add_parser("assign", help="Admit a scholar under a supervisor.")
    assign.add_argument("--supervisor-id", required=True)
    assign.add_argument("--scholar-id", required=True)
    assign.add_argument("--type", dest="scholar_type", required=True)

    unassign = commands.add_parser("unassign", help="Release a scholar from their supervisor.")
    unassign.add_argument("--scholar-id", required=True)

    candidates = commands.add_parser("candidates", help="List assignable scholars.")
    candidates.add_argument("--faculty", required=True)
    candidates.add_argument("--department", required=True)
    candidates.add_argument("--type", dest="scholar_type", default=None)
    candidates.add_argument("--limit", type=int, default=50)
    return parser.parse_args(argv)


def run_command(args: argparse.Namespace, store: BaseStore) -> int:
    if args.command == "assign":
        assignment = assign_scholar(
            store,
            supervisor_id=args.supervisor_id,
            scholar_id=args.scholar_id,
            scholar_type=args.scholar_type,
            table=args.table,
        )
        print(
            f"Assigned {assignment.scholar_id} to {assignment.supervisor_name} "
            f"({assignment.scholar_type.value}, vacancy left={assignment.vacancy})"
        )
    elif args.command == "unassign":
        released = unassign_scholar(store, args.scholar_id, table=args.table)
        print(f"Unassigned {released.scholar_id} from {released.supervisor_name}")
    else:
        rows = load_candidate_scholars(
            store,
            faculty_name=args.faculty,
            department_name=args.department,
            scholar_type=args.scholar_type,
            limit=args.limit,
            table=args.table,
        )
        for row in rows:
            print(f"{row.get('id')}\t{scholar_name(row)}\t{row.get('total_marks')}")
        print(f"{len(rows)} candidates")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    store = create_store(store_file=args.store_file, config_path=args.config)
    try:
        exit_code = run_command(args, store)
        if isinstance(store, InMemoryStore) and args.store_file and args.command != "candidates":
            store.dump_json(args.store_file)
    except ValidationError as exc:
        print(f"Error: {exc}")
        return 2
    except RemoteFailure:
        logger.exception("Store request failed.")
        print("Error: the store request failed. Please try again.")
        return 1
    finally:
        store.close()
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
