#!/usr/bin/env python3
"""
Command-line utility for the staff directory.
Runs one operation against the configured record store and exits.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from staffdir.core.config import create_record_store, resolve_backend, validate_config
from staffdir.core.errors import StoreError
from staffdir.core.schema import EmployeeRecord
from staffdir.core.synchronizer import Synchronizer


def format_employee(record: EmployeeRecord) -> str:
    """Format one employee for display."""
    line = f"[{record.id}] {record.name} - {record.designation} ({record.department}), added {record.created_at[:10]}"
    if record.photo_url:
        line += " [photo]"
    return line


async def run_command(args, store=None) -> int:
    if store is None:
        store = await create_record_store(args.backend)
    sync = await Synchronizer.start(store)

    try:
        if args.command == "list":
            employees = sync.employees
            if args.json:
                print(json.dumps([e.to_dict() for e in employees], indent=2))
            elif not employees:
                print("No employees found")
            else:
                for employee in employees:
                    print(format_employee(employee))

        elif args.command == "add":
            record = await sync.add_employee(args.name, args.designation, args.department, args.photo_url)
            print(f"Employee added successfully with ID: {record.id}")

        elif args.command == "delete":
            await sync.delete_employee(args.id)
            print("Employee deleted successfully!")

        elif args.command == "clear":
            if not args.yes:
                print("Refusing to delete all employees without --yes. This action cannot be undone.")
                return 2
            await sync.clear_all()
            print("All employees deleted successfully!")

        elif args.command == "dedupe":
            result = await sync.remove_duplicates()
            if args.json:
                print(json.dumps({"removed": result.removed, "message": result.message}))
            else:
                print(result.message)

        elif args.command == "health":
            healthy = await sync.store.health_check()
            print(f"Backend: {sync.store.backend_name}")
            print(f"Status: {'healthy' if healthy else 'unhealthy'}")
            print(f"Employees: {len(sync.employees)}")
            return 0 if healthy else 1

        return 0

    except StoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        await sync.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Staff directory management utilities",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s list                                  # List employees, newest first
  %(prog)s add "Ana" "Engineer" "R&D"            # Add an employee
  %(prog)s delete 42                             # Delete employee 42
  %(prog)s clear --yes                           # Delete every employee
  %(prog)s dedupe                                # Remove duplicate employees
  %(prog)s --backend local list                  # Use the local key-value store

Environment variables:
- STORE_BACKEND=auto|sqlite|local|supabase
- DB_PATH=./data/employees.db
- KV_PATH=./data/employees.json
- SUPABASE_URL / SUPABASE_ANON_KEY (hosted backend)
        """
    )

    parser.add_argument(
        "--backend", "-b",
        choices=["auto", "sqlite", "local", "supabase"],
        default=None,
        help="Record store backend (default: STORE_BACKEND or auto-detect)"
    )

    parser.add_argument(
        "--json", "-j",
        action="store_true",
        help="Output results as JSON instead of human-readable text"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List all employees")

    add_parser = subparsers.add_parser("add", help="Add an employee")
    add_parser.add_argument("name")
    add_parser.add_argument("designation")
    add_parser.add_argument("department")
    add_parser.add_argument("--photo-url", default=None, help="Data URI or URI of the employee photo")

    delete_parser = subparsers.add_parser("delete", help="Delete an employee by id")
    delete_parser.add_argument("id", type=int)

    clear_parser = subparsers.add_parser("clear", help="Delete all employees")
    clear_parser.add_argument("--yes", "-y", action="store_true", help="Confirm deleting every employee")

    subparsers.add_parser("dedupe", help="Remove duplicate employees, keeping the most recent")
    subparsers.add_parser("health", help="Check backend connectivity")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    issues = validate_config()
    if issues:
        for issue in issues:
            print(f"Configuration issue: {issue}", file=sys.stderr)
        return 1

    try:
        resolve_backend(args.backend)
        return asyncio.run(run_command(args))
    except (StoreError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
