#!/usr/bin/env python3
"""
Create a .env template with the hosted database settings.
An existing .env file is never overwritten.
"""

import argparse
import sys
from pathlib import Path

ENV_TEMPLATE = """# Supabase Configuration
# Replace these with your actual Supabase project credentials
# Get these from your Supabase project dashboard: https://supabase.com/dashboard

SUPABASE_URL=https://your-project-id.supabase.co
SUPABASE_ANON_KEY=your-anon-key-here

# Store selection: auto|sqlite|local|supabase
STORE_BACKEND=auto
"""


def write_env_template(env_path: Path) -> bool:
    """Write the template; returns False when the file already exists."""
    if env_path.exists():
        return False
    env_path.write_text(ENV_TEMPLATE, encoding="utf-8")
    return True


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create a .env template for the staff directory")
    parser.add_argument(
        "--path",
        default=str(Path(__file__).parent.parent / ".env"),
        help="Location of the .env file (default: project root)"
    )
    args = parser.parse_args(argv)
    env_path = Path(args.path)

    try:
        created = write_env_template(env_path)
    except OSError as e:
        print(f"Failed to create .env file: {e}", file=sys.stderr)
        return 1

    if not created:
        print(f".env file already exists at {env_path}")
        print("If you need to update your credentials, please edit the .env file manually.")
        return 0

    print(f"Created .env file at {env_path}")
    print("Next steps:")
    print("1. Replace the placeholder values with your Supabase credentials")
    print("2. Run the employees table schema in your Supabase SQL Editor")
    return 0


if __name__ == "__main__":
    sys.exit(main())
