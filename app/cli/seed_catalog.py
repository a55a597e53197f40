# =============================================
# File: app/cli/seed_catalog.py
# Purpose: CLI entrypoint to load a prompt catalog (and optional fixtures) into the SQL store.
# Usage:
#   python -m app.cli.seed_catalog --file app/data/sample_catalog.json --db-url sqlite:///./app.db --clear
# =============================================
from __future__ import annotations
import argparse
import sys
from app.db.repo import DB_URL, make_engine
from app.services.seeding import DEFAULT_SEED_FILE, read_seed_file, seed_database


def main(argv=None):
    ap = argparse.ArgumentParser(description="Load a prompt catalog JSON file into the record store.")
    ap.add_argument("--file", default=DEFAULT_SEED_FILE, help="JSON file: list of prompts or {prompts, children, completions, favorites}")
    ap.add_argument("--db-url", default=DB_URL, help=f"SQLAlchemy URL (default: {DB_URL})")
    ap.add_argument("--clear", action="store_true", help="Delete existing rows before loading")
    args = ap.parse_args(argv)

    data = read_seed_file(args.file)
    loaded, skipped = seed_database(data, make_engine(args.db_url), clear=args.clear)

    if loaded == 0:
        print("[WARN] No prompts loaded. Check --file.", file=sys.stderr)
        sys.exit(1)

    print(f"[OK] Loaded {loaded} prompts ({skipped} skipped) into {args.db_url}")


if __name__ == "__main__":
    main()
