from __future__ import annotations

import argparse
import sqlite3
from contextlib import closing
from datetime import datetime, timezone
from pathlib import Path


# Copy a live SQLite database with the online backup API so writers are not blocked.
def backup_database(source: Path, target: Path) -> None:
    with closing(sqlite3.connect(source)) as src, closing(sqlite3.connect(target)) as dst:
        src.backup(dst)


# Keep only the newest `keep` backup folders.
def prune_backups(dest_root: Path, keep: int) -> list[Path]:
    folders = sorted(dest_root.glob("backup_*"), reverse=True)
    removed = []
    for folder in folders[keep:]:
        for item in folder.iterdir():
            item.unlink()
        folder.rmdir()
        removed.append(folder)
    return removed


def main() -> int:
    parser = argparse.ArgumentParser(description="Back up the Skillfolio SQLite database.")
    parser.add_argument("--source", default="instance", help="Folder containing .db files")
    parser.add_argument("--dest", default="backups", help="Destination folder for backups")
    parser.add_argument("--keep", type=int, default=10, help="Number of backup folders to retain")
    args = parser.parse_args()

    source_dir = Path(args.source).resolve()
    dest_root = Path(args.dest).resolve()
    if not source_dir.exists():
        raise SystemExit(f"Source folder not found: {source_dir}")
    if args.keep < 1:
        raise SystemExit("--keep must be at least 1")

    db_files = sorted(source_dir.glob("*.db"))
    if not db_files:
        raise SystemExit(f"No .db files found in {source_dir}")

    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    backup_dir = dest_root / f"backup_{timestamp}"
    backup_dir.mkdir(parents=True, exist_ok=True)

    for db_file in db_files:
        backup_database(db_file, backup_dir / db_file.name)

    removed = prune_backups(dest_root, args.keep)
    print(f"Backed up {len(db_files)} database files to: {backup_dir}")
    if removed:
        print(f"Removed {len(removed)} old backup folders")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
