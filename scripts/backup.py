"""Backup the application data as JSON.

Default: run the automatic backup when it is due (meant for cron).
`--force` writes a backup now regardless of the schedule.
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT / "src") not in sys.path:
    sys.path.insert(0, str(REPO_ROOT / "src"))

from edusched.config import get_settings_module
from edusched.container import build_container


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--force", action="store_true", help="write a backup even if none is due")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    container = build_container(settings=settings)

    if args.force:
        out = container.backup_service.write_backup()
    else:
        out = container.backup_service.run_auto_backup()

    if out is None:
        print("Nothing to do: automatic backup disabled or not due yet.")
    else:
        print(f"OK: Backup created: {out}")


if __name__ == "__main__":
    main()
