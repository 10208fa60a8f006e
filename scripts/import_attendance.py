"""Nhập file chấm công (CSV/XLSX) từ dòng lệnh.

    python scripts/import_attendance.py exports/march.xlsx [--force]
"""

from __future__ import annotations

import argparse
import importlib
import json
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.payroll_system.payroll_system.container import build_container
from src.payroll_system.payroll_system.main import configure_logging


def main() -> int:
    parser = argparse.ArgumentParser(description="Import a device attendance export.")
    parser.add_argument("path", type=Path)
    parser.add_argument("--force", action="store_true", help="re-import a file seen before")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)

    content = args.path.read_bytes()
    previous = container.attendance_importer.find_previous_import(content)
    if previous is not None and not args.force:
        print(f"File already imported as batch {previous.batch_id}; use --force to re-import.")
        return 1

    summary = container.attendance_importer.import_file(content, args.path.name)
    print(json.dumps(summary.as_dict(), indent=2, default=str))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
