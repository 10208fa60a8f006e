"""Tính lương cho một kỳ và lưu kết quả.

    python scripts/run_payroll.py 2025-03-01 2025-03-15 [--employee 12]
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

from src.payroll_system.payroll_system.common.datetime_utils import parse_iso_date
from src.payroll_system.payroll_system.container import build_container
from src.payroll_system.payroll_system.main import configure_logging


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate payroll results for a pay period.")
    parser.add_argument("start")
    parser.add_argument("end")
    parser.add_argument("--employee", type=int, action="append", dest="employees")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)

    summary = container.payroll_service.generate_for_period(
        parse_iso_date(args.start), parse_iso_date(args.end), employee_ids=args.employees
    )
    print(json.dumps(summary.as_dict(), indent=2, default=str))
    return 0 if summary.failed == 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
