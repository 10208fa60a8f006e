"""Ví dụ: dùng service layer (không qua Flask).

Tính lương một nhân viên cho nửa đầu tháng, không lưu kết quả.
"""

import importlib
from datetime import date

from dotenv import load_dotenv

from config import get_settings_module

from src.payroll_system.payroll_system.container import build_container


def main():
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)
    computation = container.payroll_service.compute_payroll(1, date(2025, 3, 1), date(2025, 3, 15))
    print(computation.as_dict())


if __name__ == "__main__":
    main()
