from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Thực thể miền (domain): Nhân viên.

    Lưu ý: Đây là đối tượng dữ liệu thuần (không chứa code truy cập DB).
    ``external_id`` is the ID printed on the biometric device export.
    """

    employee_id: int
    external_id: Optional[str]
    first_name: str
    last_name: str
    department: Optional[str] = None
    position: Optional[str] = None
    employee_type: Optional[str] = None
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
