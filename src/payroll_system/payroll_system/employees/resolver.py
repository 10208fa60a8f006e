"""Resolve device-export (external ID, display name) pairs to employees."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from .model import Employee

_PUNCT = re.compile(r"[^\w\s]", re.UNICODE)
_SPACES = re.compile(r"\s+")


def normalize_name(value: Optional[str]) -> str:
    """Case, punctuation and whitespace insensitive name key."""
    if not value:
        return ""
    text = _PUNCT.sub(" ", str(value).lower().replace("_", " "))
    return _SPACES.sub(" ", text).strip()


def normalize_external_id(value: Optional[str]) -> str:
    if value is None:
        return ""
    text = str(value).strip()
    # Excel exports turn "0012" into 12.0
    if text.endswith(".0") and text[:-2].isdigit():
        text = text[:-2]
    return text.lstrip("0") or text


@dataclass(frozen=True)
class Resolution:
    employee: Optional[Employee]
    warning: Optional[str] = None
    error: Optional[str] = None
    by_name: bool = False


class EmployeeResolver:
    """Lookup index built once per import, before any row is processed."""

    def __init__(self, employees: Iterable[Employee]):
        self._by_id: dict[str, Employee] = {}
        self._by_name: dict[str, list[Employee]] = {}
        for emp in employees:
            if emp.external_id:
                self._by_id[normalize_external_id(emp.external_id)] = emp
            for key in {
                normalize_name(f"{emp.first_name} {emp.last_name}"),
                normalize_name(f"{emp.last_name} {emp.first_name}"),
            }:
                if key:
                    bucket = self._by_name.setdefault(key, [])
                    if emp not in bucket:
                        bucket.append(emp)

    def resolve(self, external_id: Optional[str], name: Optional[str]) -> Resolution:
        if external_id:
            emp = self._by_id.get(normalize_external_id(external_id))
            if emp:
                return Resolution(employee=emp)

        key = normalize_name(name)
        if not key:
            return Resolution(employee=None, error=f"Employee {external_id or '?'} not found")

        matches = self._by_name.get(key, [])
        if len(matches) == 1:
            warning = None
            if external_id:
                warning = f"ID {external_id} not found, matched by name {name!r}"
            return Resolution(employee=matches[0], warning=warning, by_name=True)
        if len(matches) > 1:
            ids = ", ".join(str(m.employee_id) for m in matches)
            return Resolution(employee=None, warning=f"Ambiguous name {name!r} matches employees {ids}")
        return Resolution(employee=None, error=f"Employee {external_id or ''} {name!r} not found".replace("  ", " "))
