from __future__ import annotations

from typing import Iterable, Optional

from ..core.enums import PunchDirection
from .model import Punch, PunchSequence


def build_sequences(punches: Iterable[Punch]) -> list[PunchSequence]:
    """Fold one employee-day's punches into ordered (IN, OUT) pairs.

    Single pass keeping an open IN:
    - IN while one is open closes the previous as (IN, None);
    - OUT with nothing open becomes (None, OUT);
    - a trailing open IN becomes (IN, None).
    No punch is dropped. Ties keep IN before OUT.
    """
    ordered = sorted(punches, key=lambda p: (p.instant, 0 if p.direction == PunchDirection.IN else 1))

    sequences: list[PunchSequence] = []
    open_in: Optional[Punch] = None
    for punch in ordered:
        if punch.direction == PunchDirection.IN:
            if open_in is not None:
                sequences.append(PunchSequence(time_in=open_in.instant, time_out=None))
            open_in = punch
        else:
            if open_in is None:
                sequences.append(PunchSequence(time_in=None, time_out=punch.instant))
            else:
                sequences.append(PunchSequence(time_in=open_in.instant, time_out=punch.instant))
                open_in = None

    if open_in is not None:
        sequences.append(PunchSequence(time_in=open_in.instant, time_out=None))
    return sequences
