"""
Serviced-today display filter.

Whether a tank was serviced today is an explicit predicate handed in by the
caller, never a lookup of the wall clock inside the core. The filter only
decides what is displayed; classification is untouched.
"""

from datetime import date
from typing import Callable, Iterable, List, Optional

from tankboard.models.tank_models import ClassifiedTank, TankRecord

ServicedPredicate = Callable[[TankRecord], bool]


def serviced_on(day: date) -> ServicedPredicate:
    """Predicate: the record was marked serviced on `day`."""

    def _is_serviced(record: TankRecord) -> bool:
        return record.serviced_on is not None and record.serviced_on == day

    return _is_serviced


def never_serviced(record: TankRecord) -> bool:
    return False


def hide_serviced(
    tanks: Iterable[ClassifiedTank], is_serviced: Optional[ServicedPredicate] = None
) -> List[ClassifiedTank]:
    """Drop tanks the predicate reports as serviced. No predicate keeps all."""
    if is_serviced is None:
        return list(tanks)
    return [tank for tank in tanks if not is_serviced(tank.record)]
