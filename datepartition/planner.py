import datetime
import re
from dataclasses import dataclass

from dateutil.relativedelta import relativedelta

from datepartition.exceptions import InvalidRangeError

MAXVALUE = "MAXVALUE"
DEFAULT_CATCHALL_NAME = "p_future"

# granularity -> (step between boundaries, strftime format of the name suffix)
GRANULARITIES = {
    "day": (relativedelta(days=1), "%Y%m%d"),
    "month": (relativedelta(months=1), "%Y%m"),
    "year": (relativedelta(years=1), "%Y"),
}

_DATED_NAME = re.compile(r"p\d+")


@dataclass(frozen=True)
class PartitionDescriptor:
    """
    One range partition: rows whose partition column is lower than ``upper_bound``
    and not lower than the previous partition's bound.
    """

    name: str
    upper_bound: datetime.date | str

    @property
    def is_catchall(self) -> bool:
        return self.upper_bound == MAXVALUE

    @property
    def bound_literal(self) -> str:
        if isinstance(self.upper_bound, str):
            return self.upper_bound
        return f"'{self.upper_bound:%Y-%m-%d}'"


@dataclass(frozen=True)
class PartitionColumn:
    name: str
    definition: str = "DATE NOT NULL DEFAULT (CURRENT_DATE)"


def plan(
    start_date: datetime.date,
    end_date: datetime.date,
    granularity: str = "day",
    catchall_name: str = DEFAULT_CATCHALL_NAME,
) -> list[PartitionDescriptor]:
    """
    Return the partitions covering ``start_date`` to ``end_date`` inclusive,
    followed by the ``MAXVALUE`` catch-all partition.

    Names are derived from the lower bound of each partition, e.g. ``p20240101``
    for the day 2024-01-01, so the same range always yields the same plan.
    """
    start_date = _as_date(start_date)
    end_date = _as_date(end_date)
    if start_date > end_date:
        raise InvalidRangeError(
            f"Start date {start_date.isoformat()} is after end date {end_date.isoformat()}."
        )
    try:
        step, name_format = GRANULARITIES[granularity]
    except KeyError:
        raise ValueError(
            f"Unsupported granularity '{granularity}'. "
            f"Choose one of: {', '.join(GRANULARITIES)}."
        )
    if _DATED_NAME.fullmatch(catchall_name):
        raise ValueError(
            f"Catch-all partition name '{catchall_name}' clashes with date-derived names."
        )

    partitions = []
    current = period_start(start_date, granularity)
    while current <= end_date:
        upper = current + step
        partitions.append(
            PartitionDescriptor(name=f"p{current:{name_format}}", upper_bound=upper)
        )
        current = upper
    partitions.append(PartitionDescriptor(name=catchall_name, upper_bound=MAXVALUE))
    return partitions


def period_start(value: datetime.date, granularity: str) -> datetime.date:
    if granularity == "month":
        return value.replace(day=1)
    if granularity == "year":
        return value.replace(month=1, day=1)
    return value


def advance(value: datetime.date, granularity: str, count: int) -> datetime.date:
    step, _ = GRANULARITIES[granularity]
    return value + step * count


def _as_date(value: datetime.date) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    return value
