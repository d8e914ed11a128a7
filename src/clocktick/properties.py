"""Job timing properties: when a job first runs and how often it repeats.

Example:
    # Once, ten minutes from now
    from_now(lambda d: d.minutes(10))

    # Every day, starting now, with a stable ID
    from_now(lambda d: d.days(1).recurring()).with_custom_id("daily-report")

    # At a fixed instant, then every week
    from_datetime(datetime(2030, 1, 1, tzinfo=UTC), lambda d: d.days(7))
"""

from collections.abc import Callable
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from typing import Any, Self

from clocktick.errors import InvalidArgument

DELTA_UNITS = ("years", "months", "days", "hours", "minutes", "seconds")


@dataclass(frozen=True)
class Delta:
    """A relative duration in calendar units. All counts are non-negative."""

    years: int = 0
    months: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0

    def __post_init__(self) -> None:
        for unit in DELTA_UNITS:
            _check_count(unit, getattr(self, unit))

    @property
    def is_zero(self) -> bool:
        return not any(getattr(self, unit) for unit in DELTA_UNITS)

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


def _check_count(unit: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"{unit} must be an integer, got {value!r}")
    if value < 0:
        raise InvalidArgument(f"{unit} must be non-negative, got {value}")


class DeltaBuilder:
    """Accumulates a :class:`Delta`. Repeated calls to one unit add up."""

    def __init__(self) -> None:
        self._counts = dict.fromkeys(DELTA_UNITS, 0)

    def _add(self, unit: str, value: int) -> Self:
        _check_count(unit, value)
        self._counts[unit] += value
        return self

    def years(self, years: int) -> Self:
        return self._add("years", years)

    def months(self, months: int) -> Self:
        return self._add("months", months)

    def days(self, days: int) -> Self:
        return self._add("days", days)

    def hours(self, hours: int) -> Self:
        return self._add("hours", hours)

    def minutes(self, minutes: int) -> Self:
        return self._add("minutes", minutes)

    def seconds(self, seconds: int) -> Self:
        return self._add("seconds", seconds)

    def to_payload(self) -> Delta:
        return Delta(**self._counts)


class RecurringDeltaBuilder(DeltaBuilder):
    """Delta builder that can also mark the job as repeating."""

    def __init__(self) -> None:
        super().__init__()
        self.is_recurring = False

    def recurring(self) -> Self:
        self.is_recurring = True
        return self


@dataclass(frozen=True)
class DatetimeStart:
    datetime: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": "datetime", "datetime": self.datetime}


@dataclass(frozen=True)
class DeltaStart:
    delta: Delta

    def to_dict(self) -> dict[str, Any]:
        return {"type": "delta", **self.delta.to_dict()}


StartFrom = DatetimeStart | DeltaStart


@dataclass(frozen=True)
class JobProperties:
    """Start descriptor, optional recurrence and optional custom job ID."""

    start_from: StartFrom
    run_every: Delta | None = None
    custom_id: str | None = None

    def to_body(self) -> dict[str, Any]:
        return {
            "start_from": self.start_from.to_dict(),
            "run_every": self.run_every.to_dict() if self.run_every else None,
        }


class JobPropertiesBuilder:
    """Returned by :func:`from_datetime` and :func:`from_now`."""

    def __init__(self, start_from: StartFrom, run_every: Delta | None):
        self._start_from = start_from
        self._run_every = run_every
        self._custom_id: str | None = None

    def with_custom_id(self, custom_id: str) -> Self:
        """Use a caller-chosen job ID. An empty string means no custom ID."""
        if not isinstance(custom_id, str):
            raise InvalidArgument(f"Custom ID must be a string, got {custom_id!r}")
        self._custom_id = custom_id or None
        return self

    def to_payload(self) -> JobProperties:
        return JobProperties(
            start_from=self._start_from,
            run_every=self._run_every,
            custom_id=self._custom_id,
        )


def format_instant(value: datetime) -> str:
    """Render an instant as UTC ISO-8601 with millisecond precision."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    text = value.astimezone(UTC).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def _parse_instant(value: datetime | str) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError as e:
            raise InvalidArgument(f"Invalid datetime: {value!r}") from e
    raise InvalidArgument(f"Expected a datetime or ISO-8601 string, got {value!r}")


def from_datetime(
    when: datetime | str,
    run_every: Callable[[DeltaBuilder], Any] | None = None,
) -> JobPropertiesBuilder:
    """Run first at ``when``; repeat every ``run_every`` delta if given.

    Naive datetimes are taken to be UTC.
    """
    start = DatetimeStart(datetime=format_instant(_parse_instant(when)))
    recurrence: Delta | None = None
    if run_every is not None:
        builder = DeltaBuilder()
        run_every(builder)
        recurrence = builder.to_payload()
    return JobPropertiesBuilder(start, recurrence)


def from_now(
    delta: Callable[[RecurringDeltaBuilder], Any] | None = None,
) -> JobPropertiesBuilder:
    """Run after ``delta`` from now (immediately if omitted).

    Calling ``recurring()`` on the builder repeats the job with the same delta.
    """
    builder = RecurringDeltaBuilder()
    if delta is not None:
        delta(builder)
    accumulated = builder.to_payload()
    run_every = accumulated if builder.is_recurring else None
    return JobPropertiesBuilder(DeltaStart(delta=accumulated), run_every)
