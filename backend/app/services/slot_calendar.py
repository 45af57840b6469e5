"""
Slot calendar: derive an activity's bookable time slots for a calendar date.

Slots are derived from the activity's operating window each call, never stored. A slot's
id is built from its 12-hour display label ("9:00 a.m. - 11:00 a.m." -> "9-00_am_-_11-00_am")
and is the only key the capacity ledger uses for it. TimeSlot.parse is the exact inverse of
TimeSlot.slot_id, so the quote path, the commit path and any job that needs a label or an
end time all agree on the same key.
"""
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

SLOT_SEPARATOR = "_-_"
_SLOT_PART_RE = re.compile(r"^(\d{1,2})-(\d{2})_(am|pm)$")


def format_clock(t: time) -> str:
    """12-hour clock with lowercase a.m./p.m. (e.g. 1:00 p.m.)."""
    hour = t.hour % 12 or 12
    suffix = "a.m." if t.hour < 12 else "p.m."
    return f"{hour}:{t.minute:02d} {suffix}"


def slot_id_from_label(label: str) -> str:
    """Strip periods, whitespace runs to "_", ":" to "-", collapse repeated underscores."""
    key = label.replace(".", "")
    key = re.sub(r"\s+", "_", key)
    key = key.replace(":", "-")
    return re.sub(r"__+", "_", key)


def _parse_clock_part(raw: str) -> time:
    m = _SLOT_PART_RE.match(raw)
    if not m:
        raise ValueError(f"Malformed slot time: {raw!r}")
    hour, minute, meridiem = int(m.group(1)), int(m.group(2)), m.group(3)
    if not 1 <= hour <= 12 or minute > 59:
        raise ValueError(f"Malformed slot time: {raw!r}")
    hour = hour % 12 + (12 if meridiem == "pm" else 0)
    return time(hour, minute)


@dataclass(frozen=True)
class TimeSlot:
    """Half-open interval [start, end) within one day."""

    start: time
    end: time

    @property
    def display(self) -> str:
        return f"{format_clock(self.start)} - {format_clock(self.end)}"

    @property
    def slot_id(self) -> str:
        return slot_id_from_label(self.display)

    @classmethod
    def parse(cls, slot_id: str) -> "TimeSlot":
        """Decode a slot id back into its start and end times. Raises ValueError if malformed."""
        parts = (slot_id or "").split(SLOT_SEPARATOR)
        if len(parts) != 2:
            raise ValueError(f"Malformed slot id: {slot_id!r}")
        return cls(_parse_clock_part(parts[0]), _parse_clock_part(parts[1]))

    def to_dict(self) -> dict[str, str]:
        return {"slotId": self.slot_id, "display": self.display}


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def _from_minutes(m: int) -> time:
    return time(m // 60, m % 60)


def generate_slots(start_time: time, end_time: time, duration_hours: int) -> list[TimeSlot]:
    """Carve consecutive duration-hour slots from start_time; a trailing partial slot is dropped."""
    if duration_hours <= 0:
        return []
    step = duration_hours * 60
    current = _minutes(start_time)
    end = _minutes(end_time)
    slots: list[TimeSlot] = []
    while current < end:
        slot_end = current + step
        if slot_end > end:
            break
        slots.append(TimeSlot(_from_minutes(current), _from_minutes(slot_end)))
        current = slot_end
    return slots


def activity_slots(activity) -> list[TimeSlot]:
    return generate_slots(activity.start_time, activity.end_time, int(activity.duration))


def derive_slots(activity, on_date: date, now_local: datetime, buffer_minutes: int = 30) -> list[TimeSlot]:
    """
    Slots for on_date. When on_date is today (in now_local's clock), slots starting before
    now + buffer are too soon to book and are dropped.
    """
    slots = activity_slots(activity)
    if on_date != now_local.date():
        return slots
    cutoff = now_local + timedelta(minutes=buffer_minutes)
    if cutoff.date() > on_date:
        return []
    cutoff_time = cutoff.time()
    return [s for s in slots if s.start >= cutoff_time]


def display_label_for_slot(activity, slot_id: str) -> str:
    """Display label for one of the activity's slot ids, or "" if the id is not one of its slots."""
    try:
        slot = TimeSlot.parse(slot_id)
    except ValueError:
        return ""
    if slot not in activity_slots(activity):
        return ""
    return slot.display


# --- Fixed-offset local clock (deployment region has no DST) ---


def local_timezone(offset_minutes: int) -> timezone:
    return timezone(timedelta(minutes=offset_minutes))


def local_now(utc_now: datetime, offset_minutes: int) -> datetime:
    return utc_now.astimezone(local_timezone(offset_minutes))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def slot_end_utc(slot_date: date, slot: TimeSlot, offset_minutes: int) -> datetime:
    """The slot's end as an aware UTC instant, reading its wall-clock end in the fixed local offset."""
    local_end = datetime.combine(slot_date, slot.end, tzinfo=local_timezone(offset_minutes))
    return local_end.astimezone(timezone.utc)
