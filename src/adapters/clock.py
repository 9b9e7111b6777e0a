import calendar
import time
from datetime import UTC, datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo


class LocalZone(tzinfo):
    """
    The server's own zone as the C library sees it (TZ or /etc/localtime).

    Offsets are looked up per instant, so a "month" or "year" that spans a
    DST change still starts at local midnight and every event is keyed with
    the offset in force when it happened.
    """

    def _struct(self, dt: datetime) -> time.struct_time:
        stamp = time.mktime(
            (dt.year, dt.month, dt.day, dt.hour, dt.minute, dt.second, dt.weekday(), 0, -1)
        )
        return time.localtime(stamp)

    def utcoffset(self, dt: datetime | None) -> timedelta:
        if dt is None:
            return timedelta(seconds=time.localtime().tm_gmtoff)
        return timedelta(seconds=self._struct(dt).tm_gmtoff)

    def dst(self, dt: datetime | None) -> None:
        return None

    def tzname(self, dt: datetime | None) -> str:
        if dt is None:
            return time.localtime().tm_zone
        return self._struct(dt).tm_zone

    def fromutc(self, dt: datetime) -> datetime:
        stamp = calendar.timegm(dt.replace(tzinfo=None).timetuple())
        local = time.localtime(stamp)
        return datetime(*local[:6], microsecond=dt.microsecond, tzinfo=self)

    def __repr__(self) -> str:
        return "LocalZone()"


LOCAL_ZONE = LocalZone()


class SystemClock:
    """
    Wall clock for the analytics core.

    Local time is the configured IANA zone, or the server's own zone when
    none is given. Period ranges and bucket keys both use it.
    """

    def __init__(self, tz_name: str | None = None) -> None:
        self._tz: tzinfo = ZoneInfo(tz_name) if tz_name else LOCAL_ZONE

    def now_utc(self) -> datetime:
        return datetime.now(UTC)

    def now_local(self) -> datetime:
        return datetime.now(self._tz)
