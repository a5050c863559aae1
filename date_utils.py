import datetime


class DateUtils:
    """Date helpers operating on ISO formatted strings."""

    @staticmethod
    def current_date() -> str:
        return datetime.date.today().isoformat()

    @staticmethod
    def current_datetime() -> str:
        return datetime.datetime.now(datetime.timezone.utc).isoformat()

    @staticmethod
    def parse(value: str | datetime.date | datetime.datetime) -> datetime.datetime:
        """Return ``value`` as timezone-aware datetime in UTC."""
        if isinstance(value, datetime.datetime):
            dt = value
        elif isinstance(value, datetime.date):
            dt = datetime.datetime(value.year, value.month, value.day)
        else:
            dt = datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=datetime.timezone.utc)
        return dt

    @staticmethod
    def to_date(value: str | datetime.date | datetime.datetime) -> datetime.date:
        if isinstance(value, datetime.datetime):
            return value.date()
        if isinstance(value, datetime.date):
            return value
        return datetime.date.fromisoformat(value[:10])

    @classmethod
    def add_days(cls, date: str, days: int) -> str:
        return (cls.to_date(date) + datetime.timedelta(days=days)).isoformat()

    @classmethod
    def days_ago(cls, days: int, today: str | None = None) -> str:
        return cls.add_days(today or cls.current_date(), -days)

    @classmethod
    def week_start(cls, date: str) -> str:
        """Return the Monday of the week containing ``date``."""
        d = cls.to_date(date)
        return (d - datetime.timedelta(days=d.weekday())).isoformat()

    @classmethod
    def days_between(cls, start: str, end: str) -> float:
        """Return the signed number of days from ``start`` to ``end``."""
        delta = cls.parse(end) - cls.parse(start)
        return delta.total_seconds() / 86400

    @classmethod
    def generate_date_range(cls, start: str, end: str) -> list[str]:
        current = cls.to_date(start)
        last = cls.to_date(end)
        dates: list[str] = []
        while current <= last:
            dates.append(current.isoformat())
            current += datetime.timedelta(days=1)
        return dates

    @classmethod
    def month_key(cls, date: str) -> str:
        """Return the ``YYYY-MM`` month of ``date``."""
        return cls.to_date(date).isoformat()[:7]

    @classmethod
    def next_month_start(cls, date: str) -> str:
        d = cls.to_date(date)
        if d.month == 12:
            return datetime.date(d.year + 1, 1, 1).isoformat()
        return datetime.date(d.year, d.month + 1, 1).isoformat()

    @staticmethod
    def mm_ss_to_seconds(value: str) -> int:
        """Convert an ``MM:SS`` duration to seconds."""
        minutes, seconds = value.split(":")
        return int(minutes) * 60 + int(seconds)
