from datetime import date, datetime, timedelta, timezone


def utc_now():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def iso(value):
    return value.isoformat() if value else None


def today_str(now=None):
    current = now or utc_now()
    return current.strftime("%Y-%m-%d")


def yesterday_str(now=None):
    current = now or utc_now()
    return (current - timedelta(days=1)).strftime("%Y-%m-%d")


def parse_day(value):
    """Parse a YYYY-MM-DD string, returning None when it is not a valid date."""
    try:
        return date.fromisoformat((value or "").strip())
    except ValueError:
        return None
