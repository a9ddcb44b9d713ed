from datetime import datetime, timedelta, timezone

# India Standard Time, applied as a fixed offset (no DST)
IST_OFFSET = timedelta(hours=5, minutes=30)


def utcnow():
    """Current UTC time as a naive datetime (the way it is stored)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat_z(value):
    """Render a naive UTC datetime as `2026-10-19T10:15:30.123Z`."""
    if value is None:
        return None
    return value.strftime('%Y-%m-%dT%H:%M:%S.') + f'{value.microsecond // 1000:03d}Z'


def parse_isoformat_z(value):
    return datetime.strptime(value, '%Y-%m-%dT%H:%M:%S.%fZ')


def ist_shifted_isoformat(value):
    """
    Wall-clock IST rendered with a `Z` suffix.

    Loan transaction history stores this shifted value as-is, so the stored
    string is not a real UTC instant.
    """
    return isoformat_z(value + IST_OFFSET)


def shift_timestamp_to_ist(timestamp):
    """Shift a stored `...Z` timestamp string by +05:30 for display."""
    return ist_shifted_isoformat(parse_isoformat_z(timestamp))


def format_ist(value):
    """`19/10/2026, 15:45:30` in IST, the way deactivation results report time."""
    return (value + IST_OFFSET).strftime('%d/%m/%Y, %H:%M:%S')
