from datetime import datetime, timezone

from library_api.errors import ValidationError


# INTEGER primary key üst sınırı (signed 64-bit)
MAX_ID = 2 ** 63 - 1


def parse_id(value, field: str = "id") -> int:
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field}")
    if isinstance(value, int):
        parsed = value
    else:
        text = str(value if value is not None else "").strip()
        # isdigit() tek başına "²" gibi unicode rakamları da kabul eder
        if not (text.isascii() and text.isdigit()):
            raise ValidationError(f"Invalid {field}")
        parsed = int(text)
    if parsed < 1 or parsed > MAX_ID:
        raise ValidationError(f"Invalid {field}")
    return parsed


def parse_datetime(value, field: str):
    """ISO-8601 string or datetime -> naive UTC datetime; empty -> None."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValidationError(f"Invalid {field}: expected an ISO-8601 date") from None
    else:
        raise ValidationError(f"Invalid {field}: expected an ISO-8601 date")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def clean_str(value):
    if value is None:
        return None
    text = str(value).strip()
    return text or None
