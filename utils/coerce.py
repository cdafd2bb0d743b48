import math

def to_number(value, default: float = 0.0) -> float:
    """Parse a currency/count value, falling back to `default` for anything non-numeric."""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, (int, float)):
        num = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return default
        try:
            num = float(text)
        except ValueError:
            return default
    else:
        return default
    if not math.isfinite(num):
        return default
    return num

def to_count(value, default: int = 0) -> int:
    return int(to_number(value, float(default)))

def clean_date(value) -> str:
    if value is None:
        return ""
    return str(value).strip()
