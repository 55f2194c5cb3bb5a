from typing import Any, Optional


def require_positive_number(v: float, name: str = "value") -> None:
    if v <= 0:
        raise ValueError(f"{name} must be > 0")


def positive_int(v: Any) -> Optional[int]:
    """Integer > 0 from an int, integral float or decimal-digit string; None otherwise."""
    if isinstance(v, bool) or v is None:
        return None
    if isinstance(v, float):
        if not v.is_integer():
            return None
        v = int(v)
    if isinstance(v, str):
        v = v.strip()
        # isdigit() пропускает "²", который int() не принимает
        if not v.isdecimal():
            return None
        v = int(v)
    if isinstance(v, int) and v > 0:
        return v
    return None
