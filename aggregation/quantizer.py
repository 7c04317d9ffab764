"""Price quantization helpers."""


def round_to_multiple(value: float, unit: float) -> float:
    """
    Round `value` to the nearest multiple of `unit`.

    Half-up on the quotient with truncation toward zero, so 2.5 units
    becomes 3 units. This is not banker's rounding.
    """
    return int(value / unit + 0.5) * unit


def round_half_up(value: float) -> float:
    """Round a non-negative percentage to the nearest whole number, ties up."""
    return float(round_to_multiple(value, 1))


def round_precision(value: float, decimals: int) -> float:
    """Round to a fixed number of decimals."""
    return round(value, decimals)


def precision_from_tick(tick: str, default: int = 8) -> int:
    """
    Number of decimals implied by a tick size string.

    "0.01000000" -> 2, "1.00000000" -> 0, "1" -> 0.
    """
    tick = tick.strip()
    dot = tick.find(".")
    if dot > -1:
        for n in range(dot + 1, len(tick)):
            if tick[n] != "0":
                return n - dot
        return 0
    try:
        return 0 if int(tick) == 1 else default
    except ValueError:
        return default
