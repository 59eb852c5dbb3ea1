"""Strict readers for JSON request values shared by the API blueprints."""


def optional_int(value):
    """None stays None; otherwise a JSON integer is required (ValueError otherwise).

    Whole floats such as ``3.0`` are accepted. Fractions, strings and booleans
    are rejected rather than truncated.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ValueError(value)


def json_bool(value) -> bool:
    if not isinstance(value, bool):
        raise ValueError(value)
    return value
