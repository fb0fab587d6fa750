"""Input validation — turning typed text into record field values.

Values reach the services as the text the operator typed.  These
helpers parse that text and raise ``ValidationError`` with a readable
message when it does not fit the record field it is destined for.
Nothing is written until a value has passed through here.
"""

_INT32_MAX = 2**31 - 1
_TRUE_WORDS = frozenset({"y", "yes", "true", "1"})
_FALSE_WORDS = frozenset({"n", "no", "false", "0"})


class ValidationError(ValueError):
    """Raise when supplied data breaks a rule before anything is written."""


def parse_int(text: str, *, label: str) -> int:
    """Parse a non-negative integer that fits a record field.

    Raises:
        ValidationError: If the text is not such an integer.

    """
    try:
        value = int(text.strip())
    except ValueError as e:
        msg = f"{label} must be a whole number, got '{text}'"
        raise ValidationError(msg) from e
    if not 0 <= value <= _INT32_MAX:
        msg = f"{label} is out of range: {value}"
        raise ValidationError(msg)
    return value


def parse_float(text: str, *, label: str) -> float:
    """Parse a finite, non-negative decimal number.

    Raises:
        ValidationError: If the text is not such a number.

    """
    try:
        value = float(text.strip())
    except ValueError as e:
        msg = f"{label} must be a number, got '{text}'"
        raise ValidationError(msg) from e
    if not 0 <= value < float("inf"):
        msg = f"{label} is out of range: {text}"
        raise ValidationError(msg)
    return value


def parse_bool(text: str, *, label: str) -> bool:
    """Parse a yes/no answer.

    Raises:
        ValidationError: If the text is not a recognised yes/no word.

    """
    word = text.strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    msg = f"{label} must be yes or no, got '{text}'"
    raise ValidationError(msg)
