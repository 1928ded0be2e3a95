"""Object id parsing for user-supplied ids."""

# Texture ids live in the 0x06000000 range; short ids are relative to it
TEXTURE_ID_BASE = 0x06000000

SHORT_HEX_DIGITS = 4
LONG_HEX_DIGITS = 8
SHORT_ID_MAX = 0xFFFF


def parse_object_id(text: str, base: int = TEXTURE_ID_BASE) -> int:
    """Parse an object id given as decimal or hex, absolute or relative.

    ``0x6957``, ``0x06006957``, ``26967`` and ``100690263`` all resolve to
    ``0x06006957``. Four hex digits or a decimal within +/-0xFFFF is taken
    relative to ``base``; eight hex digits or a larger decimal is absolute.
    """
    text = text.strip()
    if not text:
        raise ValueError("Empty object id")

    if text[:2].lower() == "0x":
        digits = text[2:]
        if len(digits) not in (SHORT_HEX_DIGITS, LONG_HEX_DIGITS):
            raise ValueError(f"Hex object id must have 4 or 8 digits: {text!r}")
        value = int(digits, 16)
        if len(digits) == SHORT_HEX_DIGITS:
            value += base
        return value & 0xFFFFFFFF

    try:
        value = int(text, 10)
    except ValueError:
        raise ValueError(f"Invalid object id: {text!r}") from None

    if -SHORT_ID_MAX <= value <= SHORT_ID_MAX:
        value += base
    elif not 0 <= value <= 0xFFFFFFFF:
        raise ValueError(f"Object id out of range: {text!r}")
    return value & 0xFFFFFFFF
