"""Decoding of XML character entities in text content."""

NAMED_ENTITIES: dict[str, str] = {
    "lt": "<",
    "gt": ">",
    "amp": "&",
    "quot": '"',
    "apos": "'",
}

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")

# Longest reference body looked at after "&", e.g. "#x10FFFF" or "quot"
MAX_REFERENCE_LENGTH = 16


def decode_xml_entities(text: str) -> str:
    """Replace predefined entities and numeric character references.

    The text is scanned once from left to right, so ``&amp;lt;`` becomes
    ``&lt;`` and is not decoded a second time. A numeric reference whose
    value is not a valid code point decodes to ``"\\x00"``. Anything else
    that starts with ``&`` is kept as-is.
    """
    if "&" not in text:
        return text

    parts: list[str] = []
    cursor = 0
    length = len(text)
    while cursor < length:
        amp = text.find("&", cursor)
        if amp < 0:
            parts.append(text[cursor:])
            break
        parts.append(text[cursor:amp])
        semicolon = text.find(";", amp + 1, amp + 2 + MAX_REFERENCE_LENGTH)
        replacement = (
            _decode_reference(text[amp + 1 : semicolon]) if semicolon > 0 else None
        )
        if replacement is None:
            parts.append("&")
            cursor = amp + 1
        else:
            parts.append(replacement)
            cursor = semicolon + 1

    return "".join(parts)


def _decode_reference(name: str) -> str | None:
    if name in NAMED_ENTITIES:
        return NAMED_ENTITIES[name]
    if not name.startswith("#") or len(name) < 2:
        return None

    if name[1] in "xX":
        digits = name[2:]
        if not digits or not all(ch in _HEX_DIGITS for ch in digits):
            return None
        return _code_point(int(digits, 16))

    digits = name[1:]
    if not digits.isascii() or not digits.isdigit():
        return None
    return _code_point(int(digits))


def _code_point(value: int) -> str:
    try:
        return chr(value)
    except (ValueError, OverflowError):
        return "\x00"
