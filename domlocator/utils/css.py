from __future__ import annotations


def escape_identifier(value: str) -> str:
    """Serializes ``value`` as a CSS identifier, following the CSSOM ``CSS.escape`` rules."""

    if not value:
        return ""
    escaped: list[str] = []
    first = value[0]
    for index, char in enumerate(value):
        code = ord(char)
        if code == 0:
            escaped.append("\ufffd")
        elif (
            0x01 <= code <= 0x1F
            or code == 0x7F
            or (index == 0 and "0" <= char <= "9")
            or (index == 1 and "0" <= char <= "9" and first == "-")
        ):
            escaped.append(f"\\{code:x} ")
        elif index == 0 and char == "-" and len(value) == 1:
            escaped.append("\\-")
        elif code >= 0x80 or char in "-_" or (char.isascii() and char.isalnum()):
            escaped.append(char)
        else:
            escaped.append("\\" + char)
    return "".join(escaped)


def css_string(value: str) -> str:
    """Quotes ``value`` as a CSS string, preferring single quotes."""

    quote = '"' if "'" in value else "'"
    body = value.replace("\\", "\\\\").replace(quote, "\\" + quote)
    body = body.replace("\n", "\\a ").replace("\r", "\\d ").replace("\f", "\\c ")
    return f"{quote}{body}{quote}"


def attribute_selector(attribute: str, value: str, tag: str = "") -> str:
    return f"{tag}[{attribute}={css_string(value)}]"


def class_selector(classes: list[str]) -> str:
    if not classes:
        return ""
    return "." + ".".join(escape_identifier(name) for name in classes)


def js_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n")
    return f"'{escaped}'"
