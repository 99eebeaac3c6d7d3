"""
sway has a single flat workspace namespace. Every output shows the same
logical tags, so the workspace for a tag on any output but the first carries
the output's position as a superscript suffix: tag "3" on the second output
is the workspace "3²".
"""

SUPERSCRIPT_DIGITS = "⁰¹²³⁴⁵⁶⁷⁸⁹"

_to_superscript = str.maketrans("0123456789", SUPERSCRIPT_DIGITS)
_from_superscript = str.maketrans(SUPERSCRIPT_DIGITS, "0123456789")


def ordinal_suffix(ordinal: int) -> str:
    if ordinal < 0:
        raise ValueError(f"Output ordinal must not be negative: {ordinal}")
    if ordinal == 0:
        return ""
    return str(ordinal + 1).translate(_to_superscript)


def workspace_name(tag: str, ordinal: int) -> str:
    return tag + ordinal_suffix(ordinal)


def split_workspace_name(name: str) -> tuple[str, int]:
    """
    Inverse of `workspace_name`: returns `(tag, ordinal)`.
    Names without a superscript suffix belong to the first output.
    """
    tag = name.rstrip(SUPERSCRIPT_DIGITS)
    suffix = name[len(tag) :]
    if not tag or not suffix or suffix.startswith("⁰"):
        return name, 0

    ordinal = int(suffix.translate(_from_superscript)) - 1
    if ordinal < 1:
        # a bare "¹" is never produced, it is part of the tag
        return name, 0
    return tag, ordinal


def quote(name: str) -> str:
    """Quotes a workspace name for use as a sway command argument."""
    escaped = name.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'
