"""
Trellis text layout: display-width measurement, word wrapping and aligned lists.

Widths are terminal cells, not characters: rich's cell table counts East-Asian
wide characters and most emoji as two columns, so lists stay aligned with
non-Latin descriptions.
"""
import re
import warnings

from rich.cells import cell_len

from .faults import NarrowListWarning
from .utils import Unset

# breakable blanks only; a no-break space belongs to its word
_BLANKS = re.compile(r"[ \t\r]+")


def measure(text, /):
    """
    Return the number of terminal cells needed to display text.
    """
    return cell_len(text)


def wrap(text, width, /):
    """
    Greedily wrap text so that no line is wider than width cells.

    Behavior
    - explicit line breaks are kept; each paragraph yields at least one line and
      a blank paragraph yields an empty line.
    - words are delimited by spaces and tabs and joined by single spaces; a
      no-break space (U+00A0) never breaks a line and is kept as-is.
    - a word wider than width is emitted alone and never split.
    - empty text yields no lines.
    """
    if not text:
        return []

    lines = []
    for paragraph in text.split("\n"):
        if not (paragraph := paragraph.strip(" \t\r")):
            lines.append("")
            continue

        current = ""
        for word in _BLANKS.split(paragraph):
            if measure(word) > width:
                if current:
                    lines.append(current)
                    current = ""
                lines.append(word)
                continue

            candidate = f"{current} {word}" if current else word
            if measure(candidate) <= width:
                current = candidate
            else:
                lines.append(current)
                current = word
        if current:
            lines.append(current)

    return lines


def align(items, /, *, width=80, gap=2, separator="", force=Unset, indent=0):
    """
    Render (key, description) pairs as a two-column list.

    parameters
    - items: iterable of (key, description) pairs.
    - width: total render width in cells.
    - gap: spaces between the columns when no separator is given.
    - separator: literal text between the columns (e.g. " - ").
    - force: first column width (indent included); defaults to the widest key.
    - indent: spaces before every key.

    layout
    - keys are padded to the first column width; descriptions are wrapped to the
      remaining room and continuation lines start exactly under column two.
    - when no room is left for descriptions, a NarrowListWarning is emitted and
      only the keys are printed.
    """
    items = [(str(key), str(description or "")) for key, description in items]
    if not items:
        return ""

    keys = [" " * indent + key for key, _ in items]
    column = force if force is not Unset else max(map(measure, keys))
    interstitial = separator or " " * gap

    offset = column + measure(interstitial)
    room = width - offset

    if room <= 0:
        warnings.warn(NarrowListWarning(
            "not enough space to format list descriptions (%d cells for a %d cells wide key column)" % (width, offset),
            width=width,
            column=offset,
        ), stacklevel=2)
        return "\n".join(keys)

    lines = []
    for key, (_, description) in zip(keys, items):
        wrapped = wrap(description, room) or [""]
        padding = " " * max(0, column - measure(key))
        lines.append(f"{key}{padding}{interstitial}{wrapped[0]}")
        for line in wrapped[1:]:
            lines.append(" " * offset + line)

    return "\n".join(lines)


__all__ = (
    "measure",
    "wrap",
    "align",
)
