import re
from dataclasses import dataclass
from enum import Enum


SECTION_NAMES = ("Packing List", "Local Insights", "Practical Information")

FIELD_LABELS = (
    "Start",
    "End",
    "Distance",
    "Elevation gain/loss",
    "Elevation",
    "Terrain",
    "Difficulty",
    "Highlights",
    "Lunch",
    "Accommodation",
    "Water sources",
    "Tips",
)

_NUMBERING = r"(?:\d+\s*[.)]\s*)?"
_SECTION_ALT = "|".join(re.escape(name) for name in SECTION_NAMES)

DAY_HEADING_RE = re.compile(r"^\s*(?:#{1,6}\s*)?(\*\*)?Day\s+(\d+)\s*:(.*)$")

# "### Packing List", "## 3. Local Insights:"
MARKED_SECTION_RE = re.compile(
    rf"^\s*#{{1,6}}\s*(?:\*\*)?{_NUMBERING}({_SECTION_ALT})\b(?:\*\*)?\s*(?::(?:\*\*)?)?\s*(.*)$",
    re.IGNORECASE,
)

# "Packing List", "2) local insights:", "**Practical Information**"
BARE_SECTION_RE = re.compile(
    rf"^\s*(?:\*\*)?{_NUMBERING}({_SECTION_ALT})\b(?:\*\*)?\s*(?::(?:\*\*)?)?\s*(.*)$",
    re.IGNORECASE,
)

OTHER_HEADING_RE = re.compile(r"^\s*#{1,6}\s")

# "*Essentials:*" or "**Cultural Considerations:**"
SUBSECTION_RE = re.compile(r"^\s*\*{1,2}[^*\n]+:\*{1,2}\s*$")

BULLET_RE = re.compile(r"^\s*(?:[-•]|\*(?=\s))\s*")


class LineKind(str, Enum):
    DAY_HEADING = "day_heading"
    MARKED_SECTION = "marked_section"
    BARE_SECTION = "bare_section"
    OTHER_HEADING = "other_heading"
    SUBSECTION = "subsection"
    BULLET = "bullet"
    BLANK = "blank"
    PLAIN = "plain"


@dataclass(frozen=True)
class ScannedLine:
    kind: LineKind
    text: str
    # day title or canonical section name
    name: str = ""
    number: int | None = None
    # text following a section label on the same line
    rest: str = ""


def canonical_section_name(raw: str) -> str:
    for name in SECTION_NAMES:
        if name.lower() == raw.lower():
            return name
    return raw


def classify(line: str) -> ScannedLine:
    if not line.strip():
        return ScannedLine(LineKind.BLANK, line)

    day = DAY_HEADING_RE.match(line)
    if day:
        title = day.group(3).strip()
        if day.group(1) and title.endswith("**"):
            title = title[:-2].rstrip()
        return ScannedLine(LineKind.DAY_HEADING, line, name=title, number=int(day.group(2)))

    marked = MARKED_SECTION_RE.match(line)
    if marked:
        return ScannedLine(
            LineKind.MARKED_SECTION,
            line,
            name=canonical_section_name(marked.group(1)),
            rest=marked.group(2).strip(),
        )

    if OTHER_HEADING_RE.match(line):
        return ScannedLine(LineKind.OTHER_HEADING, line)

    bare = BARE_SECTION_RE.match(line)
    if bare:
        return ScannedLine(
            LineKind.BARE_SECTION,
            line,
            name=canonical_section_name(bare.group(1)),
            rest=bare.group(2).strip(),
        )

    if SUBSECTION_RE.match(line):
        return ScannedLine(LineKind.SUBSECTION, line)

    if BULLET_RE.match(line):
        return ScannedLine(LineKind.BULLET, line)

    return ScannedLine(LineKind.PLAIN, line)


def scan_lines(text: str) -> list[ScannedLine]:
    """
    Split a document into classified lines. Nothing is rewritten here,
    every ScannedLine keeps its original text.
    """
    return [classify(line) for line in text.replace("\r\n", "\n").split("\n")]


def resolve_section_headings(lines: list[ScannedLine], promote_bare: bool = True) -> set[int]:
    """
    Return the indices of the lines that open a top-level section.

    Marked headings always count. A bare label is promoted only when its
    section has no marked heading anywhere in the document, and only the
    first bare occurrence is used.
    """
    headings: set[int] = set()

    for name in SECTION_NAMES:
        marked = [
            i for i, line in enumerate(lines)
            if line.kind == LineKind.MARKED_SECTION and line.name == name
        ]
        if marked:
            headings.update(marked)
            continue

        if not promote_bare:
            continue

        for i, line in enumerate(lines):
            if line.kind == LineKind.BARE_SECTION and line.name == name:
                headings.add(i)
                break

    return headings
