from dataclasses import dataclass, field
from enum import Enum

from core.normalization.fields import split_title
from core.normalization.tokenizer import (
    LineKind,
    ScannedLine,
    resolve_section_headings,
    scan_lines,
)


class BlockKind(str, Enum):
    PREAMBLE = "preamble"
    DAY = "day"
    SECTION = "section"
    # anything after a section closed by an unrelated heading
    OTHER = "other"


@dataclass
class Block:
    kind: BlockKind
    heading: ScannedLine | None = None
    lines: list[ScannedLine] = field(default_factory=list)


@dataclass
class DayBlock:
    number: int
    title: str
    header: str
    body: str


@dataclass
class DaySegmentation:
    preamble: str
    days: list[DayBlock]


def day_heading(number: int, title: str) -> str:
    return f"### Day {number}: {title}".rstrip()


def split_blocks(lines: list[ScannedLine], promote_bare: bool = True) -> list[Block]:
    """
    Group scanned lines into blocks.

    A day block runs until the next day heading or section heading. A
    section runs until the next heading of any kind.
    """
    section_starts = resolve_section_headings(lines, promote_bare=promote_bare)
    blocks = [Block(BlockKind.PREAMBLE)]

    for i, line in enumerate(lines):
        current = blocks[-1]

        if line.kind == LineKind.DAY_HEADING:
            blocks.append(Block(BlockKind.DAY, heading=line))
        elif i in section_starts:
            blocks.append(Block(BlockKind.SECTION, heading=line))
        elif current.kind == BlockKind.SECTION and line.kind == LineKind.OTHER_HEADING:
            blocks.append(Block(BlockKind.OTHER, lines=[line]))
        else:
            current.lines.append(line)

    return blocks


def has_structure(blocks: list[Block]) -> bool:
    return any(block.kind in (BlockKind.DAY, BlockKind.SECTION) for block in blocks)


def day_parts(block: Block) -> tuple[str, list[str]]:
    """Title and raw body lines of a day block."""
    title, remainder = split_title(block.heading.name)
    body = [line.text for line in block.lines]
    if remainder:
        body.insert(0, remainder)
    return title, body


def segment_days(text: str) -> DaySegmentation:
    """
    Split a document into its leading preamble and its day blocks.

    Text that belongs to sections is not part of any day. A document without
    day headings comes back as a single preamble holding the original text.
    """
    blocks = split_blocks(scan_lines(text))
    days = []
    for block in blocks:
        if block.kind != BlockKind.DAY:
            continue
        number = block.heading.number
        title, body = day_parts(block)
        days.append(DayBlock(number, title, day_heading(number, title), "\n".join(body)))

    if not days:
        return DaySegmentation(preamble=text, days=[])

    preamble = "\n".join(line.text for line in blocks[0].lines)
    return DaySegmentation(preamble=preamble, days=days)
