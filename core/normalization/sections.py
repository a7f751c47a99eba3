from core.normalization.days import BlockKind, has_structure, split_blocks
from core.normalization.tokenizer import (
    BULLET_RE,
    LineKind,
    ScannedLine,
    resolve_section_headings,
    scan_lines,
)


def section_heading(name: str) -> str:
    return f"### {name}"


def separate(out: list[str]) -> None:
    """Leave exactly one blank line at the end of out, none at the start."""
    while out and not out[-1].strip():
        out.pop()
    if out:
        out.append("")


def finish(out: list[str], source: str) -> str:
    while out and not out[-1].strip():
        out.pop()
    text = "\n".join(out)
    return text + "\n" if source.endswith("\n") else text


def trim_blank(lines: list[str]) -> list[str]:
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    return lines[start:end]


def bulletize_line(line: ScannedLine) -> str:
    stripped = line.text.strip()
    if line.kind == LineKind.BLANK:
        return ""
    if line.kind == LineKind.SUBSECTION or stripped.startswith(("-", "*")):
        return stripped
    if stripped.startswith("•"):
        return "- " + BULLET_RE.sub("", stripped, count=1)
    return f"- {stripped}"


def bulletize_section(heading: ScannedLine, lines: list[ScannedLine]) -> list[str]:
    """
    Render one section: its canonical heading, then its content with every
    non-empty line bulleted. Subsection labels ("*Essentials:*") and lines
    already opening with a bullet or emphasis marker are kept as they are.
    """
    content = []
    if heading.rest:
        content.append(f"- {heading.rest}")
    content.extend(bulletize_line(line) for line in lines)
    return [section_heading(heading.name)] + trim_blank(content)


def normalize_section_headers(text: str) -> str:
    """
    Give every detected top-level section a "### Name" heading.

    Sections that already have a marked heading are rewritten in the
    canonical spelling; otherwise the first bare mention of the label is
    promoted. Section content is left as it is.
    """
    lines = scan_lines(text)
    starts = resolve_section_headings(lines)
    if not starts:
        return text

    out: list[str] = []
    for i, line in enumerate(lines):
        if i not in starts:
            out.append(line.text)
            continue
        separate(out)
        out.append(section_heading(line.name))
        if line.rest:
            out.append(line.rest)
    return "\n".join(out)


def bulletize_sections(text: str) -> str:
    """
    Bullet the content of every section that carries a marked heading,
    bounded by one blank line on each side. Text outside sections passes
    through unchanged.
    """
    blocks = split_blocks(scan_lines(text), promote_bare=False)
    if not has_structure(blocks):
        return text

    out: list[str] = []
    for block in blocks:
        if block.kind == BlockKind.SECTION:
            separate(out)
            out.extend(bulletize_section(block.heading, block.lines))
            out.append("")
            continue
        if block.kind == BlockKind.DAY:
            out.append(block.heading.text)
        out.extend(line.text for line in block.lines)

    return finish(out, text)
