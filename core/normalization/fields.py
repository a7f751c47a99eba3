import re

from core.normalization.tokenizer import BULLET_RE, FIELD_LABELS


# Longest labels first so "Elevation gain/loss" wins over "Elevation".
_LABEL_ALT = "|".join(
    re.escape(label) for label in sorted(FIELD_LABELS, key=len, reverse=True)
)

FIELD_RE = re.compile(
    rf"(?<![\w/])(?:\*\*)?({_LABEL_ALT})(\s*\([^)\n]*\))?(?:\*\*)?\s*:(?:\*\*)?",
    re.IGNORECASE,
)

# A day that already carries "- Start:" is treated as formatted.
FORMATTED_DAY_RE = re.compile(r"^\s*[-*•]\s*(?:\*\*)?Start(?:\*\*)?\s*:", re.IGNORECASE | re.MULTILINE)

_CANONICAL_LABELS = {label.lower(): label for label in FIELD_LABELS}


def canonical_label(raw: str) -> str:
    return _CANONICAL_LABELS.get(raw.lower(), raw)


def split_title(title: str) -> tuple[str, str]:
    """
    Split a day title that has fields run into it.

    "Start Start: Trailhead End: Camp" -> ("Start", "Start: Trailhead End: Camp")
    """
    match = FIELD_RE.search(title)
    if not match:
        return title, ""
    return title[:match.start()].strip(), title[match.start():].strip()


def _field_line(match: re.Match, value: str) -> str:
    label = canonical_label(match.group(1))
    if match.group(2):
        label = f"{label} {match.group(2).strip()}"
    return f"- {label}: {value}".rstrip()


def _split_line(line: str, seen: set[str]) -> list[str]:
    bullet = BULLET_RE.match(line)
    content = line[bullet.end():] if bullet else line

    cuts = []
    for match in FIELD_RE.finditer(content):
        label = canonical_label(match.group(1))
        if label in seen:
            continue
        seen.add(label)
        cuts.append(match)

    if not cuts:
        return [line]

    lines = []
    head = content[:cuts[0].start()].strip()
    if head:
        lines.append(f"- {head}" if bullet else head)

    for i, match in enumerate(cuts):
        end = cuts[i + 1].start() if i + 1 < len(cuts) else len(content)
        lines.append(_field_line(match, content[match.end():end].strip()))

    return lines


def extract_fields(body: str) -> str:
    """
    Rewrite "Label: value" spans of a day body as one "- Label: value"
    bullet per line.

    Only the first occurrence of each label is rewritten, later ones stay
    where they are. Fields keep their source order. Bodies that already
    contain a bulleted Start field are returned untouched.
    """
    if FORMATTED_DAY_RE.search(body):
        return body

    seen: set[str] = set()
    lines = []
    for line in body.split("\n"):
        lines.extend(_split_line(line, seen))
    return "\n".join(lines)
