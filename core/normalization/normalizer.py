import logging

from core.normalization.days import (
    Block,
    BlockKind,
    day_heading,
    day_parts,
    has_structure,
    split_blocks,
)
from core.normalization.fields import extract_fields
from core.normalization.sections import bulletize_section, finish, separate
from core.normalization.tokenizer import scan_lines

logger = logging.getLogger(__name__)


# Completion replies come in loosely formatted. One pass over the scanned
# lines rewrites day headings, day fields, section headings and section
# bullets into the layout the frontend renderer parses.

class ItineraryNormalizer:

    def normalize(self, text: str) -> str:
        if not text:
            return text

        blocks = split_blocks(scan_lines(text))
        if not has_structure(blocks):
            logger.debug("No day or section headings found, leaving reply as is")
            return text

        out: list[str] = []
        for block in blocks:
            if block.kind == BlockKind.DAY:
                separate(out)
                out.extend(self._render_day(block))
            elif block.kind == BlockKind.SECTION:
                separate(out)
                out.extend(bulletize_section(block.heading, block.lines))
                out.append("")
            else:
                out.extend(line.text for line in block.lines)

        logger.debug(
            f"Normalized reply: {sum(b.kind == BlockKind.DAY for b in blocks)} days, "
            f"{sum(b.kind == BlockKind.SECTION for b in blocks)} sections"
        )
        return finish(out, text)

    def _render_day(self, block: Block) -> list[str]:
        title, body = day_parts(block)
        fields = extract_fields("\n".join(body))
        return [day_heading(block.heading.number, title)] + fields.split("\n")


normalizer = ItineraryNormalizer()


def normalize_itinerary(text: str) -> str:
    return normalizer.normalize(text)
