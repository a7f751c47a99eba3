import pytest

from core.normalization.days import day_heading, segment_days
from core.normalization.tokenizer import LineKind, classify, resolve_section_headings, scan_lines
from sample_replies import LOOSE_REPLY


@pytest.mark.parametrize(
    "line, kind",
    [
        ("### Day 1: Lukla", LineKind.DAY_HEADING),
        ("**Day 12: Summit push**", LineKind.DAY_HEADING),
        ("Day 3: Rest", LineKind.DAY_HEADING),
        ("## Packing List", LineKind.MARKED_SECTION),
        ("### 3. practical information:", LineKind.MARKED_SECTION),
        ("### Notes", LineKind.OTHER_HEADING),
        ("Packing List:", LineKind.BARE_SECTION),
        ("**Local Insights**", LineKind.BARE_SECTION),
        ("*Essentials:*", LineKind.SUBSECTION),
        ("- Boots", LineKind.BULLET),
        ("• Boots", LineKind.BULLET),
        ("* Boots", LineKind.BULLET),
        ("", LineKind.BLANK),
        ("Start: Lukla", LineKind.PLAIN),
        ("Packing Listings are long", LineKind.PLAIN),
    ],
)
def test_classify(line, kind):
    assert classify(line).kind == kind


def test_classify_day_heading_details():
    line = classify("**Day 12: Summit push**")
    assert line.number == 12
    assert line.name == "Summit push"


def test_classify_section_details():
    line = classify("## 2. local insights: bow to elders")
    assert line.name == "Local Insights"
    assert line.rest == "bow to elders"


def test_bare_label_promoted_once():
    lines = scan_lines("Packing List\nBoots\nPacking List\nPoles")
    assert resolve_section_headings(lines) == {0}


def test_bare_label_ignored_when_marked_exists():
    lines = scan_lines("Packing List\nBoots\n### Packing List\nPoles")
    assert resolve_section_headings(lines) == {2}
    assert resolve_section_headings(lines, promote_bare=False) == {2}


def test_day_heading():
    assert day_heading(4, "Gokyo Ri") == "### Day 4: Gokyo Ri"
    assert day_heading(4, "") == "### Day 4:"


def test_segment_days():
    segmentation = segment_days(LOOSE_REPLY)

    assert segmentation.preamble.startswith("Get ready for the classic Everest Base Camp")
    assert [day.number for day in segmentation.days] == [1, 2]

    first, second = segmentation.days
    assert first.title == "Lukla to Phakding"
    assert first.header == "### Day 1: Lukla to Phakding"
    assert first.body.startswith("Start: Lukla (2,860m) End: Phakding (2,610m)")
    assert second.body.rstrip().endswith("Water sources: Taps in Monjo, refill and purify")
    assert "Packing List" not in second.body


def test_segment_days_inline_title():
    segmentation = segment_days("Day 1: Start Start: Trailhead End: Camp")

    day = segmentation.days[0]
    assert day.title == "Start"
    assert day.header == "### Day 1: Start"
    assert day.body == "Start: Trailhead End: Camp"


def test_segment_days_without_days():
    text = "No headings in here.\nPacking List\nBoots"

    segmentation = segment_days(text)

    assert segmentation.days == []
    assert segmentation.preamble == text
