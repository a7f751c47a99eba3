import pytest

from core.normalization.fields import canonical_label, extract_fields, split_title


@pytest.mark.parametrize(
    "body, expected",
    [
        ("Distance: 7 km (4.3 miles)", "- Distance: 7 km (4.3 miles)"),
        ("elevation gain/loss: 500m", "- Elevation gain/loss: 500m"),
        ("Elevation (approx.): 600 m", "- Elevation (approx.): 600 m"),
        ("**Lunch:** Momos in Monjo", "- Lunch: Momos in Monjo"),
        ("WATER SOURCES: streams", "- Water sources: streams"),
        ("A short day. Distance: 4 km", "A short day.\n- Distance: 4 km"),
        ("- Terrain: scree Difficulty: Hard", "- Terrain: scree\n- Difficulty: Hard"),
    ],
)
def test_extract_fields(body, expected):
    assert extract_fields(body) == expected


def test_several_fields_on_one_line():
    body = "Start: Lukla End: Phakding Distance: 8 km"
    assert extract_fields(body) == "- Start: Lukla\n- End: Phakding\n- Distance: 8 km"


@pytest.mark.parametrize(
    "body",
    [
        "Enjoy the weekend: no trekking today",
        "Restart: not a label",
        "Nothing to see here",
        "",
    ],
)
def test_non_fields_are_untouched(body):
    assert extract_fields(body) == body


def test_formatted_body_is_untouched():
    body = "- Start: Lukla\nEnd: Phakding"
    assert extract_fields(body) == body


def test_bold_bulleted_start_counts_as_formatted():
    body = "- **Start:** Lukla\nEnd: Phakding"
    assert extract_fields(body) == body


def test_only_first_occurrence_rewritten():
    body = "Tips: one\nSome text\nTips: two"
    assert extract_fields(body) == "- Tips: one\nSome text\nTips: two"


def test_unmatched_lines_keep_position():
    body = "Morning climb.\nStart: Lukla\nGreat views.\nEnd: Phakding"
    assert extract_fields(body) == "Morning climb.\n- Start: Lukla\nGreat views.\n- End: Phakding"


def test_split_title():
    assert split_title("Start Start: Trailhead End: Camp") == ("Start", "Start: Trailhead End: Camp")
    assert split_title("Lukla to Phakding") == ("Lukla to Phakding", "")


def test_canonical_label():
    assert canonical_label("elevation GAIN/LOSS") == "Elevation gain/loss"
    assert canonical_label("tips") == "Tips"
