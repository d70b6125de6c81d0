"""Fallback chain for AI match responses."""

from gateway.match_parser import extract_json_object, parse_matches


def test_strict_json_is_parsed_directly():
    assert parse_matches('{"matches": ["Red Running Shoes"]}') == ["Red Running Shoes"]


def test_json_wrapped_in_prose_or_fences_is_extracted():
    raw = 'Sure! Here you go:\n```json\n{"matches": ["A", "B"]}\n```'

    assert parse_matches(raw) == ["A", "B"]


def test_unparseable_text_means_no_matches():
    assert parse_matches("I could not find anything.") == []
    assert parse_matches("{not json at all}") == []
    assert parse_matches("") == []


def test_unexpected_shapes_mean_no_matches():
    assert parse_matches('["A", "B"]') == []
    assert parse_matches('{"matches": "A"}') == []
    assert parse_matches("{}") == []


def test_non_string_entries_are_dropped_and_duplicates_collapsed():
    assert parse_matches('{"matches": ["A", 3, null, "A", "B"]}') == ["A", "B"]


def test_at_most_five_titles_are_kept():
    raw = '{"matches": ["1", "2", "3", "4", "5", "6", "7"]}'

    assert parse_matches(raw) == ["1", "2", "3", "4", "5"]


def test_extract_json_object_prefers_whole_text():
    assert extract_json_object('{"a": 1}') == {"a": 1}
    assert extract_json_object("noise") is None
