from ai_pm.utils.json_parser import extract_items, parse_items, parse_json_with_retry


def test_parses_plain_json():
    value, error = parse_json_with_retry('{"a": 1}')

    assert value == {"a": 1}
    assert error is None


def test_strips_markdown_code_fence():
    value, error = parse_json_with_retry('```json\n[{"title": "x"}]\n```')

    assert value == [{"title": "x"}]
    assert error is None


def test_fixes_trailing_commas():
    value, _ = parse_json_with_retry('{"items": [1, 2,],}')

    assert value == {"items": [1, 2]}


def test_reports_failure_without_raising():
    value, error = parse_json_with_retry("not json at all", log_errors=False)

    assert value is None
    assert "Failed to parse JSON" in error
    assert parse_json_with_retry("")[1] == "Input is not a valid string"


def test_extract_items_prefers_bare_array_then_wrapper_keys():
    assert extract_items([1, 2]) == [1, 2]
    assert extract_items({"proposals": [1]}) == [1]
    assert extract_items({"issues": [2]}) == [2]
    assert extract_items({"tasks": [3]}) == []
    assert extract_items({"tasks": [3]}, ("proposals", "tasks")) == [3]
    assert extract_items({"proposals": "nope"}) == []
    assert extract_items("text") == []


def test_parse_items_never_raises():
    assert parse_items(None) == []
    assert parse_items("{broken") == []
    assert parse_items('{"issues": [{"title": "t"}]}') == [{"title": "t"}]
