from app.llm.json_parsing import extract_json_array, strip_code_fences


class TestStripCodeFences:
    def test_removes_fences(self) -> None:
        assert strip_code_fences('```json\n[1]\n```') == "[1]"

    def test_plain_text_untouched(self) -> None:
        assert strip_code_fences("  [1] ") == "[1]"


class TestExtractJsonArray:
    def test_parses_fenced_array(self) -> None:
        assert extract_json_array('```json\n[{"a": 1}]\n```') == [{"a": 1}]

    def test_ignores_surrounding_prose(self) -> None:
        assert extract_json_array('Here you go: [1, 2] hope it helps') == [1, 2]

    def test_invalid_json_gives_none(self) -> None:
        assert extract_json_array("[1, 2") is None
        assert extract_json_array("[1, }]") is None

    def test_no_array_gives_none(self) -> None:
        assert extract_json_array('{"a": 1}') is None
        assert extract_json_array("") is None
