from pathlib import Path

import pytest

from app.llm.prompt_loader import load_json_schema, load_prompt_template


class TestLoadPromptTemplate:
    def test_loads_bundled_enhancement_prompt(self) -> None:
        template = load_prompt_template("enhancement_prompt.txt")
        assert "{transactions}" in template

    def test_loads_bundled_categorization_prompt(self) -> None:
        template = load_prompt_template("categorization_prompt.txt")
        for placeholder in ("{categories}", "{examples}", "{transactions}"):
            assert placeholder in template

    def test_loads_from_custom_dir(self, tmp_path: Path) -> None:
        (tmp_path / "custom.txt").write_text("Hello {name}", encoding="utf-8")
        assert load_prompt_template("custom.txt", tmp_path) == "Hello {name}"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            load_prompt_template("missing.txt", tmp_path)


class TestLoadJsonSchema:
    def test_loads_bundled_schema(self) -> None:
        schema = load_json_schema("enhancement_schema.json")
        assert isinstance(schema, dict)
        assert schema["type"] == "object"
