import pytest

from services.uploader.base import ConsolePrompter, LocalFileSystem


def test_local_file_system_lists_sorted_json_files(tmp_path):
    (tmp_path / "b.json").write_text("[]", encoding="utf-8")
    (tmp_path / "a.json").write_text("{}", encoding="utf-8")
    (tmp_path / "readme.md").write_text("x", encoding="utf-8")
    (tmp_path / "nested.json").mkdir()

    file_system = LocalFileSystem()

    assert file_system.exists(str(tmp_path))
    assert file_system.list_json_files(str(tmp_path)) == ["a.json", "b.json"]
    assert file_system.read_text(str(tmp_path), "a.json") == "{}"


def test_local_file_system_missing_directory(tmp_path):
    assert not LocalFileSystem().exists(str(tmp_path / "missing"))


@pytest.mark.parametrize("answer,expected", [
    ("yes", True),
    ("Y", True),
    ("  YES ", True),
    ("no", False),
    ("", False),
    ("si", False),
])
def test_console_prompter_answers(answer, expected):
    questions = []

    def fake_input(question):
        questions.append(question)
        return answer

    assert ConsolePrompter(fake_input).confirm("Continue? ") is expected
    assert questions == ["Continue? "]


def test_console_prompter_end_of_input():
    def closed_input(question):
        raise EOFError

    assert ConsolePrompter(closed_input).confirm("Continue? ") is False
