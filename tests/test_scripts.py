import importlib.util
import json
from pathlib import Path

import pytest

SCRIPTS = Path(__file__).parent.parent / "scripts"
FIXTURE = Path(__file__).parent / "fixtures" / "deepseek_chat.html"


def load_script(name):
    spec = importlib.util.spec_from_file_location(name, SCRIPTS / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def extract_conversation():
    return load_script("extract_conversation")


@pytest.fixture
def sanitize_script():
    return load_script("sanitize_html")


class TestExtractConversation:
    def test_json_export(self, extract_conversation, tmp_path, capsys):
        output = tmp_path / "chat.json"
        assert extract_conversation.main([str(FIXTURE), "--output", str(output)]) == 0

        data = json.loads(output.read_text(encoding="utf-8"))
        assert len(data["messages"]) == 4
        assert data["metadata"]["chatId"] == "3f2a9c1e-7b4d-4e8a-9c0d-1a2b3c4d5e6f"
        assert "Found 2 user messages, 2 assistant responses" in capsys.readouterr().out

    def test_agent_only_without_thinking(self, extract_conversation, tmp_path):
        output = tmp_path / "chat.json"
        argv = [str(FIXTURE), "-o", str(output), "--messages", "ai", "--no-thinking"]
        assert extract_conversation.main(argv) == 0

        messages = json.loads(output.read_text(encoding="utf-8"))["messages"]
        assert [m["type"] for m in messages] == ["assistant", "assistant"]
        assert not any(m["hasThinking"] for m in messages)

    def test_markdown_export(self, extract_conversation, tmp_path):
        output = tmp_path / "chat.md"
        assert extract_conversation.main([str(FIXTURE), "-o", str(output), "--format", "markdown"]) == 0
        assert output.read_text(encoding="utf-8").startswith("# Quicksort in Python - DeepSeek")

    def test_default_filename(self, extract_conversation, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert extract_conversation.main([str(FIXTURE), "--url", "https://chat.deepseek.com/a/chat/s/abc"]) == 0
        written = list(tmp_path.glob("deepseek-chat-abc-*.json"))
        assert len(written) == 1

    def test_missing_input(self, extract_conversation, tmp_path, capsys):
        assert extract_conversation.main([str(tmp_path / "missing.html")]) == 1
        assert "Cannot read" in capsys.readouterr().err

    def test_bad_environment(self, extract_conversation, monkeypatch, capsys):
        monkeypatch.setenv("TRANSCRIPT_MIN_TURN_LENGTH", "ten")
        assert extract_conversation.main([str(FIXTURE)]) == 1
        assert "TRANSCRIPT_MIN_TURN_LENGTH" in capsys.readouterr().err


class TestSanitizeScript:
    def test_default_output_name(self, sanitize_script, tmp_path):
        page = tmp_path / "page.html"
        page.write_text(FIXTURE.read_text(encoding="utf-8"), encoding="utf-8")

        assert sanitize_script.main([str(page)]) == 0
        cleaned = (tmp_path / "page-clean.html").read_text(encoding="utf-8")
        assert "<script" not in cleaned
        assert "ds-message" in cleaned

    def test_missing_input(self, sanitize_script, tmp_path):
        assert sanitize_script.main([str(tmp_path / "missing.html")]) == 1
