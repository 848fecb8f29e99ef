# tests/test_cli.py
import io
import sys
from unittest.mock import patch

import pyperclip
import pytest

from clipchunk.cli import build_chunks, main, run
from clipchunk.core.delivery import StreamSink, deliver_chunks, no_wait
from clipchunk.errors import ConfigurationError
from clipchunk.models import Chunk
from clipchunk.utils.tokenizer import Tokenizer

EXPECTED_TOKENS = (
    "=====<test_files/file1.txt>=====\nHello,",
    "world!\nThis",
    "is",
    "a",
    "test.\n",
    "=====<test_files/file2.txt>=====\nAnother",
    "test",
    "file.\nWith",
    "multiple",
    "lines.\n",
)


@pytest.fixture
def project(tmp_path, monkeypatch):
    """Two small text files under ./test_files, with the cwd set to their parent."""
    files = tmp_path / "test_files"
    files.mkdir()
    (files / "file1.txt").write_text("Hello, world!\nThis is a test.\n", encoding="utf-8")
    (files / "file2.txt").write_text("Another test file.\nWith multiple lines.\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def clipboard(monkeypatch):
    """Replaces the system clipboard with a list of copied texts."""
    copied = []
    monkeypatch.setattr(pyperclip, "copy", copied.append)
    monkeypatch.setattr(pyperclip, "paste", lambda: copied[-1] if copied else "")
    return copied


# --- Test 1: Pipeline ---

def test_two_files_fit_in_one_chunk(project):
    chunks = build_chunks("test_files", "*.txt", 100)
    assert len(chunks) == 1
    assert chunks[0].tokens == EXPECTED_TOKENS


def test_small_limit_splits_between_files(project):
    chunks = build_chunks("test_files", "*.txt", 5)
    assert [c.tokens for c in chunks] == [EXPECTED_TOKENS[:5], EXPECTED_TOKENS[5:]]


def test_run_delivers_joined_text(project):
    stream = io.StringIO()
    delivered = run("test_files", "*.txt", 100, sink=StreamSink(stream), wait=no_wait)
    assert delivered == 1
    assert stream.getvalue() == " ".join(EXPECTED_TOKENS) + "\n"


def test_invalid_limit_rejected_before_reading(project, monkeypatch):
    import clipchunk.core.scanner as scanner_module

    def must_not_read(path):
        raise AssertionError(f"read {path}")

    monkeypatch.setattr(scanner_module, "read_lines", must_not_read)
    with pytest.raises(ConfigurationError):
        run("test_files", "*.txt", 0, sink=StreamSink(io.StringIO()), wait=no_wait)


def test_bad_line_does_not_stop_the_run(project, capsys):
    (project / "test_files" / "file0.txt").write_bytes(b"\xff\xff\nkept\n")
    chunks = build_chunks("test_files", "*.txt", 100)
    assert chunks[0].tokens[0] == "=====<test_files/file0.txt>=====\nkept\n"
    assert chunks[0].tokens[1:] == EXPECTED_TOKENS
    assert "Failed to read line 1" in capsys.readouterr().err


def test_no_matching_files_skips_sink(project, capsys):
    class ExplodingSink(StreamSink):
        def deliver(self, text):
            raise AssertionError("nothing should be delivered")

    assert run("test_files", "*.rs", 100, sink=ExplodingSink(), wait=no_wait) == 0
    assert "No matching files found." in capsys.readouterr().out


def test_stats_table(project, monkeypatch, capsys):
    monkeypatch.setattr(Tokenizer, "count", staticmethod(lambda text: 42))
    run("test_files", "*.txt", 5, sink=StreamSink(io.StringIO()), wait=no_wait, stats=True)
    out = capsys.readouterr().out
    assert "Total chunks: 2" in out
    assert "Total tokens: 10" in out
    assert "42" in out


# --- Test 2: Delivery loop ---

def test_wait_only_between_chunks():
    chunks = [Chunk(i, (f"c{i}",)) for i in range(3)]
    stream = io.StringIO()
    waits = []
    assert deliver_chunks(chunks, StreamSink(stream), lambda: waits.append(1)) == 3
    assert len(waits) == 2
    assert stream.getvalue() == "c0\nc1\nc2\n"


def test_single_chunk_never_waits():
    def fail():
        raise AssertionError("should not wait")

    assert deliver_chunks([Chunk(0, ("only",))], StreamSink(io.StringIO()), fail) == 1


# --- Test 3: Command line ---

def test_main_stdout(project, capsys):
    with patch.object(sys, "argv", ["clipchunk", "test_files", "*.txt", "100", "--stdout"]):
        main()
    captured = capsys.readouterr()
    assert captured.out == " ".join(EXPECTED_TOKENS) + "\n"
    assert "--- clipchunk ---" in captured.err


def test_main_clipboard_pauses_between_chunks(project, clipboard, monkeypatch):
    prompts = []
    monkeypatch.setattr("builtins.input", lambda prompt: prompts.append(prompt) or "")

    with patch.object(sys, "argv", ["clipchunk", "test_files", "*.txt", "5"]):
        main()

    assert clipboard == [" ".join(EXPECTED_TOKENS[:5]), " ".join(EXPECTED_TOKENS[5:])]
    assert prompts == ["Copied a chunk. Press Enter to continue..."]


def test_main_yes_skips_prompts(project, clipboard, monkeypatch):
    def fail(prompt):
        raise AssertionError("should not prompt")

    monkeypatch.setattr("builtins.input", fail)
    with patch.object(sys, "argv", ["clipchunk", "test_files", "*.txt", "3", "-y"]):
        main()
    assert len(clipboard) == 4


def test_main_exclude(project, clipboard):
    with patch.object(sys, "argv", ["clipchunk", "test_files", "*.txt", "--exclude", "file2.txt", "-y"]):
        main()
    assert clipboard == [" ".join(EXPECTED_TOKENS[:5])]


def test_main_overflow_mode(project, clipboard, capsys):
    with patch.object(sys, "argv", ["clipchunk", "test_files", "*.txt", "3", "--mode", "overflow", "-y"]):
        main()
    assert clipboard == [" ".join(EXPECTED_TOKENS[:5]), " ".join(EXPECTED_TOKENS[5:])]
    assert "exceeds the limit of 3" in capsys.readouterr().err


def test_main_clipboard_unavailable(project, monkeypatch, capsys):
    def no_clipboard():
        raise pyperclip.PyperclipException("no mechanism")

    monkeypatch.setattr(pyperclip, "paste", no_clipboard)
    with patch.object(sys, "argv", ["clipchunk", "test_files", "*.txt"]):
        with pytest.raises(SystemExit) as exc:
            main()
    assert exc.value.code == 1
    assert "Failed to initialize the clipboard" in capsys.readouterr().err


def test_main_eof_at_prompt_cancels(project, clipboard, monkeypatch, capsys):
    def closed(prompt):
        raise EOFError

    monkeypatch.setattr("builtins.input", closed)
    with patch.object(sys, "argv", ["clipchunk", "test_files", "*.txt", "5"]):
        with pytest.raises(SystemExit) as exc:
            main()
    assert exc.value.code == 1
    assert len(clipboard) == 1
    captured = capsys.readouterr()
    assert "Cancelled." in captured.err
    assert "Cancelled." not in captured.out


def test_main_missing_directory(tmp_path, capsys):
    with patch.object(sys, "argv", ["clipchunk", str(tmp_path / "nope"), "*.txt", "--stdout"]):
        with pytest.raises(SystemExit) as exc:
            main()
    assert exc.value.code == 1
    assert "Invalid directory" in capsys.readouterr().err


@pytest.mark.parametrize(
    "argv",
    [
        ["clipchunk"],
        ["clipchunk", "test_files"],
        ["clipchunk", "test_files", "*.txt", "many"],
        ["clipchunk", "test_files", "*.txt", "0"],
        ["clipchunk", "test_files", "*.txt", "--mode", "truncate"],
    ],
)
def test_main_bad_arguments(project, argv):
    with patch.object(sys, "argv", argv):
        with pytest.raises(SystemExit) as exc:
            main()
    assert exc.value.code == 2
