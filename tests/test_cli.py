"""End-to-end tests for the pwgram command line."""

import io

import pytest

from pwgram.bigram import BigramModel, State
from pwgram.cli import main
from pwgram.config import get_settings
from pwgram.tokenize import tokenize
from pwgram.train import train


@pytest.fixture
def corpus_path(tmp_path, words):
    path = tmp_path / "words.txt"
    path.write_text(words, encoding="utf-8")
    return path


@pytest.fixture
def model_path(tmp_path, corpus_path):
    path = tmp_path / "words.pwgram"
    assert main(["train", str(corpus_path), "-o", str(path)]) == 0
    return path


def test_train_writes_model_matching_library_training(model_path, words):
    model = BigramModel.loads(model_path.read_text(encoding="utf-8"))

    assert model == train(tokenize(words), {"\n", "\r\n"})


def test_train_reads_stdin_and_prints_model(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("the\nthat\n"))

    assert main(["train", "-m", "th", "-d", "x"]) == 0

    model = BigramModel.loads(capsys.readouterr().out)
    assert model[State.START].outcomes() == ("th",)


def test_train_collision_option(tmp_path, capsys):
    corpus = tmp_path / "c.txt"
    corpus.write_text("xa\nxb\n" + "xc\n" * 1000, encoding="utf-8")

    assert main(["train", str(corpus), "--collision", "reserve"]) == 0

    model = BigramModel.loads(capsys.readouterr().out)
    assert "a" in model[State.after("x")]


def test_generate_prints_requested_passwords(model_path, capsys):
    assert main(["generate", str(model_path), "-e", "20", "-n", "3", "--seed", "8"]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 3
    assert all(lines)


def test_generate_is_reproducible_with_seed(model_path, capsys):
    main(["generate", str(model_path), "-e", "30", "--seed", "8"])
    first = capsys.readouterr().out
    main(["generate", str(model_path), "-e", "30", "--seed", "8"])
    second = capsys.readouterr().out

    assert first == second


def test_generate_show_entropy(model_path, capsys):
    assert main(["generate", str(model_path), "-e", "25", "--show-entropy", "--seed", "1"]) == 0

    password, bits = capsys.readouterr().out.rstrip("\n").split("\t")
    assert password
    assert float(bits) >= 25.0


def test_generate_reads_model_from_stdin(model_path, monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO(model_path.read_text(encoding="utf-8")))

    assert main(["generate", "-e", "10"]) == 0
    assert capsys.readouterr().out.strip()


def test_generate_uses_entropy_setting(model_path, monkeypatch, capsys):
    monkeypatch.setenv("PWGRAM_MIN_ENTROPY", "0")
    get_settings.cache_clear()

    assert main(["generate", str(model_path)]) == 0
    assert capsys.readouterr().out == "\n"


def test_generate_empty_model_prints_empty_line(tmp_path, capsys):
    path = tmp_path / "empty.pwgram"
    path.write_text(train([]).dumps(), encoding="utf-8")

    assert main(["generate", str(path)]) == 0
    assert capsys.readouterr().out == "\n"


def test_generate_rejects_malformed_model(tmp_path, capsys):
    path = tmp_path / "bad.pwgram"
    path.write_text("(not a model)", encoding="utf-8")

    assert main(["generate", str(path)]) == 1
    assert "pwgram: error:" in capsys.readouterr().err


def test_missing_input_file_is_reported(tmp_path, capsys):
    assert main(["train", str(tmp_path / "nope.txt")]) == 1
    assert "pwgram: error:" in capsys.readouterr().err


def test_negative_count_is_reported(model_path, capsys):
    assert main(["generate", str(model_path), "-n", "-1"]) == 1
    assert "count" in capsys.readouterr().err


def test_inspect_summarizes_model(model_path, capsys):
    assert main(["inspect", str(model_path), "--steps", "5", "-e", "20"]) == 0

    out = capsys.readouterr().out
    assert "states:" in out
    assert "absorbing states:" in out
    assert "steps to 20 bits:" in out
    step_line = next(line for line in out.splitlines() if line.startswith("step bits:"))
    assert len(step_line.split(":", 1)[1].split()) == 5


def test_inspect_empty_model_is_unreachable(tmp_path, capsys):
    path = tmp_path / "empty.pwgram"
    path.write_text(train([]).dumps(), encoding="utf-8")

    assert main(["inspect", str(path)]) == 0
    assert "unreachable" in capsys.readouterr().out


def test_inspect_writes_plot(model_path, tmp_path):
    import matplotlib

    matplotlib.use("Agg")
    plot = tmp_path / "entropy.png"

    assert main(["inspect", str(model_path), "--plot", str(plot)]) == 0
    assert plot.exists()
    assert plot.stat().st_size > 0


def test_subcommand_is_required():
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 2


def test_newline_delimits_even_when_settings_replace_delimiters(monkeypatch, capsys):
    monkeypatch.setenv("PWGRAM_DELIMITERS", '["-"]')
    get_settings.cache_clear()
    monkeypatch.setattr("sys.stdin", io.StringIO("ab\ncd-ef\n"))

    assert main(["train"]) == 0

    model = BigramModel.loads(capsys.readouterr().out)
    assert model.tokens() == {"a", "b", "c", "d", "e", "f"}
    assert model[State.START].outcomes() == ("a", "c", "e")
