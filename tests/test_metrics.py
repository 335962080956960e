import json
from pathlib import Path

import pytest

import metrics_iob
from onlp.errors import OutOfSyncError

GOLD = (
    "Sentence: 1;Jan;NNP;B-PER\n"
    ";Smit;NNP;I-PER\n"
    ";speaks;VBZ;O\n"
    "Sentence: 2;in;IN;O\n"
    ";Delft;NNP;B-LOC\n"
)

PRED_OK = (
    "Sentences;Word;POST;Predicted\n"
    "Sentence: 1;Jan;NNP;B-PER\n"
    ";Smit;NNP;I-PER\n"
    ";speaks;VBZ;O\n"
    "Sentence: 2;in;IN;O\n"
    ";Delft;NNP;B-LOC\n"
)


def write(tmp_path: Path, name: str, text: str) -> str:
    p = tmp_path / name
    p.write_text(text, encoding="utf-8")
    return str(p)


def test_perfect_prediction(tmp_path):
    res = metrics_iob.evaluate(write(tmp_path, "gold.csv", GOLD), write(tmp_path, "pred.csv", PRED_OK))
    assert res["f1"] == pytest.approx(1.0)
    assert res["sentences"] == 2 and res["tokens"] == 5
    assert set(res["per_class"]) == {"PER", "LOC"}


def test_missed_entity(tmp_path):
    pred = PRED_OK.replace(";Delft;NNP;B-LOC", ";Delft;NNP;O")
    res = metrics_iob.evaluate(write(tmp_path, "gold.csv", GOLD), write(tmp_path, "pred.csv", pred))
    assert res["precision"] == pytest.approx(1.0)
    assert res["recall"] == pytest.approx(0.5)
    assert res["f1"] == pytest.approx(2 / 3)


def test_gold_with_header_and_sentinel(tmp_path):
    gold = write(tmp_path, "gold.csv", "Sentence #;Word;POS;Tag\n" + GOLD + ";;;\n")
    res = metrics_iob.evaluate(gold, write(tmp_path, "pred.csv", PRED_OK), gold_header=True)
    assert res["tokens"] == 5


def test_word_mismatch(tmp_path):
    pred = PRED_OK.replace(";speaks;", ";talks;")
    with pytest.raises(OutOfSyncError):
        metrics_iob.evaluate(write(tmp_path, "gold.csv", GOLD), write(tmp_path, "pred.csv", pred))


def test_length_mismatch(tmp_path):
    pred = "\n".join(PRED_OK.splitlines()[:-1]) + "\n"
    with pytest.raises(OutOfSyncError):
        metrics_iob.evaluate(write(tmp_path, "gold.csv", GOLD), write(tmp_path, "pred.csv", pred))


def test_cli_dump_json(tmp_path, capsys):
    dump = tmp_path / "metrics.json"
    metrics_iob.main([
        "--gold", write(tmp_path, "gold.csv", GOLD),
        "--pred", write(tmp_path, "pred.csv", PRED_OK),
        "--dump-json", str(dump),
    ])
    assert "micro_f1" in capsys.readouterr().out
    assert json.loads(dump.read_text(encoding="utf-8"))["f1"] == pytest.approx(1.0)


def test_cli_out_of_sync_exits(tmp_path):
    pred = PRED_OK.replace(";speaks;", ";talks;")
    with pytest.raises(SystemExit) as ei:
        metrics_iob.main(["--gold", write(tmp_path, "g.csv", GOLD), "--pred", write(tmp_path, "p.csv", pred)])
    assert ei.value.code == 1
