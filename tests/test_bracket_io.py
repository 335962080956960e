from onlp.bracket_io import read_bracket_lines, read_predictions, tokenize_line, write_bracket_lines
from onlp.iob_codec import EndMarker, Prediction, StartMarker, Word


def test_tokenize_line_ignores_extra_whitespace():
    assert tokenize_line("<START:PER>  Jan <END> \n") == [StartMarker("PER"), Word("Jan"), EndMarker()]
    assert tokenize_line("\n") == []


def test_write_and_read_lines(tmp_path):
    out = tmp_path / "nested" / "model.train"
    n = write_bracket_lines(str(out), ["<START:O> Hi <END>", "Jan Smit"])
    assert n == 2
    assert out.read_text(encoding="utf-8") == "<START:O> Hi <END>\nJan Smit\n"
    lines = list(read_bracket_lines(str(out)))
    assert lines[1] == [Word("Jan"), Word("Smit")]


def test_read_predictions_resets_per_line(tmp_path):
    p = tmp_path / "test.onlp"
    p.write_text("<START:PER> Jan Smit\n<START:O> Hi <END>\n", encoding="utf-8")
    assert list(read_predictions(str(p))) == [
        Prediction("Jan", "B-PER"),
        Prediction("Smit", "I-PER"),
        Prediction("Hi", "O"),
    ]
