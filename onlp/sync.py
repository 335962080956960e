"""
sync.py: склейка строк test-CSV с предсказаниями

Строго по позиции: на каждую строку ровно одно предсказание, слова обязаны совпасть.
Любое расхождение (слово, длина) -> OutOfSyncError.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List

from onlp.errors import OutOfSyncError
from onlp.iob_codec import Prediction
from onlp.tabular import TabularRow

_MISSING = object()


def join(rows: Iterable[TabularRow], predictions: Iterable[Prediction]) -> Iterator[List[str]]:
    """Отдаёт поля строки + предсказанный тег."""
    preds = iter(predictions)
    pos = 0
    for pos, row in enumerate(rows, start=1):
        pred = next(preds, _MISSING)
        if pred is _MISSING:
            raise OutOfSyncError(row.word, None, pos)
        if row.word != pred.word:
            raise OutOfSyncError(row.word, pred.word, pos)
        yield list(row.fields) + [pred.tag]

    extra = next(preds, _MISSING)
    if extra is not _MISSING:
        raise OutOfSyncError(None, extra.word, pos + 1)


__all__ = ["join"]
