"""
bracket_io.py: чтение/запись OpenNLP-разметки (одно предложение на строку)

Пример строки:
  <START:PER> Jan Smit <END> <START:O> speaks <END>
"""

from __future__ import annotations

import io
import logging
import os
from typing import Iterable, Iterator, List, Optional

from onlp.config import settings
from onlp.iob_codec import BracketToken, Prediction, decode, parse_bracket_token

logger = logging.getLogger(__name__)


def tokenize_line(line: str) -> List[BracketToken]:
    # split() без аргумента: двойные пробелы и хвостовой \n не дают пустых слов
    return [parse_bracket_token(t) for t in line.split()]


def read_bracket_lines(path: str, encoding: Optional[str] = None) -> Iterator[List[BracketToken]]:
    with io.open(path, "r", encoding=encoding or settings.encoding) as f:
        for line in f:
            yield tokenize_line(line)


def read_predictions(
    path: str,
    *,
    strict: Optional[bool] = None,
    reject_bare_words: Optional[bool] = None,
    encoding: Optional[str] = None,
) -> Iterator[Prediction]:
    """Поток Prediction по всему файлу; состояние декодера сбрасывается на каждой строке."""
    strict = settings.strict if strict is None else strict
    if reject_bare_words is None:
        reject_bare_words = settings.reject_bare_words
    n_lines = 0
    for tokens in read_bracket_lines(path, encoding=encoding):
        n_lines += 1
        yield from decode(tokens, strict=strict, reject_bare_words=reject_bare_words)
    logger.info("%s: разобрано предложений %d", path, n_lines)


def write_bracket_lines(path: str, lines: Iterable[str], encoding: Optional[str] = None) -> int:
    """Пишет по предложению на строку. Возвращает число строк."""
    d = os.path.dirname(path)
    if d:
        os.makedirs(d, exist_ok=True)
    n = 0
    with io.open(path, "w", encoding=encoding or settings.encoding, newline="\n") as f:
        for line in lines:
            f.write(line + "\n")
            n += 1
    return n


__all__ = ["tokenize_line", "read_bracket_lines", "read_predictions", "write_bracket_lines"]
