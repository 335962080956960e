"""
tabular.py: чтение/запись ';'-CSV в формате "токен на строку"

Колонки: 0 = маркер предложения (непуст только в первой строке предложения),
1 = слово, 2 = POS (опц.), последняя = IOB-тег (3 при наличии POS, иначе 2).

Чтение потоковое (pandas chunksize), без CSV-кавычек: `"` - обычное слово.
"""

from __future__ import annotations

import csv
import io
import logging
import os
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

import pandas as pd

from onlp.config import settings
from onlp.errors import TabularFormatError
from onlp.iob_codec import TaggedToken

logger = logging.getLogger(__name__)

HEADER_WITH_POS = ["Sentences", "Word", "POST", "Predicted"]
HEADER_NO_POS = ["Sentences", "Word", "Predicted"]


@dataclass(frozen=True)
class TabularRow:
    fields: Tuple[str, ...]
    line_no: int = 0

    @property
    def sentence_start(self) -> bool:
        return self.fields[0] != ""

    @property
    def word(self) -> str:
        return self.fields[1]

    @property
    def is_sentinel(self) -> bool:
        """Хвост обучающего CSV вида ';;;'."""
        return self.word == ""

    def to_token(self) -> TaggedToken:
        n = len(self.fields)
        if n < 3:
            raise TabularFormatError(f"строка {self.line_no}: нет колонки с тегом: {list(self.fields)}")
        tag_field = 3 if n > 3 else 2
        pos = self.fields[2] if n > 3 else None
        return TaggedToken(
            word=self.word,
            tag=self.fields[tag_field],
            sentence_start=self.sentence_start,
            pos_tag=pos,
        )


# ---------- Чтение ----------
# кавычек в формате нет: строку читаем целиком и режем по разделителю сами
_NO_SEP = "\x1f"


def read_rows(
    path: str,
    *,
    has_header: bool = False,
    delimiter: Optional[str] = None,
    encoding: Optional[str] = None,
    chunksize: Optional[int] = None,
) -> Iterator[TabularRow]:
    """
    Лениво отдаёт строки CSV. Заголовок (если есть) пропускается.
    Число полей задаёт первая строка данных; строка другой ширины -> TabularFormatError.
    """
    sep = delimiter or settings.delimiter
    enc = encoding or settings.encoding
    first_line = 2 if has_header else 1
    try:
        reader = pd.read_csv(
            path,
            sep=_NO_SEP,
            header=None,
            names=["line"],
            index_col=False,
            skiprows=1 if has_header else 0,
            dtype=str,
            na_filter=False,
            quoting=csv.QUOTE_NONE,
            encoding=enc,
            chunksize=chunksize or settings.chunksize,
        )
    except pd.errors.EmptyDataError:
        logger.warning("%s: пустой CSV", path)
        return
    except pd.errors.ParserError as e:
        raise TabularFormatError(f"{path}: не удалось разобрать CSV: {e}") from e

    n = 0
    width: Optional[int] = None
    with reader:
        try:
            for chunk in reader:
                for values in chunk["line"].str.split(sep, regex=False):
                    line_no = first_line + n
                    n += 1
                    if width is None:
                        width = len(values)
                    if len(values) < 2:
                        raise TabularFormatError(f"{path}:{line_no}: нет колонки со словом")
                    if len(values) != width:
                        raise TabularFormatError(
                            f"{path}:{line_no}: полей {len(values)}, ожидалось {width}"
                        )
                    yield TabularRow(tuple(values), line_no)
        except pd.errors.ParserError as e:
            raise TabularFormatError(f"{path}: не удалось разобрать CSV: {e}") from e
    logger.debug("%s: прочитано строк %d", path, n)


def group_sentences(rows: Iterable[TabularRow]) -> Iterator[List[TabularRow]]:
    """Режет поток строк на предложения по непустому маркеру в колонке 0."""
    sent: List[TabularRow] = []
    for row in rows:
        if row.sentence_start and sent:
            yield sent
            sent = []
        sent.append(row)
    if sent:
        yield sent


def until_sentinel(rows: Iterable[TabularRow]) -> Iterator[TabularRow]:
    for row in rows:
        if row.is_sentinel:
            logger.debug("строка %d: конец данных (';;;')", row.line_no)
            return
        yield row


def read_tagged_sentences(
    path: str,
    *,
    has_header: bool = True,
    delimiter: Optional[str] = None,
    encoding: Optional[str] = None,
) -> Iterator[List[TaggedToken]]:
    """Обучающий CSV -> предложения из TaggedToken (до строки-терминатора ';;;')."""
    rows = until_sentinel(read_rows(path, has_header=has_header, delimiter=delimiter, encoding=encoding))
    for sent in group_sentences(rows):
        yield [r.to_token() for r in sent]


# ---------- Запись ----------
def predicted_header(input_width: int) -> List[str]:
    """Заголовок выходного CSV: с POST, если во входе больше двух колонок."""
    return list(HEADER_WITH_POS) if input_width > 2 else list(HEADER_NO_POS)


def write_rows(
    path: str,
    rows: Iterable[Sequence[str]],
    header: Optional[Sequence[str]] = None,
    *,
    delimiter: Optional[str] = None,
    encoding: Optional[str] = None,
    chunksize: Optional[int] = None,
) -> int:
    """Пишет строки батчами через pandas. Возвращает число записанных строк."""
    sep = delimiter or settings.delimiter
    enc = encoding or settings.encoding
    size = chunksize or settings.chunksize
    d = os.path.dirname(path)
    if d:
        os.makedirs(d, exist_ok=True)

    total = 0
    with io.open(path, "w", encoding=enc, newline="") as f:
        if header is not None:
            pd.DataFrame(columns=list(header)).to_csv(f, sep=sep, index=False, lineterminator="\n")
        batch: List[List[str]] = []
        for row in rows:
            batch.append(list(row))
            if len(batch) >= size:
                total += _flush(f, batch, sep)
                batch = []
        if batch:
            total += _flush(f, batch, sep)
    return total


def _flush(f, batch: List[List[str]], sep: str) -> int:
    pd.DataFrame(batch).fillna("").to_csv(f, sep=sep, index=False, header=False, lineterminator="\n")
    return len(batch)


__all__ = [
    "TabularRow", "read_rows", "group_sentences", "until_sentinel", "read_tagged_sentences",
    "predicted_header", "write_rows", "HEADER_WITH_POS", "HEADER_NO_POS",
]
