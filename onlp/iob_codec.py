"""
iob_codec.py: IOB <-> OpenNLP (bracket) кодек

- TaggedToken / Prediction / токены разметки (StartMarker, EndMarker, Word)
- IobEncoder: (prev, curr) -> фрагмент "<START:TYPE> word ... <END>"
- IobDecoder: поток токенов разметки -> Prediction(word, tag) с восстановлением B-/I-

Каждый токен попадает ровно в один чанк, включая O: "<START:O> w <END>".
Соседние O-токены не склеиваются, B/I одного чанка склеиваются.
Состояние кодека не переживает границу предложения.

Таблица переходов энкодера (prev -> curr):
  -/O -> B   <START:T> w
  B/I -> B   <END> <START:T> w
  -/O -> I   ошибка (strict) | как B (lenient)
  B/I -> I   w
  -/O -> O   <START:O> w <END>
  B/I -> O   <END> <START:O> w <END>
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from onlp.errors import BracketFormatError, IobParseError

logger = logging.getLogger(__name__)

OUTSIDE = "O"
START_PREFIX = "<START:"
END_MARKER = "<END>"

_START_RE = re.compile(r"^<START:(?P<type>[^>]+)>$")


# ---------- Модель данных ----------
@dataclass(frozen=True)
class TaggedToken:
    word: str
    tag: str
    sentence_start: bool = False
    pos_tag: Optional[str] = None


@dataclass(frozen=True)
class Prediction:
    word: str
    tag: str


@dataclass(frozen=True)
class StartMarker:
    type: str

    def __str__(self) -> str:
        return f"{START_PREFIX}{self.type}>"


@dataclass(frozen=True)
class EndMarker:
    def __str__(self) -> str:
        return END_MARKER


@dataclass(frozen=True)
class Word:
    text: str

    def __str__(self) -> str:
        return self.text


BracketToken = Union[StartMarker, EndMarker, Word]


def split_tag(tag: str) -> Tuple[str, str]:
    """
    'B-PER' -> ('B', 'PER'), 'I-PER' -> ('I', 'PER'), 'O' -> ('O', 'O').
    Всё остальное (пустой тег, голый 'B', 'X-...') -> IobParseError.
    """
    if tag == OUTSIDE:
        return OUTSIDE, OUTSIDE
    if len(tag) > 2 and tag[0] in ("B", "I") and tag[1] == "-":
        return tag[0], tag[2:]
    raise IobParseError(f"parsing error: неизвестный IOB-тег {tag!r}")


def _in_chunk(kind: Optional[str]) -> bool:
    return kind in ("B", "I")


# ---------- Энкодер ----------
def encode(prev: Optional[TaggedToken], curr: TaggedToken, strict: bool = True) -> str:
    """
    Фрагмент разметки для curr с учётом prev (None в начале предложения).
    Закрывающий <END> последнего чанка предложения не выдаётся: см. close_chunk.
    """
    kind, ctype = split_tag(curr.tag)
    prev_kind, prev_type = split_tag(prev.tag) if prev is not None else (None, None)

    if kind == "I":
        if _in_chunk(prev_kind) and (strict or prev_type == ctype):
            return f"{curr.word} "
        if strict:
            raise IobParseError(
                f"parsing error: {curr.tag!r} (слово {curr.word!r}) без открытого чанка"
            )
        # lenient: I- без своего чанка открывает новый
        logger.debug("lenient: %s после %s -> B-%s", curr.tag, prev.tag if prev else None, ctype)
        kind = "B"

    out = END_MARKER + " " if _in_chunk(prev_kind) else ""
    if kind == "B":
        return out + f"{START_PREFIX}{ctype}> {curr.word} "
    return out + f"{START_PREFIX}{OUTSIDE}> {curr.word} {END_MARKER} "


def close_chunk(prev: Optional[TaggedToken]) -> str:
    """<END> для чанка, оставшегося открытым на конце предложения."""
    if prev is not None and _in_chunk(split_tag(prev.tag)[0]):
        return END_MARKER + " "
    return ""


class IobEncoder:
    """Пошаговый энкодер: хранит только предыдущий токен текущего предложения."""

    def __init__(self, strict: bool = True):
        self.strict = strict
        self.prev: Optional[TaggedToken] = None

    def step(self, token: TaggedToken) -> str:
        frag = encode(self.prev, token, strict=self.strict)
        self.prev = token
        return frag

    def finish(self) -> str:
        """Закрыть предложение и сбросить состояние."""
        frag = close_chunk(self.prev)
        self.prev = None
        return frag

    def encode_sentence(self, tokens: Iterable[TaggedToken]) -> str:
        self.prev = None
        parts = [self.step(t) for t in tokens]
        parts.append(self.finish())
        return "".join(parts).rstrip()


# ---------- Декодер ----------
def parse_bracket_token(text: str) -> BracketToken:
    if text == END_MARKER:
        return EndMarker()
    if text.startswith(START_PREFIX):
        m = _START_RE.match(text)
        if m is None:
            raise BracketFormatError(f"битый маркер начала чанка: {text!r}")
        return StartMarker(m.group("type"))
    return Word(text)


class IobDecoder:
    """
    Восстанавливает IOB-теги из потока токенов разметки.
    Первое слово чанка получает B-TYPE, следующие I-TYPE; чанк O даёт O.

    Слово вне чанка (OpenNLP так пишет исход "other"):
      strict              -> текущий тег (O, если чанков в строке ещё не было)
      lenient             -> O
      reject_bare_words   -> BracketFormatError
    """

    def __init__(self, strict: bool = True, reject_bare_words: bool = False):
        self.strict = strict
        self.reject_bare_words = reject_bare_words
        self.current_tag = ""
        self.open = False

    def reset(self) -> None:
        self.current_tag = ""
        self.open = False

    def step(self, token: BracketToken) -> Optional[Prediction]:
        if isinstance(token, StartMarker):
            self.current_tag = OUTSIDE if token.type == OUTSIDE else "B-" + token.type
            self.open = True
            return None
        if isinstance(token, EndMarker):
            self.open = False
            return None

        if not self.open:
            if self.reject_bare_words:
                raise BracketFormatError(f"слово {token.text!r} вне чанка <START:...> ... <END>")
            if not self.strict:
                return Prediction(token.text, OUTSIDE)

        pred = Prediction(token.text, self.current_tag or OUTSIDE)
        if self.current_tag.startswith("B"):
            self.current_tag = "I" + self.current_tag[1:]
        return pred


def decode(
    tokens: Iterable[BracketToken],
    strict: bool = True,
    reject_bare_words: bool = False,
) -> Iterator[Prediction]:
    """Ленивый декодер одного предложения (одной строки разметки)."""
    decoder = IobDecoder(strict=strict, reject_bare_words=reject_bare_words)
    for tok in tokens:
        pred = decoder.step(tok)
        if pred is not None:
            yield pred


def decode_sentence(
    tokens: Iterable[BracketToken],
    strict: bool = True,
    reject_bare_words: bool = False,
) -> List[Prediction]:
    return list(decode(tokens, strict=strict, reject_bare_words=reject_bare_words))


__all__ = [
    "TaggedToken", "Prediction", "StartMarker", "EndMarker", "Word", "BracketToken",
    "split_tag", "encode", "close_chunk", "IobEncoder",
    "parse_bracket_token", "IobDecoder", "decode", "decode_sentence",
]
