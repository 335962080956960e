"""
Исключения конвертера CSV <-> OpenNLP.

Все ошибки фатальны: CLI ловит OnlpError/OSError, пишет в лог и выходит с кодом 1.
"""

from __future__ import annotations


class OnlpError(Exception):
    """Базовая ошибка конвертации."""


class IobParseError(OnlpError):
    """Некорректная IOB-последовательность (I- без открытого чанка, мусорный тег)."""


class BracketFormatError(OnlpError):
    """Битый токен в OpenNLP-разметке (<START:...> без типа, слово вне чанка)."""


class TabularFormatError(OnlpError):
    """CSV не читается или в строке нет нужных колонок."""


class OutOfSyncError(OnlpError):
    """Предсказания и строки test-CSV разошлись по словам или по длине."""

    def __init__(self, row_word: str | None, predicted_word: str | None, position: int):
        self.row_word = row_word
        self.predicted_word = predicted_word
        self.position = position
        super().__init__(
            f"Out-of-sync while processing the onlp and csv files (row {position}): "
            f"{row_word!r} != {predicted_word!r}"
        )
