"""
csv_onlp.py: конвертер NER-данных между ';'-CSV (IOB) и OpenNLP-разметкой

- csvToOnlp: CSV -> файл OpenNLP (одно предложение на строку)
    trainingSet: заголовок пропускается, ';;;' завершает чтение,
                 теги кодируются в <START:TYPE> ... <END> (O тоже отдельными чанками)
    testSet:     без заголовка, теги игнорируются, на выходе просто слова
- onlpToCsv: предсказания OpenNLP + исходный test-CSV -> CSV с колонкой Predicted

Пример:
  python csv_onlp.py csvToOnlp --input train.csv --output NERmodel.train --inputType trainingSet
  python csv_onlp.py csvToOnlp --input test.csv --output test.txt --inputType testSet
  python csv_onlp.py onlpToCsv --input test.onlp --testSet test.csv --output test_pred.csv
"""

from __future__ import annotations

import argparse
import itertools
import logging
import sys
from typing import Any, Dict, Iterator, List, Optional

from onlp.bracket_io import read_predictions, write_bracket_lines
from onlp.config import settings
from onlp.errors import OnlpError
from onlp.iob_codec import IobEncoder
from onlp.sync import join
from onlp.tabular import group_sentences, predicted_header, read_rows, read_tagged_sentences, write_rows

logger = logging.getLogger("csv_onlp")

INPUT_TYPES = ("trainingSet", "testSet")


# ---------- CSV -> OpenNLP ----------
def encode_training_set(
    in_csv: str,
    *,
    strict: bool,
    delimiter: Optional[str] = None,
) -> Iterator[str]:
    encoder = IobEncoder(strict=strict)
    for tokens in read_tagged_sentences(in_csv, has_header=True, delimiter=delimiter):
        yield encoder.encode_sentence(tokens)


def plain_test_set(in_csv: str, *, delimiter: Optional[str] = None) -> Iterator[str]:
    for sent in group_sentences(read_rows(in_csv, has_header=False, delimiter=delimiter)):
        yield " ".join(r.word for r in sent)


def csv_to_onlp(
    in_csv: str,
    out_path: str,
    input_type: str = "trainingSet",
    *,
    strict: Optional[bool] = None,
    delimiter: Optional[str] = None,
) -> Dict[str, Any]:
    if input_type not in INPUT_TYPES:
        raise ValueError(f"expected 'trainingSet' or 'testSet' as 'inputType', got {input_type!r}")
    strict = settings.strict if strict is None else strict

    if input_type == "trainingSet":
        lines = encode_training_set(in_csv, strict=strict, delimiter=delimiter)
    else:
        lines = plain_test_set(in_csv, delimiter=delimiter)
    n = write_bracket_lines(out_path, lines)

    summary = {"input": in_csv, "output": out_path, "input_type": input_type, "sentences": n}
    logger.info("csvToOnlp: %s", summary)
    return summary


# ---------- OpenNLP -> CSV ----------
def onlp_to_csv(
    onlp_path: str,
    test_csv: str,
    out_csv: str,
    *,
    strict: Optional[bool] = None,
    reject_bare_words: Optional[bool] = None,
    delimiter: Optional[str] = None,
) -> Dict[str, Any]:
    strict = settings.strict if strict is None else strict
    rows = read_rows(test_csv, has_header=False, delimiter=delimiter)
    preds = read_predictions(onlp_path, strict=strict, reject_bare_words=reject_bare_words)
    joined = join(rows, preds)

    # заголовок зависит от ширины первой строки (есть ли POS)
    first: Optional[List[str]] = next(joined, None)
    if first is None:
        n = write_rows(out_csv, [], header=None, delimiter=delimiter)
    else:
        header = predicted_header(len(first) - 1)
        n = write_rows(out_csv, itertools.chain([first], joined), header=header, delimiter=delimiter)

    summary = {"input": onlp_path, "test_set": test_csv, "output": out_csv, "rows": n}
    logger.info("onlpToCsv: %s", summary)
    return summary


# ---------- CLI ----------
def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="CSV (IOB) <-> OpenNLP name finder format")
    sub = p.add_subparsers(dest="command", metavar="{csvToOnlp,onlpToCsv}")
    sub.required = True

    def common(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("--delimiter", default=None, help=f"Разделитель CSV (по умолчанию {settings.delimiter!r})")
        sp.add_argument("--lenient", action="store_true",
                        help="Чинить I- без открытого чанка вместо фатальной ошибки")

    cto = sub.add_parser("csvToOnlp", help="CSV -> OpenNLP")
    cto.add_argument("--input", default="train.csv", help="Входной CSV")
    cto.add_argument("--output", default="NERmodel.train", help="Выходной файл OpenNLP")
    cto.add_argument("--inputType", dest="input_type", choices=INPUT_TYPES, default="trainingSet",
                     help="Тип входного CSV: trainingSet | testSet")
    common(cto)

    otc = sub.add_parser("onlpToCsv", help="OpenNLP -> CSV")
    otc.add_argument("--input", default="test.onlp", help="Размеченные OpenNLP предложения")
    otc.add_argument("--testSet", dest="test_set", default="test.csv", help="Исходный test CSV")
    otc.add_argument("--output", default="test_pred.csv", help="Выходной CSV с колонкой Predicted")
    otc.add_argument("--reject-bare-words", action="store_true",
                     help="Слово вне <START:...> ... <END> считать фатальной ошибкой")
    common(otc)
    return p


def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(level=settings.log_level, format=settings.log_format)
    args = build_parser().parse_args(argv)
    logger.info("subcommand '%s'", args.command)
    strict = False if args.lenient else None

    try:
        if args.command == "csvToOnlp":
            csv_to_onlp(args.input, args.output, args.input_type, strict=strict, delimiter=args.delimiter)
        else:
            onlp_to_csv(args.input, args.test_set, args.output, strict=strict,
                        reject_bare_words=args.reject_bare_words or None, delimiter=args.delimiter)
    except (OnlpError, OSError) as e:
        logger.error("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
