"""
metrics_iob.py: entity-level метрики предсказаний OpenNLP (через seqeval)

Входы:
  GOLD: ';'-CSV с эталонным IOB-тегом в последней колонке (как train.csv)
  PRED: ';'-CSV после `csv_onlp.py onlpToCsv` (заголовок, тег в колонке Predicted)

Слова gold и pred должны совпадать построчно, иначе OutOfSyncError.

Примеры:
  python metrics_iob.py --gold test_gold.csv --pred test_pred.csv
  python metrics_iob.py --gold train.csv --gold-header --pred train_pred.csv --dump-json metrics.json
"""

from __future__ import annotations

import argparse
import io
import json
import logging
import sys
from typing import Any, Dict, List, Optional, Tuple

from seqeval.metrics import accuracy_score, classification_report, f1_score, precision_score, recall_score

from onlp.config import settings
from onlp.errors import OnlpError, OutOfSyncError
from onlp.tabular import group_sentences, read_rows, until_sentinel

logger = logging.getLogger("metrics_iob")


# ---------- I/O ----------
def load_gold(path: str, *, has_header: bool = False, delimiter: Optional[str] = None) -> List[List[Tuple[str, str]]]:
    rows = until_sentinel(read_rows(path, has_header=has_header, delimiter=delimiter))
    return [[(t.word, t.tag) for t in (r.to_token() for r in sent)] for sent in group_sentences(rows)]


def load_pred(path: str, *, delimiter: Optional[str] = None) -> List[List[Tuple[str, str]]]:
    rows = read_rows(path, has_header=True, delimiter=delimiter)
    return [[(r.word, r.fields[-1]) for r in sent] for sent in group_sentences(rows)]


def align(
    gold: List[List[Tuple[str, str]]],
    pred: List[List[Tuple[str, str]]],
) -> Tuple[List[List[str]], List[List[str]]]:
    """Проверяет совпадение слов и возвращает (y_true, y_pred) по предложениям."""
    g_flat = [w for s in gold for w, _ in s]
    p_flat = [w for s in pred for w, _ in s]
    for i, (gw, pw) in enumerate(zip(g_flat, p_flat), start=1):
        if gw != pw:
            raise OutOfSyncError(gw, pw, i)
    if len(g_flat) != len(p_flat):
        n = min(len(g_flat), len(p_flat)) + 1
        raise OutOfSyncError(
            g_flat[n - 1] if len(g_flat) >= n else None,
            p_flat[n - 1] if len(p_flat) >= n else None,
            n,
        )
    # границы предложений берём из gold
    p_tags = iter([t for s in pred for _, t in s])
    y_true = [[t for _, t in s] for s in gold]
    y_pred = [[next(p_tags) for _ in s] for s in gold]
    return y_true, y_pred


# ---------- Scoring ----------
def score(y_true: List[List[str]], y_pred: List[List[str]]) -> Dict[str, Any]:
    report = classification_report(y_true, y_pred, output_dict=True, zero_division=0)
    per_class = {
        k: {m: float(v[m]) for m in ("precision", "recall", "f1-score", "support")}
        for k, v in report.items()
        if not k.endswith(" avg")
    }
    return {
        "precision": float(precision_score(y_true, y_pred, zero_division=0)),
        "recall": float(recall_score(y_true, y_pred, zero_division=0)),
        "f1": float(f1_score(y_true, y_pred, zero_division=0)),
        "token_accuracy": float(accuracy_score(y_true, y_pred)),
        "per_class": per_class,
        "sentences": len(y_true),
        "tokens": sum(len(s) for s in y_true),
    }


def evaluate(
    gold_csv: str,
    pred_csv: str,
    *,
    gold_header: bool = False,
    delimiter: Optional[str] = None,
) -> Dict[str, Any]:
    gold = load_gold(gold_csv, has_header=gold_header, delimiter=delimiter)
    pred = load_pred(pred_csv, delimiter=delimiter)
    y_true, y_pred = align(gold, pred)
    return score(y_true, y_pred)


# ---------- CLI ----------
def main(argv: Optional[List[str]] = None) -> None:
    logging.basicConfig(level=settings.log_level, format=settings.log_format)
    ap = argparse.ArgumentParser(description="NER metrics (IOB, entity-level через seqeval)")
    ap.add_argument("--gold", required=True, help="CSV с эталонными тегами")
    ap.add_argument("--pred", required=True, help="CSV после onlpToCsv (колонка Predicted)")
    ap.add_argument("--gold-header", action="store_true", help="В gold CSV есть строка заголовка")
    ap.add_argument("--delimiter", default=None, help=f"Разделитель CSV (по умолчанию {settings.delimiter!r})")
    ap.add_argument("--dump-json", default="", help="Путь для сохранения метрик в JSON (опционально)")
    args = ap.parse_args(argv)

    try:
        res = evaluate(args.gold, args.pred, gold_header=args.gold_header, delimiter=args.delimiter)
    except (OnlpError, OSError) as e:
        logger.error("%s", e)
        sys.exit(1)

    print("=== Entity-level (seqeval) ===")
    print(f"sentences: {res['sentences']}  tokens: {res['tokens']}")
    print("class\tprecision\trecall\tf1\tsupport")
    for k in sorted(res["per_class"].keys()):
        v = res["per_class"][k]
        print(f"{k}\t{v['precision']:.4f}\t{v['recall']:.4f}\t{v['f1-score']:.4f}\t{int(v['support'])}")
    print(f"micro_p\t{res['precision']:.4f}")
    print(f"micro_r\t{res['recall']:.4f}")
    print(f"micro_f1\t{res['f1']:.4f}")
    print(f"token_acc\t{res['token_accuracy']:.4f}")

    if args.dump_json:
        with io.open(args.dump_json, "w", encoding="utf-8") as f:
            json.dump(res, f, ensure_ascii=False, indent=2)


if __name__ == "__main__":
    main()
