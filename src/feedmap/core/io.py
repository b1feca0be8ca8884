from __future__ import annotations
from typing import Iterable, Dict, Any, List, Union
import json
import pandas as pd

from .engine import ProductTransformer


def decode_document(raw: Union[bytes, str]) -> Any:
    """
    Decode a downloaded file: JSON when the text looks like JSON and parses,
    otherwise the text itself. Bytes that are not valid UTF-8 are returned as-is.
    """
    if isinstance(raw, bytes):
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError:
            return raw
    else:
        text = raw

    trimmed = text.strip()
    if trimmed.startswith("{") or trimmed.startswith("["):
        try:
            return json.loads(text)
        except ValueError:
            return text

    return text


def load_document(in_path: str) -> Any:
    with open(in_path, "rb") as fin:
        return decode_document(fin.read())


def write_products_csv(transformer: ProductTransformer, records: Iterable[Any], out_path: str, *, batch_size: int = 10_000, include_header: bool = True) -> int:
    # the header is the union of all batch columns in first-seen order
    batch: List[Any] = []
    frames: List[pd.DataFrame] = []
    columns: List[str] = []

    def flush() -> None:
        df = transformer.to_dataframe(batch)
        if df.empty:
            return
        columns.extend(c for c in df.columns if c not in columns)
        frames.append(df)

    for rec in records:
        batch.append(rec)
        if len(batch) >= batch_size:
            flush()
            batch.clear()

    if batch:
        flush()

    written = 0
    with open(out_path, "w", encoding="utf-8", newline="") as fout:
        for df in frames:
            df.reindex(columns=columns).to_csv(fout, header=(include_header and written == 0), index=False)
            written += len(df)

    return written


def write_products_jsonl(transformer: ProductTransformer, records: Iterable[Any], out_path: str) -> int:
    written = 0
    with open(out_path, "w", encoding="utf-8") as fout:
        for rec in records:
            product: Dict[str, Any] = transformer.transform(rec)
            if "error" in product:
                continue
            fout.write(json.dumps(product, ensure_ascii=False) + "\n")
            written += 1
    return written
