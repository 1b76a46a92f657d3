from __future__ import annotations

import io
import json
import zipfile

import pandas as pd

from .models import ImportSummary


def fmt_int(v: int | None) -> str:
    if v is None:
        return "NA"
    return f"{v:,}".replace(",", ".")


def format_progress(s: ImportSummary) -> str:
    return (
        f"Processados: {fmt_int(s.records_parsed)} | "
        f"Inseridos: {fmt_int(s.records_inserted)} | "
        f"Batch: {s.batches} | "
        f"Progresso: {s.progress_pct:.2f}%"
    )


def format_summary(s: ImportSummary) -> str:
    linhas = [
        "Estatísticas:",
        f"   Linhas lidas: {fmt_int(s.lines_read)}",
        f"   Total processado: {fmt_int(s.records_parsed)} jogos",
        f"   Linhas rejeitadas: {fmt_int(s.lines_rejected)}",
        f"   Total inserido: {fmt_int(s.records_inserted)} jogos",
        f"   Batches: {s.batches}",
        f"   Erros: {s.batches_failed}",
        f"   Tempo: {s.elapsed_s:.2f}s",
        f"   Velocidade: {round(s.rate_per_s)} jogos/segundo",
    ]
    for f in s.failures:
        linhas.append(f"   Batch {f.batch_number} ({f.size} jogos) falhou: {f.reason}")
    if s.final_count is not None:
        linhas.append(f"   Jogos no banco: {fmt_int(s.final_count)} (esperado {fmt_int(s.expected_total)})")
    return "\n".join(linhas)


def summary_to_json_bytes(s: ImportSummary) -> bytes:
    return json.dumps(s.as_dict(), ensure_ascii=False, indent=2).encode("utf-8")


def failures_to_df(s: ImportSummary) -> pd.DataFrame:
    df = pd.DataFrame([vars(f) for f in s.failures])
    for col, dtype in (("batch_number", "int64"), ("size", "int64"), ("reason", "object")):
        if col not in df.columns:
            df[col] = pd.Series(dtype=dtype)
    return df[["batch_number", "size", "reason"]]


def df_to_csv_bytes(df: pd.DataFrame) -> bytes:
    if df is None:
        df = pd.DataFrame()
    # UTF-8 com BOM (mais “Excel-friendly”)
    return df.to_csv(index=False).encode("utf-8-sig")


def make_zip_bytes(files: list[tuple[str, bytes]]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in files:
            zf.writestr(name, data)
    return buf.getvalue()
