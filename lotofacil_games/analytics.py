from __future__ import annotations

import numpy as np
import pandas as pd

from .config import FAIXAS, LIMITE_BAIXO, N_DEZENAS, N_UNIVERSO

DEZENAS_COLS = [f"d{i}" for i in range(1, N_DEZENAS + 1)]


def metadata_frame(df: pd.DataFrame) -> pd.DataFrame:
    """
    Mesmos metadados de compute_metadata, vetorizados sobre um DataFrame com d1..d15
    (uma combinação por linha, dezenas em ordem crescente).
    """
    m = np.sort(df[DEZENAS_COLS].to_numpy(dtype=np.int64), axis=1)

    out = pd.DataFrame(index=df.index)
    out["sum_numbers"] = m.sum(axis=1)
    out["odd_count"] = (m % 2 == 1).sum(axis=1)
    out["even_count"] = N_DEZENAS - out["odd_count"]
    out["low_count"] = (m <= LIMITE_BAIXO).sum(axis=1)
    out["high_count"] = N_DEZENAS - out["low_count"]
    for col, ini, fim in FAIXAS:
        out[col] = ((m >= ini) & (m <= fim)).sum(axis=1)

    atual = np.ones(len(m), dtype=np.int64)
    maior = np.ones(len(m), dtype=np.int64)
    consecutivo = np.diff(m, axis=1) == 1
    for k in range(consecutivo.shape[1]):
        atual = np.where(consecutivo[:, k], atual + 1, 1)
        maior = np.maximum(maior, atual)
    out["max_sequence_length"] = maior
    out["has_sequence"] = maior >= 3
    return out


def records_frame(rows: list[dict]) -> pd.DataFrame:
    """Linhas da tabela (com `numbers`) -> DataFrame com d1..d15 e as colunas originais."""
    df = pd.DataFrame(rows)
    if df.empty:
        return pd.DataFrame(columns=["numbers", *DEZENAS_COLS])
    dezenas = pd.DataFrame(df["numbers"].map(sorted).tolist(), columns=DEZENAS_COLS, index=df.index)
    return pd.concat([df, dezenas], axis=1)


def summarize_games(df: pd.DataFrame) -> dict:
    """Equivalente local da view all_games_stats."""
    if df.empty:
        return {
            "total_games": 0,
            "min_sum": None,
            "max_sum": None,
            "avg_sum": None,
            "games_with_sequences": 0,
            "balanced_7_8": 0,
            "balanced_8_7": 0,
        }
    meta = metadata_frame(df)
    return {
        "total_games": int(len(meta)),
        "min_sum": int(meta["sum_numbers"].min()),
        "max_sum": int(meta["sum_numbers"].max()),
        "avg_sum": round(float(meta["sum_numbers"].mean()), 2),
        "games_with_sequences": int(meta["has_sequence"].sum()),
        "balanced_7_8": int(((meta["odd_count"] == 7) & (meta["even_count"] == 8)).sum()),
        "balanced_8_7": int(((meta["odd_count"] == 8) & (meta["even_count"] == 7)).sum()),
    }


def frequencias(df: pd.DataFrame) -> pd.DataFrame:
    todas = df[DEZENAS_COLS].values.ravel()
    freq = pd.Series(todas).value_counts().reindex(range(1, N_UNIVERSO + 1), fill_value=0).sort_index()
    out = freq.reset_index()
    out.columns = ["dezena", "frequencia"]
    out["dezena"] = out["dezena"].astype(int)
    out["frequencia"] = out["frequencia"].astype(int)
    return out


def distribuicao_par_impar(df: pd.DataFrame) -> pd.DataFrame:
    meta = metadata_frame(df)
    return (
        meta.groupby(["odd_count", "even_count"])
        .size()
        .reset_index(name="qtd")
        .sort_values("qtd", ascending=False)
        .reset_index(drop=True)
    )
