from __future__ import annotations

import itertools
import zipfile
from pathlib import Path
from typing import Iterable, Iterator

import pandas as pd

from .analytics import DEZENAS_COLS, metadata_frame
from .config import ARCHIVE_MEMBER, N_DEZENAS, N_UNIVERSO
from .domain_lottery import format_combination


def iter_all_combinations() -> Iterator[tuple[int, ...]]:
    return itertools.combinations(range(1, N_UNIVERSO + 1), N_DEZENAS)


def write_games_archive(
    path: str | Path,
    combinations: Iterable[Iterable[int]] | None = None,
    *,
    member: str = ARCHIVE_MEMBER,
    quoted: bool = False,
) -> int:
    """Grava o ZIP de origem (uma combinação por linha); retorna o número de linhas."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    combos = combinations if combinations is not None else iter_all_combinations()

    n = 0
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        with zf.open(member, "w") as raw:
            for c in combos:
                linha = format_combination(c)
                if quoted:
                    linha = f'"{linha}"'
                raw.write((linha + "\n").encode("utf-8"))
                n += 1
    return n


def combinations_to_df(combinations: Iterable[Iterable[int]]) -> pd.DataFrame:
    df = pd.DataFrame([sorted(c) for c in combinations], columns=DEZENAS_COLS)
    df.insert(0, "numbers_str", [format_combination(r) for r in df[DEZENAS_COLS].itertuples(index=False)])
    return pd.concat([df, metadata_frame(df)], axis=1)
