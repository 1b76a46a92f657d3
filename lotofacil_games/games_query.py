"""
Consultas sobre a tabela de jogos possíveis: listagem filtrada, validação de
um jogo, jogos similares e estatísticas gerais.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

import pandas as pd

from .analytics import records_frame
from .config import EXPECTED_TOTAL, N_DEZENAS, RPC_SIMILAR_GAMES, TABLE_ALL_GAMES, VIEW_ALL_GAMES_STATS
from .domain_lottery import format_combination, validate_numbers
from .errors import PersistenceError
from .supabase_rest import PostgrestClient, Table, pg_array, pg_in

logger = logging.getLogger(__name__)

MAX_LIMIT = 1000
LIST_COLUMNS = "id,numbers,numbers_str,sum_numbers,odd_count,even_count,has_sequence"


@dataclass(frozen=True)
class GamesPage:
    games: pd.DataFrame
    total: Optional[int]
    offset: int
    limit: int


@dataclass(frozen=True)
class GameValidation:
    valid: bool
    numbers: list[int]
    numbers_str: str
    game_id: Optional[int]
    message: str


def build_filters(
    *,
    odd_count: Optional[Sequence[int]] = None,
    even_count: Optional[Sequence[int]] = None,
    sum_min: Optional[int] = None,
    sum_max: Optional[int] = None,
    must_include: Optional[Sequence[int]] = None,
    must_exclude: Optional[Sequence[int]] = None,
    has_sequence: Optional[bool] = None,
) -> list[tuple[str, str]]:
    params: list[tuple[str, str]] = []
    if odd_count:
        params.append(("odd_count", pg_in(odd_count)))
    if even_count:
        params.append(("even_count", pg_in(even_count)))
    if sum_min is not None:
        params.append(("sum_numbers", f"gte.{int(sum_min)}"))
    if sum_max is not None:
        params.append(("sum_numbers", f"lte.{int(sum_max)}"))
    if has_sequence is not None:
        params.append(("has_sequence", f"eq.{str(bool(has_sequence)).lower()}"))
    if must_include:
        params.append(("numbers", f"cs.{pg_array(must_include)}"))
    if must_exclude:
        params.append(("numbers", f"not.ov.{pg_array(must_exclude)}"))
    return params


def query_games(
    table: Table,
    *,
    limit: int = 100,
    offset: int = 0,
    **filters,
) -> GamesPage:
    limit = min(int(limit) if limit and limit > 0 else 100, MAX_LIMIT)
    offset = max(int(offset or 0), 0)

    rows, total = table.select(
        LIST_COLUMNS,
        build_filters(**filters),
        order="id",
        limit=limit,
        offset=offset,
        count=True,
    )
    return GamesPage(games=records_frame(rows), total=total, offset=offset, limit=limit)


def validate_game(table: Table, numbers) -> GameValidation:
    """Confere se o jogo existe na tabela. ValueError para entrada malformada."""
    ordenados = validate_numbers(numbers)
    rows, _ = table.select("id,numbers,numbers_str", [("numbers", f"cs.{pg_array(ordenados)}")], limit=1)

    game_id = rows[0]["id"] if rows else None
    valid = bool(rows)
    return GameValidation(
        valid=valid,
        numbers=ordenados,
        numbers_str=format_combination(ordenados),
        game_id=game_id,
        message=(
            "Jogo válido! Esta combinação existe nas possibilidades da Lotofácil."
            if valid
            else "Jogo inválido! Esta combinação não existe nas possibilidades da Lotofácil."
        ),
    )


def find_similar_games(client: PostgrestClient, numbers, min_matches: int = 11) -> pd.DataFrame:
    if not isinstance(numbers, (list, tuple)) or len(numbers) != N_DEZENAS:
        raise ValueError(f"Deve fornecer exatamente {N_DEZENAS} números")
    if min_matches < 1 or min_matches > N_DEZENAS:
        raise ValueError(f"min_matches deve estar entre 1 e {N_DEZENAS}")

    data = client.rpc(RPC_SIMILAR_GAMES, {"input_numbers": list(numbers), "min_matches": min_matches})
    return pd.DataFrame(data or [])


def games_stats(client: PostgrestClient, table: str = TABLE_ALL_GAMES) -> dict:
    """
    Estatísticas da tabela. A view all_games_stats é opcional; sem ela as
    métricas saem nulas e só o total é informado.
    """
    stats = None
    try:
        rows, _ = client.table(VIEW_ALL_GAMES_STATS).select(limit=1)
        stats = rows[0] if rows else None
    except PersistenceError as e:
        logger.warning("Erro ao buscar estatísticas: %s", e)

    count = client.table(table).count() or 0

    return {
        "total_games": count,
        "expected_total": EXPECTED_TOTAL,
        "is_complete": count == EXPECTED_TOTAL,
        "stats": stats
        or {
            "total_games": count,
            "min_sum": None,
            "max_sum": None,
            "avg_sum": None,
            "games_with_sequences": None,
            "balanced_7_8": None,
            "balanced_8_7": None,
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
