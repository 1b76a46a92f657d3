"""
Sincroniza os resultados oficiais da Lotofácil com a tabela lottery_results.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import pandas as pd
import requests

from .analytics import DEZENAS_COLS
from .config import (
    SYNC_BATCH_INTERVAL_S,
    SYNC_BATCH_SIZE,
    SYNC_CONTEST_INTERVAL_S,
    SYNC_MAX_CONTEST,
    URL_RESULTS_API,
)
from .errors import PersistenceError
from .http_client import get_session
from .models import DrawResult, SyncSummary
from .rate_limit import FixedIntervalLimiter
from .supabase_rest import Table

logger = logging.getLogger(__name__)


def _data_iso(data: Optional[str]) -> Optional[str]:
    # DD/MM/YYYY -> YYYY-MM-DD
    if not data:
        return None
    dia, mes, ano = data.split("/")
    return f"{ano}-{mes.zfill(2)}-{dia.zfill(2)}"


def process_result(data: dict[str, Any]) -> DrawResult:
    """Converte o payload da API de resultados para o formato do banco."""
    dezenas = sorted(int(d) for d in data["dezenas"])
    ordem = [int(d) for d in data.get("dezenasOrdemSorteio") or []]
    ganhadores = sum(int(p.get("ganhadores") or 0) for p in data.get("premiacoes") or [])

    return DrawResult(
        contest_number=int(data["concurso"]),
        draw_date=_data_iso(data["data"]),
        numbers=dezenas,
        draw_order=ordem,
        total_winners=ganhadores,
        total_revenue=float(data.get("valorArrecadado") or 0.0),
        accumulated=bool(data.get("acumulou")),
        next_contest=data.get("proximoConcurso"),
        next_contest_date=_data_iso(data.get("dataProximoConcurso")),
        estimated_next_prize=float(data.get("valorEstimadoProximoConcurso") or 0.0),
    )


class CaixaClient:
    def __init__(
        self,
        base_url: str = URL_RESULTS_API,
        session: Optional[requests.Session] = None,
        limiter: Optional[FixedIntervalLimiter] = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or get_session()
        self.limiter = limiter or FixedIntervalLimiter(SYNC_CONTEST_INTERVAL_S)
        self.timeout = timeout

    def _get(self, path: str) -> DrawResult:
        self.limiter.wait()
        r = self.session.get(f"{self.base_url}/lotofacil/{path}", timeout=self.timeout)
        r.raise_for_status()
        return process_result(r.json())

    def get_latest(self) -> DrawResult:
        return self._get("latest")

    def get_contest(self, contest_number: int) -> DrawResult:
        return self._get(str(contest_number))

    def get_historical(self, start: int, end: int, errors: Optional[list[str]] = None) -> list[DrawResult]:
        """Busca start..end; concurso que falha é logado e pulado."""
        results: list[DrawResult] = []
        for contest in range(start, end + 1):
            try:
                results.append(self.get_contest(contest))
            except (requests.RequestException, ValueError, KeyError, TypeError) as e:
                logger.error("Erro ao buscar concurso %d: %s", contest, e)
                if errors is not None:
                    errors.append(f"Concurso {contest}: {e}")
        return results


def latest_stored_contest(results_table: Table) -> Optional[int]:
    rows, _ = results_table.select("contest_number", order="contest_number.desc", limit=1)
    return int(rows[0]["contest_number"]) if rows else None


def update_all_historical_results(
    results_table: Table,
    client: CaixaClient,
    max_contest: Optional[int] = None,
    *,
    batch_size: int = SYNC_BATCH_SIZE,
    batch_limiter: Optional[FixedIntervalLimiter] = None,
) -> SyncSummary:
    errors: list[str] = []
    inserted = 0
    batch_limiter = batch_limiter or FixedIntervalLimiter(SYNC_BATCH_INTERVAL_S)

    try:
        ultimo = latest_stored_contest(results_table)
    except PersistenceError as e:
        msg = f"Erro ao buscar último concurso do banco: {e}"
        return SyncSummary(
            success=False,
            errors=[msg],
            message=f"Erro ao atualizar resultados históricos: {msg}",
        )

    inicio = ultimo + 1 if ultimo is not None else 1
    fim = max_contest or SYNC_MAX_CONTEST
    logger.info("Buscando resultados históricos de %d a %d", inicio, fim)

    for contest in range(inicio, fim + 1, batch_size):
        batch_limiter.wait()
        batch_fim = min(contest + batch_size - 1, fim)
        logger.info("Processando lote de %d a %d", contest, batch_fim)

        results = client.get_historical(contest, batch_fim, errors)
        if not results:
            continue
        try:
            results_table.upsert([r.as_row() for r in results], on_conflict="contest_number")
        except PersistenceError as e:
            errors.append(f"Erro ao inserir resultados de {contest} a {batch_fim}: {e}")
            logger.error(errors[-1])
            continue
        inserted += len(results)
        logger.info("Inseridos %d resultados de %d a %d", len(results), contest, batch_fim)

    return SyncSummary(
        success=True,
        inserted=inserted,
        errors=errors,
        message=f"Atualização concluída. {inserted} resultados inseridos. {len(errors)} erros ocorridos.",
    )


def sync_latest_result(results_table: Table, client: CaixaClient) -> SyncSummary:
    try:
        latest = client.get_latest()
    except (requests.RequestException, ValueError, KeyError, TypeError) as e:
        logger.error("Erro ao buscar último resultado da Lotofácil: %s", e)
        return SyncSummary(success=False, message="Não foi possível obter o último resultado da API")

    try:
        rows, _ = results_table.select(
            "id", [("contest_number", f"eq.{latest.contest_number}")], limit=1
        )
        if rows:
            return SyncSummary(
                success=True,
                data=latest,
                message=f"Concurso {latest.contest_number} já existe no banco",
            )
        results_table.upsert([latest.as_row()], on_conflict="contest_number")
    except PersistenceError as e:
        return SyncSummary(success=False, data=latest, errors=[str(e)], message=f"Erro ao sincronizar: {e}")

    return SyncSummary(
        success=True,
        inserted=1,
        data=latest,
        message=f"Concurso {latest.contest_number} sincronizado com sucesso",
    )


def results_to_df(results: list[DrawResult]) -> pd.DataFrame:
    rows = []
    for r in results:
        row: dict[str, Any] = {"concurso": r.contest_number, "data": r.draw_date}
        row.update(dict(zip(DEZENAS_COLS, r.numbers)))
        rows.append(row)
    df = pd.DataFrame(rows, columns=["concurso", "data", *DEZENAS_COLS])
    df["data"] = pd.to_datetime(df["data"], errors="coerce")
    return df.sort_values("concurso").reset_index(drop=True)


def load_stored_results(results_table: Table, limit: int = 5000) -> pd.DataFrame:
    rows, _ = results_table.select("contest_number,draw_date,numbers", order="contest_number", limit=limit)
    results = [
        DrawResult(
            contest_number=int(r["contest_number"]),
            draw_date=r["draw_date"],
            numbers=sorted(r["numbers"]),
            draw_order=[],
            total_winners=0,
            total_revenue=0.0,
            accumulated=False,
            next_contest=None,
            next_contest_date=None,
            estimated_next_prize=0.0,
        )
        for r in rows
    ]
    return results_to_df(results)
