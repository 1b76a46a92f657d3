from __future__ import annotations

import math
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

from .errors import ConfigError

N_UNIVERSO = 25
N_DEZENAS = 15
LIMITE_BAIXO = 12
EXPECTED_TOTAL = math.comb(N_UNIVERSO, N_DEZENAS)  # 3.268.760

# faixas de 5 dezenas: (coluna, inicio, fim)
FAIXAS: tuple[tuple[str, int, int], ...] = (
    ("range_01_05", 1, 5),
    ("range_06_10", 6, 10),
    ("range_11_15", 11, 15),
    ("range_16_20", 16, 20),
    ("range_21_25", 21, 25),
)

TABLE_ALL_GAMES = "all_possible_games"
TABLE_RESULTS = "lottery_results"
VIEW_ALL_GAMES_STATS = "all_games_stats"
RPC_SIMILAR_GAMES = "find_similar_games"

BATCH_SIZE = 1000
ARCHIVE_PATH = Path("data") / "games_csv.zip"
ARCHIVE_MEMBER = "games.csv"

URL_RESULTS_API = "https://loteriascaixa-api.herokuapp.com/api"
SYNC_MAX_CONTEST = 3600
SYNC_BATCH_SIZE = 10
SYNC_CONTEST_INTERVAL_S = 0.1
SYNC_BATCH_INTERVAL_S = 0.5


@dataclass(frozen=True)
class SupabaseSettings:
    url: str
    service_key: str
    timeout: float = 60.0

    @property
    def rest_url(self) -> str:
        return f"{self.url.rstrip('/')}/rest/v1"


@dataclass(frozen=True)
class ImportSettings:
    archive_path: Path = ARCHIVE_PATH
    member: str = ARCHIVE_MEMBER
    table: str = TABLE_ALL_GAMES
    batch_size: int = BATCH_SIZE
    call_interval_s: float = 0.0
    clear_destination: bool = True
    expected_total: int = EXPECTED_TOTAL


def get_supabase_settings(env: Mapping[str, str] | None = None) -> SupabaseSettings:
    if env is None:
        load_dotenv()
        env = os.environ

    url = env.get("SUPABASE_URL") or env.get("NEXT_PUBLIC_SUPABASE_URL")
    key = env.get("SUPABASE_SERVICE_ROLE_KEY")
    if not url or not key:
        raise ConfigError(
            "Variáveis de ambiente não configuradas: SUPABASE_URL (ou NEXT_PUBLIC_SUPABASE_URL) "
            "e SUPABASE_SERVICE_ROLE_KEY são obrigatórias"
        )
    timeout = float(env.get("SUPABASE_TIMEOUT", "60"))
    return SupabaseSettings(url=url, service_key=key, timeout=timeout)


def get_import_settings(env: Mapping[str, str] | None = None, **overrides) -> ImportSettings:
    if env is None:
        load_dotenv()
        env = os.environ

    try:
        batch_size = int(env.get("LOTOFACIL_BATCH_SIZE", BATCH_SIZE))
        interval = float(env.get("LOTOFACIL_IMPORT_INTERVAL", "0"))
    except ValueError as e:
        raise ConfigError(f"Configuração de importação inválida: {e}") from e

    base = ImportSettings(
        archive_path=Path(env.get("LOTOFACIL_ARCHIVE", str(ARCHIVE_PATH))),
        batch_size=batch_size,
        call_interval_s=interval,
    )
    values = {k: v for k, v in overrides.items() if v is not None}
    if not values:
        return base
    return replace(base, **values)


def get_results_api_url(env: Mapping[str, str] | None = None) -> str:
    if env is None:
        load_dotenv()
        env = os.environ
    return env.get("LOTOFACIL_RESULTS_API", URL_RESULTS_API).rstrip("/")
