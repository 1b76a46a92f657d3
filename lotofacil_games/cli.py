from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from .caixa_sync import CaixaClient, sync_latest_result, update_all_historical_results
from .config import TABLE_RESULTS, get_import_settings, get_results_api_url, get_supabase_settings
from .errors import ConfigError, ImportAborted, PersistenceError
from .games_export import write_games_archive
from .games_query import games_stats, validate_game
from .importer import import_from_archive
from .reports import fmt_int
from .supabase_rest import PostgrestClient
from .ui import parse_lista

logger = logging.getLogger("lotofacil_games")


def _client() -> PostgrestClient:
    return PostgrestClient(get_supabase_settings())


def cmd_import(args: argparse.Namespace) -> int:
    settings = get_import_settings(
        archive_path=Path(args.archive) if args.archive else None,
        batch_size=args.batch_size,
        clear_destination=False if args.keep_existing else None,
    )
    client = _client()
    summary = import_from_archive(settings, client.table(settings.table))
    if args.json:
        print(json.dumps(summary.as_dict(), ensure_ascii=False, indent=2))
    return 0 if summary.batches_failed == 0 else 2


def cmd_build_archive(args: argparse.Namespace) -> int:
    n = write_games_archive(args.output)
    logger.info("%s combinações gravadas em %s", fmt_int(n), args.output)
    return 0


def cmd_sync(args: argparse.Namespace) -> int:
    client = _client()
    caixa = CaixaClient(get_results_api_url())
    table = client.table(TABLE_RESULTS)
    if args.latest:
        result = sync_latest_result(table, caixa)
    else:
        result = update_all_historical_results(table, caixa, args.max_contest)
    logger.info(result.message)
    for e in result.errors:
        logger.warning(e)
    return 0 if result.success else 1


def cmd_stats(args: argparse.Namespace) -> int:
    print(json.dumps(games_stats(_client()), ensure_ascii=False, indent=2, default=str))
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    numbers = parse_lista(" ".join(args.numbers), dedupe=False)
    settings = get_import_settings()
    try:
        result = validate_game(_client().table(settings.table), numbers)
    except ValueError as e:
        logger.error("%s", e)
        return 1
    print(json.dumps(vars(result), ensure_ascii=False, indent=2))
    return 0 if result.valid else 3


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="lotofacil-games", description="Jogos possíveis da Lotofácil")
    p.add_argument("-v", "--verbose", action="store_true")
    sub = p.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="importa o ZIP de jogos para o banco")
    imp.add_argument("--archive", help="caminho do games_csv.zip")
    imp.add_argument("--batch-size", type=int)
    imp.add_argument("--keep-existing", action="store_true", help="não limpa a tabela antes")
    imp.add_argument("--json", action="store_true", help="imprime o resumo em JSON")
    imp.set_defaults(func=cmd_import)

    arch = sub.add_parser("build-archive", help="gera o ZIP com as 3.268.760 combinações")
    arch.add_argument("output", nargs="?", default="data/games_csv.zip")
    arch.set_defaults(func=cmd_build_archive)

    sync = sub.add_parser("sync", help="sincroniza resultados oficiais")
    sync.add_argument("--latest", action="store_true", help="só o último concurso")
    sync.add_argument("--max-contest", type=int)
    sync.set_defaults(func=cmd_sync)

    st = sub.add_parser("stats", help="estatísticas da tabela de jogos")
    st.set_defaults(func=cmd_stats)

    val = sub.add_parser("validate", help="confere se um jogo existe na tabela")
    val.add_argument("numbers", nargs="+")
    val.set_defaults(func=cmd_validate)
    return p


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s:%(name)s:%(message)s",
    )
    try:
        return args.func(args)
    except (ConfigError, ImportAborted) as e:
        logger.error("Erro fatal: %s", e)
        return 1
    except PersistenceError as e:
        logger.error("Erro no banco: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
