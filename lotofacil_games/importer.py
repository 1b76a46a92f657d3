"""
Importação em lote dos 3.268.760 jogos possíveis.

Fluxo: linhas do CSV -> parse/validação -> metadados -> lote -> insert -> progresso.
Um único worker sequencial; no máximo um lote em voo.
"""
from __future__ import annotations

import io
import logging
import time
import zipfile
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterable, Iterator, Optional, Protocol, Sequence

from .config import ARCHIVE_MEMBER, EXPECTED_TOTAL, ImportSettings
from .domain_lottery import parse_line, to_record
from .errors import ImportAborted, PersistenceError, SourceError
from .models import BatchFailure, GameRecord, ImportState, ImportSummary
from .rate_limit import FixedIntervalLimiter
from .reports import fmt_int, format_progress, format_summary

logger = logging.getLogger(__name__)

ProgressFn = Callable[[ImportSummary], None]


class BatchSink(Protocol):
    def probe(self) -> None: ...

    def delete_all(self) -> None: ...

    def insert(self, records: Sequence[GameRecord]) -> None: ...

    def count(self) -> Optional[int]: ...


def log_progress(summary: ImportSummary) -> None:
    logger.info(format_progress(summary))


def _open_archive(zip_path: str | Path, member: str) -> tuple[zipfile.ZipFile, zipfile.ZipInfo]:
    try:
        zf = zipfile.ZipFile(zip_path)
    except (OSError, zipfile.BadZipFile) as e:
        raise SourceError(f"Não foi possível abrir {zip_path}: {e}", stage="source") from e

    try:
        info = zf.getinfo(member)
    except KeyError as e:
        zf.close()
        raise SourceError(f"{member} não encontrado em {zip_path}", stage="source") from e
    return zf, info


def iter_source_lines(zip_path: str | Path, member: str = ARCHIVE_MEMBER) -> Iterator[str]:
    """
    Abre o ZIP imediatamente (erros de abertura saem daqui, antes de qualquer
    escrita no destino) e devolve um iterador preguiçoso sobre as linhas.
    O ZIP só é fechado quando o iterador é consumido; para fechar mesmo sem
    iterar, use open_source_lines.
    """
    zf, info = _open_archive(zip_path, member)
    return _read_lines(zf, info)


@contextmanager
def open_source_lines(zip_path: str | Path, member: str = ARCHIVE_MEMBER) -> Iterator[Iterator[str]]:
    """Como iter_source_lines, mas o ZIP é fechado na saída do bloco."""
    zf, info = _open_archive(zip_path, member)
    lines = _iter_member(zf, info)
    try:
        yield lines
    finally:
        lines.close()
        zf.close()


def _iter_member(zf: zipfile.ZipFile, info: zipfile.ZipInfo) -> Iterator[str]:
    try:
        with zf.open(info) as raw, io.TextIOWrapper(raw, encoding="utf-8-sig") as fh:
            for line in fh:
                yield line.rstrip("\r\n")
    except (OSError, zipfile.BadZipFile, UnicodeDecodeError) as e:
        raise SourceError(f"Falha lendo {info.filename}: {e}", stage="source") from e


def _read_lines(zf: zipfile.ZipFile, info: zipfile.ZipInfo) -> Iterator[str]:
    try:
        yield from _iter_member(zf, info)
    finally:
        zf.close()


def iter_records(lines: Iterable[str], summary: ImportSummary) -> Iterator[GameRecord]:
    for line in lines:
        summary.lines_read += 1
        combo = parse_line(line)
        if combo is None:
            if line.strip():
                summary.lines_rejected += 1
            continue
        summary.records_parsed += 1
        yield to_record(combo)


def _flush(
    batch: list[GameRecord],
    sink: BatchSink,
    summary: ImportSummary,
    limiter: FixedIntervalLimiter,
) -> None:
    summary.batches += 1
    numero = summary.batches
    try:
        limiter.wait()
        sink.insert(batch)
    except PersistenceError as e:
        summary.batches_failed += 1
        summary.failures.append(BatchFailure(batch_number=numero, size=len(batch), reason=str(e)))
        logger.error("Erro no batch %d (%d jogos): %s", numero, len(batch), e)
        return
    summary.records_inserted += len(batch)


def run_import(
    source_lines: Iterable[str],
    batch_size: int,
    sink: BatchSink,
    *,
    clear_destination: bool = True,
    limiter: Optional[FixedIntervalLimiter] = None,
    progress: Optional[ProgressFn] = None,
    expected_total: int = EXPECTED_TOTAL,
    clock: Callable[[], float] = time.perf_counter,
) -> ImportSummary:
    """
    Importa as linhas em lotes de `batch_size`.

    Linhas inválidas são contadas e puladas; falha de um lote é registrada em
    `summary.failures` e a importação segue. Só levanta ImportAborted quando o
    destino não responde, a limpeza falha ou a fonte não pode ser lida.
    """
    if isinstance(batch_size, bool) or not isinstance(batch_size, int) or batch_size < 1:
        raise ValueError("batch_size deve ser um inteiro positivo")

    limiter = limiter or FixedIntervalLimiter(0.0)
    report = progress or log_progress
    summary = ImportSummary(expected_total=expected_total)
    start = clock()

    summary.state = ImportState.VERIFY_DESTINATION
    try:
        sink.probe()
    except PersistenceError as e:
        summary.state = ImportState.ABORTED
        raise ImportAborted(
            f"Destino {sink!r} não existe ou está inacessível: {e}",
            stage=ImportState.VERIFY_DESTINATION.value,
            summary=summary,
        ) from e

    if clear_destination:
        summary.state = ImportState.CLEAR_DESTINATION
        logger.info("Limpando dados existentes...")
        try:
            limiter.wait()
            sink.delete_all()
        except PersistenceError as e:
            summary.state = ImportState.ABORTED
            raise ImportAborted(
                f"Falha ao limpar {sink!r}: {e}",
                stage=ImportState.CLEAR_DESTINATION.value,
                summary=summary,
            ) from e
        logger.info("Tabela limpa")

    summary.state = ImportState.STREAMING
    batch: list[GameRecord] = []
    try:
        for record in iter_records(source_lines, summary):
            batch.append(record)
            if len(batch) >= batch_size:
                _flush(batch, sink, summary, limiter)
                batch = []
                summary.elapsed_s = clock() - start
                report(summary)

        summary.state = ImportState.FINALIZE
        if batch:
            _flush(batch, sink, summary, limiter)
            summary.elapsed_s = clock() - start
            report(summary)
    except SourceError as e:
        summary.state = ImportState.ABORTED
        summary.elapsed_s = clock() - start
        e.summary = summary
        raise

    summary.elapsed_s = clock() - start
    summary.state = ImportState.REPORTED
    logger.info("Importação concluída\n%s", format_summary(summary))
    return summary


def import_from_archive(
    settings: ImportSettings,
    sink: BatchSink,
    *,
    limiter: Optional[FixedIntervalLimiter] = None,
    progress: Optional[ProgressFn] = None,
) -> ImportSummary:
    logger.info("Arquivo: %s", settings.archive_path)
    logger.info("Batch size: %d jogos", settings.batch_size)

    with open_source_lines(settings.archive_path, settings.member) as lines:
        summary = run_import(
            lines,
            settings.batch_size,
            sink,
            clear_destination=settings.clear_destination,
            limiter=limiter or FixedIntervalLimiter(settings.call_interval_s),
            progress=progress,
            expected_total=settings.expected_total,
        )

    try:
        summary.final_count = sink.count()
    except PersistenceError as e:
        logger.warning("Não foi possível contar os jogos no banco: %s", e)
        return summary

    if summary.final_count == settings.expected_total:
        logger.info("Sucesso total! Todos os %s jogos importados", fmt_int(settings.expected_total))
    else:
        logger.warning(
            "Atenção: esperado %s, encontrado %s",
            fmt_int(settings.expected_total),
            fmt_int(summary.final_count),
        )
    return summary
