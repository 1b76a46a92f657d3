import pytest

from conftest import FakeClock, FakeSink, combination_lines
from lotofacil_games.errors import ImportAborted, SourceError
from lotofacil_games.importer import run_import
from lotofacil_games.models import ImportState
from lotofacil_games.rate_limit import FixedIntervalLimiter


def test_lotes_de_1000_para_2500_linhas():
    sink = FakeSink()
    snapshots = []
    s = run_import(combination_lines(2500), 1000, sink, progress=lambda x: snapshots.append(x.records_inserted))

    assert sink.batch_sizes == [1000, 1000, 500]
    assert sink.calls[:2] == ["probe", "delete"]
    assert s.records_inserted == 2500
    assert s.batches == 3
    assert s.batches_failed == 0
    assert s.failures == []
    assert s.state is ImportState.REPORTED
    assert snapshots == [1000, 2000, 2500]


def test_falha_no_segundo_lote_nao_aborta():
    sink = FakeSink(fail_batches={2})
    s = run_import(combination_lines(2500), 1000, sink)

    assert sink.batch_sizes == [1000, 1000, 500]
    assert s.batches_failed == 1
    assert s.records_inserted == 1500
    assert s.failures[0].batch_number == 2
    assert s.failures[0].size == 1000
    assert "boom" in s.failures[0].reason
    assert not s.is_complete


def test_linhas_invalidas_sao_contadas_e_puladas():
    lines = combination_lines(5) + ["", "lixo", "01-02-03", "01-02-03-04-05-06-07-08-09-10-11-12-13-14-26"]
    sink = FakeSink()
    s = run_import(lines, 2, sink)

    assert s.lines_read == 9
    assert s.records_parsed == 5
    assert s.lines_rejected == 3
    assert sink.batch_sizes == [2, 2, 1]
    assert [r["numbers_str"] for r in sink.inserted] == combination_lines(5)


def test_linha_com_digitos_unicode_e_rejeitada():
    linhas = combination_lines(3) + ["01-02-03-04-05-06-07-08-09-10-11-12-13-14-²"]
    s = run_import(linhas, 2, FakeSink())

    assert s.lines_rejected == 1
    assert s.records_inserted == 3
    assert s.state is ImportState.REPORTED


def test_sem_limpeza_nao_chama_delete():
    sink = FakeSink()
    run_import(combination_lines(3), 10, sink, clear_destination=False)
    assert "delete" not in sink.calls


def test_destino_inexistente_aborta_antes_de_tudo():
    sink = FakeSink(probe_error="relation does not exist")
    with pytest.raises(ImportAborted) as exc:
        run_import(combination_lines(10), 5, sink)
    assert exc.value.stage == ImportState.VERIFY_DESTINATION.value
    assert sink.calls == ["probe"]


def test_falha_na_limpeza_aborta_antes_de_inserir():
    sink = FakeSink(delete_error="permission denied")
    with pytest.raises(ImportAborted) as exc:
        run_import(combination_lines(10), 5, sink)
    assert exc.value.stage == ImportState.CLEAR_DESTINATION.value
    assert exc.value.summary.state is ImportState.ABORTED
    assert "insert" not in sink.calls


def test_erro_de_leitura_da_fonte_aborta():
    def fonte():
        yield from combination_lines(3)
        raise SourceError("arquivo truncado", stage="source")

    sink = FakeSink()
    with pytest.raises(SourceError) as exc:
        run_import(fonte(), 2, sink)
    assert exc.value.summary.records_inserted == 2
    assert exc.value.summary.state is ImportState.ABORTED


@pytest.mark.parametrize("batch_size", [0, -1, 1.5, True])
def test_batch_size_invalido(batch_size):
    with pytest.raises(ValueError):
        run_import([], batch_size, FakeSink())


def test_fonte_vazia():
    sink = FakeSink()
    s = run_import([], 10, sink)
    assert s.batches == 0
    assert sink.batch_sizes == []
    assert s.state is ImportState.REPORTED


def test_limitador_entre_chamadas_e_tempo_decorrido():
    clock = FakeClock()
    limiter = FixedIntervalLimiter(0.5, clock=clock, sleep=clock.sleep)
    s = run_import(combination_lines(6), 2, FakeSink(), limiter=limiter, clock=clock, expected_total=6)

    # delete + 3 inserts: a primeira chamada não espera
    assert clock.sleeps == [0.5, 0.5, 0.5]
    assert s.elapsed_s == pytest.approx(1.5)
    assert s.rate_per_s == pytest.approx(4.0)
    assert s.progress_pct == pytest.approx(100.0)
    assert s.is_complete
