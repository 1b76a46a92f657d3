from __future__ import annotations

from pathlib import Path

import streamlit as st

from lotofacil_games.config import get_import_settings, get_supabase_settings
from lotofacil_games.errors import ConfigError, ImportAborted
from lotofacil_games.games_export import write_games_archive
from lotofacil_games.importer import import_from_archive
from lotofacil_games.models import ImportSummary
from lotofacil_games.reports import (
    df_to_csv_bytes,
    failures_to_df,
    fmt_int,
    format_progress,
    make_zip_bytes,
    summary_to_json_bytes,
)
from lotofacil_games.state import get_import_summary, init_state, set_import_summary
from lotofacil_games.supabase_rest import PostgrestClient

st.set_page_config(page_title="Importar", page_icon="📦", layout="wide")
init_state()

st.title("Importar jogos possíveis")

defaults = get_import_settings()

# --------------------------
# Sidebar
# --------------------------
st.sidebar.markdown("### Opções")
archive = st.sidebar.text_input("Arquivo ZIP", value=str(defaults.archive_path))
batch_size = st.sidebar.number_input("Batch size", min_value=1, max_value=10_000, value=defaults.batch_size, step=100)
interval = st.sidebar.number_input(
    "Intervalo entre chamadas (s)", min_value=0.0, max_value=5.0, value=defaults.call_interval_s, step=0.05
)
limpar = st.sidebar.toggle("Limpar tabela antes", value=defaults.clear_destination)

if not Path(archive).exists():
    st.warning(f"Arquivo não encontrado: {archive}")
    if st.button("Gerar ZIP com todas as combinações"):
        with st.spinner("Gerando combinações..."):
            n = write_games_archive(archive)
        st.success(f"{fmt_int(n)} combinações gravadas em {archive}")
        st.rerun()
    st.stop()

# --------------------------
# Execução
# --------------------------
if st.button("Iniciar importação", type="primary"):
    try:
        client = PostgrestClient(get_supabase_settings())
    except ConfigError as e:
        st.error(str(e))
        st.stop()

    settings = get_import_settings(
        archive_path=Path(archive),
        batch_size=int(batch_size),
        call_interval_s=float(interval),
        clear_destination=limpar,
    )
    barra = st.progress(0.0, text="Iniciando...")

    def _progresso(s: ImportSummary) -> None:
        barra.progress(min(s.progress_pct / 100, 1.0), text=format_progress(s))

    try:
        summary = import_from_archive(settings, client.table(settings.table), progress=_progresso)
    except ImportAborted as e:
        st.error("Importação abortada.")
        st.exception(e)
        st.stop()

    set_import_summary(summary)
    st.toast("Importação concluída", icon="✅")

# --------------------------
# Último resumo
# --------------------------
summary = get_import_summary()
if summary is None:
    st.info("Nenhuma importação nesta sessão.")
    st.stop()

st.subheader("Resumo")
c1, c2, c3, c4 = st.columns(4)
c1.metric("Processados", fmt_int(summary.records_parsed))
c2.metric("Inseridos", fmt_int(summary.records_inserted))
c3.metric("Batches com erro", summary.batches_failed)
c4.metric("Tempo (s)", f"{summary.elapsed_s:.1f}")

if summary.final_count is not None:
    st.caption(f"Jogos no banco: {fmt_int(summary.final_count)} / esperado {fmt_int(summary.expected_total)}")

failures = failures_to_df(summary)
if not failures.empty:
    st.warning("Alguns batches falharam; os demais foram mantidos.")
    st.dataframe(failures, width="stretch")

st.download_button(
    "Baixar resumo (ZIP)",
    data=make_zip_bytes(
        [("resumo.json", summary_to_json_bytes(summary)), ("batches_com_erro.csv", df_to_csv_bytes(failures))]
    ),
    file_name="importacao.zip",
    mime="application/zip",
)
