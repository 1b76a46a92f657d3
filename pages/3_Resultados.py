from __future__ import annotations

import streamlit as st

from lotofacil_games.analytics import frequencias
from lotofacil_games.caixa_sync import (
    CaixaClient,
    load_stored_results,
    sync_latest_result,
    update_all_historical_results,
)
from lotofacil_games.config import TABLE_RESULTS, get_results_api_url, get_supabase_settings
from lotofacil_games.errors import ConfigError, PersistenceError
from lotofacil_games.state import get_sync_summary, init_state, set_sync_summary
from lotofacil_games.supabase_rest import PostgrestClient

st.set_page_config(page_title="Resultados", page_icon="📅", layout="wide")
init_state()

st.title("Resultados oficiais")

try:
    client = PostgrestClient(get_supabase_settings())
except ConfigError as e:
    st.error(str(e))
    st.stop()

table = client.table(TABLE_RESULTS)
caixa = CaixaClient(get_results_api_url())

st.sidebar.markdown("### Ações")
max_contest = st.sidebar.number_input("Concurso máximo (0 = padrão)", min_value=0, value=0, step=1)
c1, c2 = st.sidebar.columns(2)
with c1:
    if st.button("Último concurso"):
        with st.sidebar:
            with st.spinner("Sincronizando..."):
                set_sync_summary(sync_latest_result(table, caixa))
with c2:
    if st.button("Histórico"):
        with st.sidebar:
            with st.spinner("Buscando resultados históricos..."):
                set_sync_summary(update_all_historical_results(table, caixa, int(max_contest) or None))

res = get_sync_summary()
if res is not None:
    (st.success if res.success else st.error)(res.message)
    if res.errors:
        with st.expander(f"Erros ({len(res.errors)})"):
            st.write(res.errors)

try:
    df = load_stored_results(table)
except PersistenceError as e:
    st.error("Erro ao carregar resultados do banco.")
    st.exception(e)
    st.stop()

if df.empty:
    st.info("Sem resultados no banco. Use 'Histórico' para sincronizar.")
    st.stop()

a1, a2, a3 = st.columns(3)
a1.metric("Concursos", len(df))
a2.metric("Concurso max", int(df["concurso"].max()))
a3.metric("Data do último", str(df["data"].max().date()))

freq = frequencias(df)
st.subheader("Frequência das dezenas")
st.bar_chart(freq.set_index("dezena")[["frequencia"]])

with st.expander("Amostra (tail)"):
    st.dataframe(df.tail(30), width="stretch")
