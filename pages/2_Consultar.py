from __future__ import annotations

import streamlit as st

from lotofacil_games.analytics import distribuicao_par_impar
from lotofacil_games.config import TABLE_ALL_GAMES, get_supabase_settings
from lotofacil_games.errors import ConfigError, PersistenceError
from lotofacil_games.games_query import find_similar_games, query_games, validate_game
from lotofacil_games.reports import df_to_csv_bytes, fmt_int
from lotofacil_games.supabase_rest import PostgrestClient
from lotofacil_games.ui import opcao_bool, parse_lista

st.set_page_config(page_title="Consultar", page_icon="🔎", layout="wide")

st.title("Consultar jogos possíveis")

try:
    client = PostgrestClient(get_supabase_settings())
except ConfigError as e:
    st.error(str(e))
    st.stop()

table = client.table(TABLE_ALL_GAMES)

# --------------------------
# Filtros
# --------------------------
with st.sidebar.expander("Filtros", expanded=True):
    impares_txt = st.text_input("Ímpares", placeholder="Ex: 7, 8")
    pares_txt = st.text_input("Pares", placeholder="Ex: 7, 8")
    soma_min = st.number_input("Soma mínima", min_value=0, max_value=400, value=0, step=1)
    soma_max = st.number_input("Soma máxima", min_value=0, max_value=400, value=0, step=1)
    incluir_txt = st.text_input("Devem estar", placeholder="Ex: 3, 7, 15")
    excluir_txt = st.text_input("Não podem estar", placeholder="Ex: 25")
    seq = st.selectbox("Sequência (>=3)", ["Indiferente", "Sim", "Não"])
    limit = st.number_input("Limite", min_value=1, max_value=1000, value=100, step=50)
    offset = st.number_input("Offset", min_value=0, value=0, step=100)

tab_lista, tab_validar, tab_similares = st.tabs(["Listar", "Validar jogo", "Similares"])

with tab_lista:
    try:
        page = query_games(
            table,
            odd_count=parse_lista(impares_txt),
            even_count=parse_lista(pares_txt),
            sum_min=int(soma_min) or None,
            sum_max=int(soma_max) or None,
            must_include=parse_lista(incluir_txt),
            must_exclude=parse_lista(excluir_txt),
            has_sequence=opcao_bool(seq),
            limit=int(limit),
            offset=int(offset),
        )
    except PersistenceError as e:
        st.error("Erro ao buscar jogos possíveis.")
        st.exception(e)
        st.stop()

    c1, c2 = st.columns(2)
    c1.metric("Total (filtro)", fmt_int(page.total))
    c2.metric("Nesta página", len(page.games))

    st.dataframe(page.games, width="stretch")
    if not page.games.empty:
        with st.expander("Distribuição ímpares/pares (página)"):
            st.dataframe(distribuicao_par_impar(page.games), width="stretch")
        st.download_button("Baixar CSV", df_to_csv_bytes(page.games), file_name="jogos.csv", mime="text/csv")

with tab_validar:
    jogo_txt = st.text_input("Jogo (15 dezenas)", placeholder="01-02-03-...", key="validar_jogo")
    if st.button("Validar"):
        try:
            res = validate_game(table, parse_lista(jogo_txt, dedupe=False))
        except ValueError as e:
            st.error(str(e))
        except PersistenceError as e:
            st.error("Erro ao validar jogo.")
            st.exception(e)
        else:
            (st.success if res.valid else st.warning)(res.message)
            st.json(vars(res))

with tab_similares:
    jogo_sim = st.text_input("Jogo (15 dezenas)", placeholder="01-02-03-...", key="similar_jogo")
    min_matches = st.slider("Mínimo de acertos em comum", 1, 15, 11)
    if st.button("Buscar similares"):
        try:
            df = find_similar_games(client, parse_lista(jogo_sim, dedupe=False), min_matches)
        except ValueError as e:
            st.error(str(e))
        except PersistenceError as e:
            st.error("Erro ao buscar jogos similares.")
            st.exception(e)
        else:
            st.metric("Encontrados", len(df))
            st.dataframe(df, width="stretch")
