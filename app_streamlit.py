import streamlit as st

from lotofacil_games.config import get_supabase_settings
from lotofacil_games.errors import ConfigError, PersistenceError
from lotofacil_games.games_query import games_stats
from lotofacil_games.reports import fmt_int
from lotofacil_games.state import clear_summaries, init_state
from lotofacil_games.supabase_rest import PostgrestClient

st.set_page_config(page_title="Lotofácil - Jogos possíveis", page_icon="🎲", layout="wide")

init_state()

st.title("Gerenciador de Jogos Possíveis")
st.caption("Tabela com as 3.268.760 combinações da Lotofácil e metadados por jogo.")

try:
    client = PostgrestClient(get_supabase_settings())
except ConfigError as e:
    st.error(str(e))
    st.stop()

c1, c2 = st.columns(2)
with c1:
    if st.button("Atualizar"):
        st.rerun()
with c2:
    if st.button("Limpar sessão"):
        clear_summaries()
        st.rerun()

with st.spinner("Carregando estatísticas..."):
    try:
        data = games_stats(client)
    except PersistenceError as e:
        st.error("Erro ao buscar estatísticas.")
        st.exception(e)
        st.stop()

total = data["total_games"]
esperado = data["expected_total"]

a1, a2, a3 = st.columns(3)
a1.metric("Jogos no banco", fmt_int(total))
a2.metric("Esperado", fmt_int(esperado))
a3.metric("Completo", "SIM" if data["is_complete"] else "NÃO")

st.progress(min(total / esperado, 1.0), text=f"{100 * total / esperado:.2f}%")

stats = data["stats"]
b1, b2, b3, b4 = st.columns(4)
b1.metric("Soma mín/máx", f"{stats.get('min_sum') or 'NA'} / {stats.get('max_sum') or 'NA'}")
b2.metric("Soma média", stats.get("avg_sum") or "NA")
b3.metric("Com sequência (>=3)", fmt_int(stats.get("games_with_sequences")))
b4.metric("7 ímpares/8 pares", fmt_int(stats.get("balanced_7_8")))

st.caption(f"Atualizado em {data['timestamp']}")

if not data["is_complete"]:
    st.warning("Tabela incompleta. Use a página Importar (ou `lotofacil-games import`).")

st.info("Use as páginas no menu lateral: Importar, Consultar e Resultados.")
