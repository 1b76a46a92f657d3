import pytest
import requests

from conftest import FakeResponse
from lotofacil_games.errors import PersistenceError
from lotofacil_games.supabase_rest import parse_content_range, pg_array, pg_in


def test_insert_envia_lote_com_cabecalhos(make_client):
    client, session = make_client(lambda *a: FakeResponse(201))
    client.table("all_possible_games").insert([{"numbers": [1]}, {"numbers": [2]}])

    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "https://proj.supabase.co/rest/v1/all_possible_games"
    assert call["json"] == [{"numbers": [1]}, {"numbers": [2]}]
    assert call["headers"]["apikey"] == "service-key"
    assert call["headers"]["Authorization"] == "Bearer service-key"
    assert call["headers"]["Prefer"] == "return=minimal"


def test_erro_http_vira_persistence_error(make_client):
    client, _ = make_client(lambda *a: FakeResponse(400, {"message": "invalid input syntax"}))
    with pytest.raises(PersistenceError) as exc:
        client.table("all_possible_games").insert([{}])
    assert exc.value.status == 400
    assert "invalid input syntax" in str(exc.value)


def test_erro_de_transporte_vira_persistence_error(make_client):
    def handler(*a):
        raise requests.ConnectionError("connection refused")

    client, _ = make_client(handler)
    with pytest.raises(PersistenceError) as exc:
        client.table("all_possible_games").probe()
    assert exc.value.status is None


def test_delete_all_e_probe(make_client):
    client, session = make_client(lambda *a: FakeResponse(200, []))
    t = client.table("all_possible_games")
    t.probe()
    t.delete_all()

    assert session.calls[0]["method"] == "GET"
    assert session.calls[0]["params"] == [("select", "id"), ("limit", "1")]
    assert session.calls[1]["method"] == "DELETE"
    assert session.calls[1]["params"] == [("id", "neq.0")]


def test_count_le_content_range(make_client):
    client, session = make_client(lambda *a: FakeResponse(200, headers={"Content-Range": "0-0/3268760"}))
    assert client.table("all_possible_games").count() == 3268760
    assert session.calls[0]["method"] == "HEAD"
    assert session.calls[0]["headers"]["Prefer"] == "count=exact"


def test_upsert_e_rpc(make_client):
    client, session = make_client(lambda *a: FakeResponse(200, [{"id": 1}]))
    client.table("lottery_results").upsert([{"contest_number": 1}], on_conflict="contest_number")
    assert client.rpc("find_similar_games", {"min_matches": 11}) == [{"id": 1}]

    assert session.calls[0]["params"] == [("on_conflict", "contest_number")]
    assert "resolution=merge-duplicates" in session.calls[0]["headers"]["Prefer"]
    assert session.calls[1]["url"].endswith("/rest/v1/rpc/find_similar_games")


def test_select_com_ordem_limite_e_total(make_client):
    client, session = make_client(
        lambda *a: FakeResponse(200, [{"id": 3}], headers={"Content-Range": "20-20/57"})
    )
    rows, total = client.table("t").select("id", [("odd_count", "eq.7")], order="id", limit=1, offset=20, count=True)
    assert rows == [{"id": 3}]
    assert total == 57
    assert session.calls[0]["params"] == [
        ("select", "id"),
        ("odd_count", "eq.7"),
        ("order", "id"),
        ("limit", "1"),
        ("offset", "20"),
    ]


@pytest.mark.parametrize(
    "valor,esperado",
    [("0-24/3268760", 3268760), ("*/0", 0), ("0-9/*", None), (None, None), ("", None)],
)
def test_parse_content_range(valor, esperado):
    assert parse_content_range(valor) == esperado


def test_formatos_postgrest():
    assert pg_array([3, 7, 15]) == "{3,7,15}"
    assert pg_in([7, 8]) == "in.(7,8)"
