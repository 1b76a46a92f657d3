import pytest

from conftest import FakeResponse
from lotofacil_games.games_query import build_filters, find_similar_games, games_stats, query_games, validate_game


def _row(i, numbers):
    return {"id": i, "numbers": numbers, "numbers_str": "-".join(f"{n:02d}" for n in numbers)}


def test_build_filters():
    params = build_filters(
        odd_count=[7, 8],
        sum_min=180,
        sum_max=210,
        must_include=[3, 7],
        must_exclude=[25],
        has_sequence=False,
    )
    assert params == [
        ("odd_count", "in.(7,8)"),
        ("sum_numbers", "gte.180"),
        ("sum_numbers", "lte.210"),
        ("has_sequence", "eq.false"),
        ("numbers", "cs.{3,7}"),
        ("numbers", "not.ov.{25}"),
    ]
    assert build_filters() == []


def test_query_games_limita_e_monta_dataframe(make_client):
    rows = [_row(1, list(range(1, 16))), _row(2, list(range(2, 17)))]
    client, session = make_client(lambda *a: FakeResponse(200, rows, headers={"Content-Range": "0-1/3268760"}))

    page = query_games(client.table("all_possible_games"), limit=5000, offset=0, even_count=[7])

    assert page.limit == 1000
    assert page.total == 3268760
    assert list(page.games["d1"]) == [1, 2]
    assert list(page.games["d15"]) == [15, 16]
    params = session.calls[0]["params"]
    assert ("limit", "1000") in params
    assert ("even_count", "in.(7)") in params


def test_query_games_vazio(make_client):
    client, _ = make_client(lambda *a: FakeResponse(200, [], headers={"Content-Range": "*/0"}))
    page = query_games(client.table("all_possible_games"))
    assert page.total == 0
    assert page.games.empty


def test_validate_game_existente(make_client):
    numbers = list(range(15, 0, -1))
    client, session = make_client(lambda *a: FakeResponse(200, [_row(42, list(range(1, 16)))]))

    res = validate_game(client.table("all_possible_games"), numbers)

    assert res.valid
    assert res.game_id == 42
    assert res.numbers == list(range(1, 16))
    assert res.numbers_str == "01-02-03-04-05-06-07-08-09-10-11-12-13-14-15"
    assert ("numbers", "cs.{1,2,3,4,5,6,7,8,9,10,11,12,13,14,15}") in session.calls[0]["params"]


def test_validate_game_inexistente(make_client):
    client, _ = make_client(lambda *a: FakeResponse(200, []))
    res = validate_game(client.table("all_possible_games"), list(range(11, 26)))
    assert not res.valid
    assert res.game_id is None
    assert "inválido" in res.message


def test_validate_game_entrada_invalida_nao_consulta(make_client):
    client, session = make_client(lambda *a: FakeResponse(200, []))
    with pytest.raises(ValueError):
        validate_game(client.table("all_possible_games"), [1, 2, 3])
    assert session.calls == []


def test_find_similar_games(make_client):
    data = [{"id": 1, "numbers": list(range(1, 16)), "matches": 15}]
    client, session = make_client(lambda *a: FakeResponse(200, data))

    df = find_similar_games(client, list(range(1, 16)), min_matches=12)

    assert len(df) == 1
    assert session.calls[0]["json"] == {"input_numbers": list(range(1, 16)), "min_matches": 12}
    with pytest.raises(ValueError):
        find_similar_games(client, list(range(1, 16)), min_matches=0)
    with pytest.raises(ValueError):
        find_similar_games(client, [1, 2], min_matches=11)


def test_games_stats_sem_view_usa_contagem(make_client):
    def handler(method, url, params, json):
        if url.endswith("all_games_stats"):
            return FakeResponse(404, {"message": "relation does not exist"})
        return FakeResponse(200, headers={"Content-Range": "*/3268760"})

    client, _ = make_client(handler)
    data = games_stats(client)

    assert data["total_games"] == 3268760
    assert data["is_complete"] is True
    assert data["stats"]["min_sum"] is None
    assert data["stats"]["total_games"] == 3268760


def test_games_stats_com_view(make_client):
    view = {"total_games": 10, "min_sum": 120, "max_sum": 270, "avg_sum": 195.0}

    def handler(method, url, params, json):
        if url.endswith("all_games_stats"):
            return FakeResponse(200, [view])
        return FakeResponse(200, headers={"Content-Range": "*/10"})

    client, _ = make_client(handler)
    data = games_stats(client)
    assert data["stats"] == view
    assert data["is_complete"] is False
