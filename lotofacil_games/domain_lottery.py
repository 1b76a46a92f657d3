from __future__ import annotations

from typing import Iterable, Optional, Sequence

from .config import FAIXAS, LIMITE_BAIXO, N_DEZENAS, N_UNIVERSO
from .models import Combination, CombinationMetadata, GameRecord


def format_combination(jogo: Iterable[int]) -> str:
    return "-".join(f"{d:02d}" for d in sorted(jogo))


def pares_impares(jogo: Sequence[int]) -> tuple[int, int]:
    pares = sum(1 for d in jogo if d % 2 == 0)
    return pares, len(jogo) - pares


def baixos_altos(jogo: Sequence[int], limite_baixo: int = LIMITE_BAIXO) -> tuple[int, int]:
    baixos = sum(1 for d in jogo if 1 <= d <= limite_baixo)
    return baixos, len(jogo) - baixos


def contagem_faixas(jogo: Sequence[int]) -> dict[str, int]:
    return {col: sum(1 for d in jogo if ini <= d <= fim) for col, ini, fim in FAIXAS}


def sequencias(jogo: Sequence[int], limite: int = 3) -> tuple[bool, int]:
    """
    Varre o jogo (já ordenado) uma vez.
    Retorna (tem sequência >= limite, tamanho da maior sequência).
    """
    tem = False
    atual = 1
    maior = 1
    for i in range(1, len(jogo)):
        if jogo[i] == jogo[i - 1] + 1:
            atual += 1
            if atual > maior:
                maior = atual
            if atual >= limite:
                tem = True
        else:
            atual = 1
    return tem, maior


def compute_metadata(combination: Combination) -> CombinationMetadata:
    jogo = combination.numbers
    pares, impares = pares_impares(jogo)
    baixos, altos = baixos_altos(jogo)
    faixas = contagem_faixas(jogo)
    tem_seq, maior_seq = sequencias(jogo)
    return CombinationMetadata(
        sum=sum(jogo),
        odd_count=impares,
        even_count=pares,
        low_count=baixos,
        high_count=altos,
        has_sequence=tem_seq,
        max_sequence_length=maior_seq,
        **faixas,
    )


def parse_line(raw_line: str) -> Optional[Combination]:
    """
    Converte uma linha do CSV ("01-02-...-15", com ou sem aspas) em Combination.

    Linhas vazias ou inválidas retornam None (são puladas, não são erro).
    Valores são ordenados e duplicatas rejeitadas.
    """
    linha = raw_line.replace('"', "").strip()
    if not linha:
        return None

    tokens = linha.split("-")
    if len(tokens) != N_DEZENAS:
        return None

    dezenas: list[int] = []
    for t in tokens:
        t = t.strip()
        if not (t.isascii() and t.isdigit()):
            return None
        d = int(t)
        if d < 1 or d > N_UNIVERSO:
            return None
        dezenas.append(d)

    if len(set(dezenas)) != N_DEZENAS:
        return None
    return Combination(tuple(sorted(dezenas)))


def to_record(combination: Combination, metadata: CombinationMetadata | None = None) -> GameRecord:
    m = metadata or compute_metadata(combination)
    return {
        "numbers": list(combination.numbers),
        "numbers_str": format_combination(combination.numbers),
        "sum_numbers": m.sum,
        "odd_count": m.odd_count,
        "even_count": m.even_count,
        "low_count": m.low_count,
        "high_count": m.high_count,
        "range_01_05": m.range_01_05,
        "range_06_10": m.range_06_10,
        "range_11_15": m.range_11_15,
        "range_16_20": m.range_16_20,
        "range_21_25": m.range_21_25,
        "has_sequence": m.has_sequence,
        "max_sequence_length": m.max_sequence_length,
    }


def validate_numbers(numbers) -> list[int]:
    """Validação estrita de um jogo informado pelo usuário; retorna o jogo ordenado."""
    if not isinstance(numbers, (list, tuple)):
        raise ValueError('O campo "numbers" deve ser uma lista')
    if len(numbers) != N_DEZENAS:
        raise ValueError(f"Um jogo da Lotofácil deve ter exatamente {N_DEZENAS} números")
    if not all(isinstance(n, int) and not isinstance(n, bool) and 1 <= n <= N_UNIVERSO for n in numbers):
        raise ValueError(f"Todos os números devem estar entre 1 e {N_UNIVERSO}")
    if len(set(numbers)) != N_DEZENAS:
        raise ValueError("Não pode haver números duplicados")
    return sorted(numbers)
