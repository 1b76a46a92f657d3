import re
from typing import Optional


def parse_lista(texto: str, dedupe: bool = True) -> list[int]:
    """'3, 7 15;21' -> [3, 7, 15, 21]. Tokens não numéricos são ignorados."""
    if not texto:
        return []
    tokens = re.split(r"[,\s;\-]+", texto.strip())
    out: list[int] = []
    seen: set[int] = set()
    for t in tokens:
        if t.isdigit():
            v = int(t)
            if dedupe and v in seen:
                continue
            out.append(v)
            seen.add(v)
    return out


def opcao_bool(valor: str) -> Optional[bool]:
    return {"Sim": True, "Não": False}.get(valor)
