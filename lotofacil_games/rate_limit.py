from __future__ import annotations

import time
from typing import Callable


class FixedIntervalLimiter:
    """
    Garante um intervalo mínimo entre chamadas externas consecutivas.
    A primeira chamada nunca espera; as seguintes dormem só o que falta do intervalo.
    """

    def __init__(
        self,
        interval_s: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if interval_s < 0:
            raise ValueError("interval_s deve ser >= 0")
        self.interval_s = interval_s
        self._clock = clock
        self._sleep = sleep
        self._last: float | None = None

    def wait(self) -> float:
        """Bloqueia até liberar a próxima chamada; retorna quanto dormiu."""
        slept = 0.0
        if self._last is not None and self.interval_s > 0:
            restante = self.interval_s - (self._clock() - self._last)
            if restante > 0:
                self._sleep(restante)
                slept = restante
        self._last = self._clock()
        return slept

    def reset(self) -> None:
        self._last = None
