from __future__ import annotations

from typing import Any, Optional


class LotofacilError(Exception):
    """Base de todos os erros do pacote."""


class ConfigError(LotofacilError):
    pass


class PersistenceError(LotofacilError):
    """Falha de chamada ao backend (HTTP != 2xx ou erro de transporte)."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ImportAborted(LotofacilError):
    """Erro fatal: a importação para sem declarar sucesso parcial."""

    def __init__(self, message: str, stage: Optional[str] = None, summary: Any = None):
        super().__init__(message)
        self.stage = stage
        self.summary = summary


class SourceError(ImportAborted):
    pass
