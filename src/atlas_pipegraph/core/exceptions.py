"""
Atlas PipeGraph — Canonical Exceptions (v1)

Este módulo define exceções tipadas internas do Atlas PipeGraph.

Objetivo:
- Permitir que builders, colaboradores e hooks levantem exceções semânticas
- Facilitar o mapeamento determinístico para ErrorPayload
- Evitar ValueError/RuntimeError genéricos em fronteiras críticas

Regras:
- Exceções nunca atravessam o contrato público de parsers (viram payload).
- Exceções devem carregar apenas dados estruturados (serializáveis).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class PipegraphException(Exception):
    """Base class para exceções internas do Atlas PipeGraph.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message


@dataclass(frozen=True)
class GraphParseError(PipegraphException):
    """Conteúdo do arquivo não pôde ser convertido em grafo."""


@dataclass(frozen=True)
class ToolUnavailableError(PipegraphException):
    """Ferramenta externa (ex.: CLI do DVC) não encontrada ou falhou."""


@dataclass(frozen=True)
class NodeExecutionError(PipegraphException):
    """Hook de resultado sinalizou falha de um nó durante a simulação."""
