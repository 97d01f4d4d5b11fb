"""
Atlas PipeGraph — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do Atlas PipeGraph.
Erros são tratados como dados: nenhum builder ou simulação propaga exceções
para o host. Toda falha vira um payload que deve ser:

- explícito
- serializável
- rastreável
- acionável

Nenhuma falha deste core é fatal para o processo hospedeiro.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict, field
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload canônico de erro do Atlas PipeGraph.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ErrorPayload":
        return cls(
            type=str(data.get("type", "")),
            message=str(data.get("message", "")),
            details=dict(data.get("details") or {}),
            hint=data.get("hint"),
        )


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Parsing / Descoberta
GRAPH_PARSE_ERROR = "GRAPH_PARSE_ERROR"
UNSUPPORTED_FORMAT = "UNSUPPORTED_FORMAT"
TOOL_UNAVAILABLE = "TOOL_UNAVAILABLE"

# Planejamento / Simulação
PLAN_CYCLE_DETECTED = "PLAN_CYCLE_DETECTED"
NODE_EXECUTION_FAILED = "NODE_EXECUTION_FAILED"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def graph_parse_error(
    *,
    framework: str,
    file_path: str,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique a sintaxe do arquivo de pipeline. O grafo retornado está vazio.",
) -> ErrorPayload:
    return ErrorPayload(
        type=GRAPH_PARSE_ERROR,
        message=f"Falha ao interpretar pipeline {framework}",
        details={
            "framework": framework,
            "file_path": file_path,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint=hint,
    )


def unsupported_format(
    *,
    file_path: str,
    available_parsers: List[str],
    hint: str = "Nenhum parser registrado reconhece este arquivo. Registre um parser ou renomeie o arquivo.",
) -> ErrorPayload:
    return ErrorPayload(
        type=UNSUPPORTED_FORMAT,
        message="Formato de pipeline não suportado",
        details={
            "file_path": file_path,
            "available_parsers": list(available_parsers),
        },
        hint=hint,
    )


def tool_unavailable(
    *,
    tool: str,
    cwd: str,
    reason: Optional[str] = None,
    hint: str = "Instale a ferramenta externa no ambiente (venv, uv, pipx ou global) para visualizar este pipeline.",
) -> ErrorPayload:
    return ErrorPayload(
        type=TOOL_UNAVAILABLE,
        message=f"Ferramenta externa '{tool}' indisponível",
        details={
            "tool": tool,
            "cwd": cwd,
            "reason": reason,
        },
        hint=hint,
    )


def plan_cycle_detected(
    *,
    unresolved: List[str],
    hint: str = "Remova a dependência circular (ou a referência pendente) entre os nós listados.",
) -> ErrorPayload:
    return ErrorPayload(
        type=PLAN_CYCLE_DETECTED,
        message="Ciclo detectado no grafo de execução",
        details={"unresolved": list(unresolved)},
        hint=hint,
    )


def node_execution_failed(
    *,
    node_id: str,
    label: Optional[str] = None,
    reason: Optional[str] = None,
) -> ErrorPayload:
    return ErrorPayload(
        type=NODE_EXECUTION_FAILED,
        message=f"Pipeline failed at node: {label or node_id}",
        details={
            "node_id": node_id,
            "label": label,
            "reason": reason,
        },
        hint=None,
    )
