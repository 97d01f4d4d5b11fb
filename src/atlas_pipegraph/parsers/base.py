"""
Contrato canônico de parser de formato do Atlas PipeGraph.

Um parser reconhece arquivos de um formato (`can_parse`) e converte seu
conteúdo em `PipelineGraph` (`parse`). O conjunto de parsers é fechado e
selecionado pelo `ParserRegistry`, que testa `can_parse` em ordem.

Princípios fundamentais:
    - Parsers não conhecem o planner nem o simulador
    - `parse` nunca levanta exceção: falhas viram grafo vazio com `error`
    - Conformidade é garantida por duck typing (@runtime_checkable)

Invariantes:
    - `name` é único no registry e vira o `framework` do grafo
    - `parse` é assíncrono (colaboradores externos podem ser aguardados)

Limites explícitos:
    - Não descobre arquivos no disco
    - Não renderiza grafos
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import yaml

from atlas_pipegraph.core.errors import ErrorPayload, graph_parse_error
from atlas_pipegraph.core.exceptions import GraphParseError, PipegraphException
from atlas_pipegraph.core.graph.types import PipelineGraph


@runtime_checkable
class GraphParser(Protocol):
    """
    Contrato mínimo de um builder de grafo.

    Atributos obrigatórios:
        - name: nome do formato (ex.: "GitLab CI")

    Métodos:
        - can_parse(file_name, content) -> bool
        - parse(content, file_path) -> PipelineGraph (assíncrono, nunca levanta)
    """
    name: str

    def can_parse(self, file_name: str, content: str) -> bool:
        ...

    async def parse(self, content: str, file_path: str) -> PipelineGraph:
        ...


def normalize_path(file_name: str) -> str:
    return file_name.replace("\\", "/")


def load_yaml_document(content: str) -> Any:
    """Carrega YAML com `safe_load`; erros de sintaxe viram `GraphParseError`."""
    try:
        return yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise GraphParseError(
            message="Invalid YAML document",
            details={"exc_message": str(exc)},
        ) from exc


def exception_to_error(exc: Exception, *, framework: str, file_path: str) -> ErrorPayload:
    """Converte exceções em `ErrorPayload` (serializável, sem stack trace)."""
    if isinstance(exc, PipegraphException):
        return graph_parse_error(
            framework=framework,
            file_path=file_path,
            exc_type=exc.__class__.__name__,
            exc_message=exc.message,
        )
    return graph_parse_error(
        framework=framework,
        file_path=file_path,
        exc_type=exc.__class__.__name__,
        exc_message=str(exc) or None,
    )


def failed_graph(exc: Exception, *, framework: str, file_path: str) -> PipelineGraph:
    return PipelineGraph.empty(
        file_path=file_path,
        framework=framework,
        error=exception_to_error(exc, framework=framework, file_path=file_path),
    )
