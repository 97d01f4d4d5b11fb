"""
Tipos canônicos do grafo de pipeline do Atlas PipeGraph.

Este módulo define as estruturas e enums fundamentais trocadas entre os
builders de formato, o planner e o simulador.

Componentes principais:
    - NodeStatus    → enum de estados de nós e arestas (idle, processing, success, failed)
    - NodeType      → enum de tipos de nó (default, artifact)
    - PipelineNode  → nó imutável (job, stage ou artefato)
    - PipelineEdge  → aresta dirigida imutável
    - PipelineGraph → grafo canônico `{nodes, edges}` com marcador de erro

Princípios fundamentais:
    - Tipos são estáveis e serializáveis (wire shape em `to_dict`)
    - Instâncias são imutáveis: mudança de status produz nova instância
    - Nenhuma lógica de parsing ou execução vive neste módulo

Invariantes:
    - Ids de nós são únicos dentro de um grafo
    - A ordem de nós e arestas é a ordem de inserção do builder e só
      importa como critério de desempate determinístico
    - Arestas podem referenciar ids inexistentes; consumidores toleram

Limites explícitos:
    - Não valida integridade referencial
    - Não persiste grafos
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

from atlas_pipegraph.core.errors import ErrorPayload


class NodeStatus(str, Enum):
    """
    Estados possíveis de um nó ou aresta durante a simulação.

    Máquina de estados:
        idle → processing → {success, failed}
        processing → idle (cancelamento durante o processamento)

    Os valores são strings para facilitar serialização e comparação com
    o wire shape consumido pelo renderer.
    """
    IDLE = "idle"
    PROCESSING = "processing"
    SUCCESS = "success"
    FAILED = "failed"


class NodeType(str, Enum):
    """Tipo do nó: unidade de trabalho (`default`) ou artefato de dados (`artifact`)."""
    DEFAULT = "default"
    ARTIFACT = "artifact"


@dataclass(frozen=True)
class PipelineNode:
    """
    Nó imutável do grafo de pipeline.

    Campos:
        - id: identificador único e estável
        - label: texto de exibição
        - type: `NodeType` (default ou artifact)
        - status: `NodeStatus` corrente (default idle)
        - data: atributos específicos do formato (stage, data_type, ...)

    Apenas o simulador altera `status`, sempre via `with_status`.
    """
    id: str
    label: str
    type: NodeType = NodeType.DEFAULT
    status: NodeStatus = NodeStatus.IDLE
    data: Dict[str, Any] = field(default_factory=dict)

    def with_status(self, status: NodeStatus) -> "PipelineNode":
        return replace(self, status=NodeStatus(status))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "type": self.type.value,
            "status": self.status.value,
            "data": dict(self.data),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipelineNode":
        node_id = str(data["id"])
        return cls(
            id=node_id,
            label=str(data.get("label") or node_id),
            type=NodeType(data.get("type") or NodeType.DEFAULT.value),
            status=NodeStatus(data.get("status") or NodeStatus.IDLE.value),
            data=dict(data.get("data") or {}),
        )


@dataclass(frozen=True)
class PipelineEdge:
    """Aresta dirigida imutável `source → target`."""
    id: str
    source: str
    target: str
    label: Optional[str] = None
    status: NodeStatus = NodeStatus.IDLE

    def with_status(self, status: NodeStatus) -> "PipelineEdge":
        return replace(self, status=NodeStatus(status))

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "status": self.status.value,
        }
        if self.label is not None:
            out["label"] = self.label
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipelineEdge":
        source = str(data["source"])
        target = str(data["target"])
        return cls(
            id=str(data.get("id") or f"e-{source}-{target}"),
            source=source,
            target=target,
            label=data.get("label"),
            status=NodeStatus(data.get("status") or NodeStatus.IDLE.value),
        )


@dataclass(frozen=True)
class PipelineGraph:
    """
    Grafo canônico de troca entre builder, planner e simulador.

    Campos:
        - file_path: arquivo de origem
        - framework: nome do formato (ex.: "GitLab CI", "DVC")
        - nodes / edges: tuplas imutáveis em ordem de inserção
        - error: marcador de falha de parsing (`ErrorPayload`) ou None

    Invariantes:
        - Um grafo com `error` possui `nodes` e `edges` vazios
    """
    file_path: str
    framework: str
    nodes: Tuple[PipelineNode, ...] = ()
    edges: Tuple[PipelineEdge, ...] = ()
    error: Optional[ErrorPayload] = None

    @classmethod
    def build(
        cls,
        *,
        file_path: str,
        framework: str,
        nodes: Iterable[PipelineNode] = (),
        edges: Iterable[PipelineEdge] = (),
    ) -> "PipelineGraph":
        return cls(file_path=file_path, framework=framework, nodes=tuple(nodes), edges=tuple(edges))

    @classmethod
    def empty(
        cls,
        *,
        file_path: str,
        framework: str,
        error: Optional[ErrorPayload] = None,
    ) -> "PipelineGraph":
        return cls(file_path=file_path, framework=framework, error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def node(self, node_id: str) -> Optional[PipelineNode]:
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "filePath": self.file_path,
            "framework": self.framework,
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }
        if self.error is not None:
            out["error"] = self.error.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any], *, file_path: Optional[str] = None) -> "PipelineGraph":
        error = data.get("error")
        return cls(
            file_path=str(file_path if file_path is not None else data.get("filePath", "")),
            framework=str(data.get("framework") or "Unknown"),
            nodes=tuple(PipelineNode.from_dict(n) for n in (data.get("nodes") or [])),
            edges=tuple(PipelineEdge.from_dict(e) for e in (data.get("edges") or [])),
            error=ErrorPayload.from_dict(error) if isinstance(error, dict) else None,
        )
