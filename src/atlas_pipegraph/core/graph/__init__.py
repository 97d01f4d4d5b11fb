"""
# Graph Core — Atlas PipeGraph

Este pacote define o **modelo canônico** de grafo trocado entre builders de
formato, planner e simulador, e o store observável usado durante simulações.

## Componentes

- **types**
  - `NodeStatus`, `NodeType`
  - `PipelineNode`, `PipelineEdge`, `PipelineGraph`

- **store**
  - `GraphStatusStore`: snapshots imutáveis + `subscribe → unsubscribe`
  - `StatusChange`: transição individual notificada aos listeners

## Limites Explícitos

- Não interpreta formatos de pipeline
- Não planeja execução
- Não depende de renderer ou editor
"""

from .store import GraphStatusStore, StatusChange
from .types import NodeStatus, NodeType, PipelineEdge, PipelineGraph, PipelineNode

__all__ = [
    "GraphStatusStore",
    "StatusChange",
    "NodeStatus",
    "NodeType",
    "PipelineEdge",
    "PipelineGraph",
    "PipelineNode",
]
