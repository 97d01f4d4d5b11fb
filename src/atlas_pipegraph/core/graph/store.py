"""
Store observável de status do grafo.

Este módulo define o `GraphStatusStore`, o detentor do snapshot corrente do
grafo durante uma simulação. Cada mudança de status substitui o snapshot por
um novo `PipelineGraph` imutável e notifica os listeners inscritos.

Princípios fundamentais:
    - Snapshots nunca são mutados: observadores podem reter referências
    - Inscrição explícita: `subscribe(listener)` retorna a função de cancelamento
    - Sem singleton global: cada simulador recebe sua própria instância

Invariantes:
    - Apenas o campo `status` de nós e arestas é alterado pelo store
    - Ids desconhecidos são ignorados sem erro e sem notificação
    - Listeners são notificados na ordem de inscrição

Limites explícitos:
    - Não planeja nem executa nós
    - Não persiste snapshots
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, List, Optional

from .types import NodeStatus, PipelineGraph


@dataclass(frozen=True)
class StatusChange:
    """Descrição de uma transição: `kind` é "node" ou "edge"."""
    kind: str
    item_id: str
    status: NodeStatus


Listener = Callable[[PipelineGraph, Optional[StatusChange]], None]


class GraphStatusStore:
    def __init__(self, graph: PipelineGraph):
        self._snapshot = graph
        self._listeners: List[Listener] = []

    @property
    def snapshot(self) -> PipelineGraph:
        return self._snapshot

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, graph: PipelineGraph, change: Optional[StatusChange]) -> None:
        self._snapshot = graph
        for listener in list(self._listeners):
            listener(graph, change)

    def set_node_status(self, node_id: str, status: NodeStatus) -> None:
        status = NodeStatus(status)
        current = self._snapshot
        if current.node(node_id) is None:
            return
        nodes = tuple(n.with_status(status) if n.id == node_id else n for n in current.nodes)
        self._publish(replace(current, nodes=nodes), StatusChange("node", node_id, status))

    def set_edge_status(self, edge_id: str, status: NodeStatus) -> None:
        status = NodeStatus(status)
        current = self._snapshot
        if not any(e.id == edge_id for e in current.edges):
            return
        # arestas paralelas com o mesmo id mudam juntas
        edges = tuple(e.with_status(status) if e.id == edge_id else e for e in current.edges)
        self._publish(replace(current, edges=edges), StatusChange("edge", edge_id, status))

    def reset_statuses(self) -> None:
        """Volta todos os nós e arestas para `idle`, preservando os demais campos."""
        current = self._snapshot
        graph = replace(
            current,
            nodes=tuple(n.with_status(NodeStatus.IDLE) for n in current.nodes),
            edges=tuple(e.with_status(NodeStatus.IDLE) for e in current.edges),
        )
        self._publish(graph, None)
