"""
Planejador de execução do grafo de pipeline.

Este módulo produz uma ordem de execução topológica determinística a partir
de qualquer grafo `{nodes, edges}` emitido por um builder de formato.

A saída do planner é uma sequência linear de ids de nós pronta para ser
percorrida pelo simulador, respeitando todas as arestas entre nós conhecidos.

Princípios fundamentais:
    - A função é pura: nenhum argumento é mutado
    - A ordenação é determinística para a mesma entrada
    - Grafos vindos de builders podem conter arestas pendentes; o planner
      nunca falha por causa delas

Decisões arquiteturais:
    - Utiliza o algoritmo de Kahn com fila FIFO
    - Empates são resolvidos pela ordem do array de nós (semeadura) e, em
      seguida, pela ordem de iteração das arestas
    - O grau de entrada conta apenas arestas cujo `target` é um nó conhecido
    - Nós que nunca atingem grau zero (ciclos) são omitidos por padrão;
      `on_cycle="error"` transforma a omissão em `CycleDetectedError`

Invariantes:
    - Para toda aresta (u, v) de um grafo acíclico, u aparece antes de v
    - Cada nó aparece no máximo uma vez
    - A mesma entrada sempre produz a mesma ordem

Limites explícitos:
    - Não executa nós
    - Não altera status
    - Não registra eventos
"""

from __future__ import annotations

from collections import deque
from typing import Deque, Dict, List, Sequence, Set

from atlas_pipegraph.core.graph.types import PipelineEdge, PipelineNode


class CycleDetectedError(ValueError):
    """
    Exceção levantada, em modo estrito, quando nós ficam fora do plano.

    Isso ocorre quando o grafo contém um ciclo (ou uma aresta cuja origem não
    existe aponta para o nó), de modo que alguns nós nunca atingem grau de
    entrada zero.

    Atributos:
        - unresolved: ids dos nós omitidos, na ordem do array de nós
    """

    def __init__(self, unresolved: Sequence[str]):
        self.unresolved: List[str] = list(unresolved)
        super().__init__(
            "Cycle detected in pipeline graph; unresolved nodes: " + ", ".join(self.unresolved)
        )


def build_execution_plan(
    nodes: Sequence[PipelineNode],
    edges: Sequence[PipelineEdge],
    *,
    on_cycle: str = "omit",
) -> List[str]:
    """
    Converte um grafo em ordem de execução linear (algoritmo de Kahn).

    Passos:
        1. Grau de entrada por nó, contando apenas arestas com `target` conhecido
        2. Fila semeada, na ordem do array de nós, com os nós de grau zero
        3. Retira um nó, anexa ao plano (ignorando já visitados), decrementa o
           grau de cada destino de suas arestas de saída e enfileira quem
           chegar a zero

    Args:
        nodes (Sequence[PipelineNode]): Nós do grafo, em ordem de inserção.
        edges (Sequence[PipelineEdge]): Arestas do grafo, em ordem de inserção.
        on_cycle (str): "omit" (padrão) ou "error".

    Returns:
        List[str]: Ids de nós em ordem topológica determinística.

    Raises:
        ValueError: Se `on_cycle` não for "omit" nem "error".
        CycleDetectedError: Em modo "error", se algum nó ficar fora do plano.
    """
    if on_cycle not in ("omit", "error"):
        raise ValueError(f"on_cycle must be 'omit' or 'error', got {on_cycle!r}")

    node_ids: List[str] = [n.id for n in nodes]
    in_degree: Dict[str, int] = {nid: 0 for nid in node_ids}
    outgoing: Dict[str, List[str]] = {}

    for e in edges:
        if e.target not in in_degree:
            continue
        in_degree[e.target] += 1
        outgoing.setdefault(e.source, []).append(e.target)

    queue: Deque[str] = deque(nid for nid in node_ids if in_degree[nid] == 0)
    visited: Set[str] = set()
    plan: List[str] = []

    while queue:
        nid = queue.popleft()
        if nid in visited:
            continue
        visited.add(nid)
        plan.append(nid)
        for child in outgoing.get(nid, []):
            in_degree[child] -= 1
            if in_degree[child] == 0:
                queue.append(child)

    if on_cycle == "error" and len(visited) < len(in_degree):
        raise CycleDetectedError([nid for nid in node_ids if nid not in visited])

    return plan
