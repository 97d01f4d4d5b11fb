"""
Engine do Atlas PipeGraph.

Este pacote contém a implementação responsável por **planejar** e
**simular** a execução de grafos de pipeline.

Componentes principais:
    - planner   → ordenação topológica determinística (Kahn)
    - simulator → coreografia cancelável de status por nó/aresta
    - context   → identidade da run, configuração e log estruturado

Princípios fundamentais:
    - Planejamento e simulação são responsabilidades separadas
    - A ordem de execução é determinística para o mesmo grafo
    - Cada run emite exatamente uma notificação terminal

Limites explícitos:
    - Não executa trabalho real
    - Não interpreta formatos de pipeline
    - Não persiste resultados
"""

from .context import RunContext
from .planner import CycleDetectedError, build_execution_plan
from .simulator import (
    CancellationToken,
    ExecutionSimulator,
    NotificationLevel,
    RunOutcome,
    RunResult,
    StepOutcome,
    finalize_run,
    process_node_step,
)

__all__ = [
    "RunContext",
    "CycleDetectedError",
    "build_execution_plan",
    "CancellationToken",
    "ExecutionSimulator",
    "NotificationLevel",
    "RunOutcome",
    "RunResult",
    "StepOutcome",
    "finalize_run",
    "process_node_step",
]
