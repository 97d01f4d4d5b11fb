"""
Simulador de execução do grafo de pipeline do Atlas PipeGraph.

O simulador percorre o plano produzido pelo planner e conduz a coreografia
de status de nós e arestas, sem executar trabalho real. É a camada que um
renderer observa (via `GraphStatusStore.subscribe`) para animar a run.

Máquina de estados por nó/aresta:
    idle → processing → {success, failed}
    processing → idle  (cancelamento durante o processamento)

Estados da run:
    not-running → running → {stopped, failed, completed}

Decisões arquiteturais:
    - Um único fluxo cooperativo (asyncio); nós são processados em ordem,
      um de cada vez, mesmo quando independentes entre si
    - Um ponto de suspensão por nó (`step_delay`), onde o cancelamento é lido
    - Cancelamento via `CancellationToken` passado por referência ao loop
    - O resultado de cada nó vem de um hook plugável (padrão: sucesso)
    - Exceções do hook são convertidas em falha do nó (sem propagação)
    - Exatamente uma notificação terminal por run, com prioridade
      stopped > failed > completed

Invariantes:
    - `run()` concorrente é no-op enquanto outra run está ativa
    - Nós já concluídos mantêm seu último status após falha ou parada
    - Nenhum nó posterior é tocado após cancelamento ou falha
    - Todo status é alterado via store (snapshots imutáveis)

Limites explícitos:
    - Não executa passos reais de pipeline
    - Não persiste grafos nem resultados
    - Não decide layout ou renderização
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple, Union

from atlas_pipegraph.core.config.hashing import compute_config_hash
from atlas_pipegraph.core.config.settings import planner_on_cycle, simulation_settings
from atlas_pipegraph.core.errors import (
    ErrorPayload,
    node_execution_failed,
    plan_cycle_detected,
)
from atlas_pipegraph.core.exceptions import PipegraphException
from atlas_pipegraph.core.graph.store import GraphStatusStore
from atlas_pipegraph.core.graph.types import NodeStatus, PipelineEdge, PipelineNode

from .context import RunContext
from .planner import CycleDetectedError, build_execution_plan


class NotificationLevel(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class RunOutcome(str, Enum):
    """Estado terminal de uma run."""
    COMPLETED = "completed"
    FAILED = "failed"
    STOPPED = "stopped"


MSG_STARTED = "Pipeline started"
MSG_STOPPED = "Pipeline stopped"
MSG_COMPLETED = "Pipeline completed successfully"
MSG_FAILED_AT = "Pipeline failed at node: {}"
MSG_FAILED_CYCLE = "Pipeline failed: execution graph has a cycle"

Notify = Callable[[NotificationLevel, str], None]
OutcomeHook = Callable[[PipelineNode], Union[bool, Awaitable[bool]]]


def always_succeed(node: PipelineNode) -> bool:
    return True


class CancellationToken:
    """Flag de cancelamento cooperativo, lida pelo loop a cada ponto de suspensão."""

    def __init__(self) -> None:
        self._requested = False

    @property
    def requested(self) -> bool:
        return self._requested

    def request(self) -> None:
        self._requested = True

    def reset(self) -> None:
        self._requested = False


@dataclass(frozen=True)
class StepOutcome:
    """Resultado do processamento de um único nó."""
    success: bool
    stopped: bool
    error: Optional[ErrorPayload] = None


@dataclass(frozen=True)
class RunResult:
    """Resultado agregado de uma simulação."""
    run_id: str
    outcome: RunOutcome
    plan: Tuple[str, ...]
    failed_node_id: Optional[str] = None
    error: Optional[ErrorPayload] = None


def incoming_edge_ids(node_id: str, edges: Sequence[PipelineEdge]) -> List[str]:
    """Ids das arestas cujo destino é `node_id`, sem repetição, em ordem."""
    seen = set()
    out: List[str] = []
    for e in edges:
        if e.target == node_id and e.id not in seen:
            seen.add(e.id)
            out.append(e.id)
    return out


def _set_step_status(store: GraphStatusStore, node_id: str, edge_ids: Sequence[str], status: NodeStatus) -> None:
    store.set_node_status(node_id, status)
    for eid in edge_ids:
        store.set_edge_status(eid, status)


async def _evaluate(outcome: OutcomeHook, node: PipelineNode) -> StepOutcome:
    try:
        result = outcome(node)
        if inspect.isawaitable(result):
            result = await result
    except PipegraphException as exc:
        return StepOutcome(
            success=False,
            stopped=False,
            error=node_execution_failed(node_id=node.id, label=node.label, reason=exc.message),
        )
    except Exception as exc:
        return StepOutcome(
            success=False,
            stopped=False,
            error=node_execution_failed(
                node_id=node.id,
                label=node.label,
                reason=f"{exc.__class__.__name__}: {exc}",
            ),
        )

    if bool(result):
        return StepOutcome(success=True, stopped=False)
    return StepOutcome(
        success=False,
        stopped=False,
        error=node_execution_failed(node_id=node.id, label=node.label),
    )


async def process_node_step(
    node: PipelineNode,
    store: GraphStatusStore,
    token: CancellationToken,
    *,
    step_delay: float,
    outcome: OutcomeHook = always_succeed,
    ctx: Optional[RunContext] = None,
) -> StepOutcome:
    """
    Processa um único nó do plano.

    Sequência:
        1. nó e arestas de entrada → processing
        2. aguarda `step_delay` (único ponto de suspensão)
        3. cancelamento solicitado → nó e arestas voltam a idle, `stopped=True`
        4. caso contrário, avalia o hook e aplica success/failed
    """
    edge_ids = incoming_edge_ids(node.id, store.snapshot.edges)

    _set_step_status(store, node.id, edge_ids, NodeStatus.PROCESSING)
    if ctx is not None:
        ctx.log(node_id=node.id, level="INFO", message="node_processing", incoming_edges=list(edge_ids))

    await asyncio.sleep(step_delay)

    if token.requested:
        _set_step_status(store, node.id, edge_ids, NodeStatus.IDLE)
        if ctx is not None:
            ctx.log(node_id=node.id, level="WARNING", message="node_cancelled")
        return StepOutcome(success=False, stopped=True)

    step = await _evaluate(outcome, node)
    status = NodeStatus.SUCCESS if step.success else NodeStatus.FAILED
    _set_step_status(store, node.id, edge_ids, status)

    if ctx is not None:
        if step.success:
            ctx.log(node_id=node.id, level="INFO", message="node_succeeded")
        else:
            ctx.log(
                node_id=node.id,
                level="ERROR",
                message="node_failed",
                error=step.error.to_dict() if step.error else None,
            )
    return step


def finalize_run(
    *,
    stopped: bool,
    failed: bool,
    failed_node_id: Optional[str],
    nodes: Sequence[PipelineNode],
    notify: Notify,
) -> RunOutcome:
    """
    Emite a notificação terminal única da run.

    Prioridade: stopped > failed (com nó identificado) > completed.
    A mensagem de falha usa o label do nó quando presente, senão o id.
    """
    if stopped:
        notify(NotificationLevel.WARNING, MSG_STOPPED)
        return RunOutcome.STOPPED

    if failed and failed_node_id:
        label = None
        for n in nodes:
            if n.id == failed_node_id:
                label = n.label
                break
        notify(NotificationLevel.ERROR, MSG_FAILED_AT.format(label or failed_node_id))
        return RunOutcome.FAILED

    notify(NotificationLevel.INFO, MSG_COMPLETED)
    return RunOutcome.COMPLETED


def _ignore(level: NotificationLevel, message: str) -> None:
    return None


class ExecutionSimulator:
    """
    Simulador canônico (planner + coreografia de status).

    A configuração é lida do `RunContext` na construção; valores inválidos
    levantam `InvalidConfigValueError` aqui, nunca durante `run()`.
    """

    def __init__(
        self,
        store: GraphStatusStore,
        *,
        ctx: Optional[RunContext] = None,
        on_notify: Optional[Notify] = None,
        outcome: Optional[OutcomeHook] = None,
        token: Optional[CancellationToken] = None,
    ):
        self.store = store
        self.ctx: RunContext = ctx if ctx is not None else RunContext.create()
        self.on_notify: Notify = on_notify or _ignore
        self.outcome: OutcomeHook = outcome or always_succeed
        self.token: CancellationToken = token if token is not None else CancellationToken()

        self.settings = simulation_settings(self.ctx.config)
        self.on_cycle = planner_on_cycle(self.ctx.config)
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def stop(self) -> None:
        """Solicita cancelamento; o loop observa no próximo ponto de verificação."""
        self.token.request()

    def _notify(self, level: NotificationLevel, message: str) -> None:
        self.ctx.log(node_id=None, level=level.value.upper(), message="notification", text=message)
        self.on_notify(level, message)

    async def run(self) -> Optional[RunResult]:
        if self._running:
            self.ctx.log(node_id=None, level="WARNING", message="run_ignored_already_running")
            return None

        self._running = True
        self.token.reset()
        ctx = self.ctx
        run_id = ctx.new_run()

        try:
            self.store.reset_statuses()
            snapshot = self.store.snapshot

            try:
                plan = build_execution_plan(snapshot.nodes, snapshot.edges, on_cycle=self.on_cycle)
            except CycleDetectedError as exc:
                error = plan_cycle_detected(unresolved=exc.unresolved)
                ctx.log(node_id=None, level="ERROR", message="plan_rejected", error=error.to_dict())
                self._running = False
                self._notify(NotificationLevel.ERROR, MSG_FAILED_CYCLE)
                return RunResult(run_id=run_id, outcome=RunOutcome.FAILED, plan=(), error=error)

            planned = set(plan)
            for n in snapshot.nodes:
                if n.id not in planned:
                    ctx.add_warning(node_id=n.id, message="omitted from execution plan (cycle or dangling dependency)")

            ctx.log(
                node_id=None,
                level="INFO",
                message="run_started",
                plan=list(plan),
                config_hash=compute_config_hash(ctx.config),
            )
            self._notify(NotificationLevel.INFO, MSG_STARTED)

            stopped = False
            failed = False
            failed_node_id: Optional[str] = None
            error: Optional[ErrorPayload] = None

            for index, node_id in enumerate(plan):
                if self.token.requested:
                    stopped = True
                    break

                node = self.store.snapshot.node(node_id)
                if node is None:
                    continue

                step = await process_node_step(
                    node,
                    self.store,
                    self.token,
                    step_delay=self.settings.step_delay,
                    outcome=self.outcome,
                    ctx=ctx,
                )

                if step.stopped:
                    stopped = True
                    break

                if not step.success:
                    failed = True
                    failed_node_id = node_id
                    error = step.error
                    break

                if index < len(plan) - 1:
                    await asyncio.sleep(self.settings.pause)

        finally:
            self._running = False

        outcome = finalize_run(
            stopped=stopped,
            failed=failed,
            failed_node_id=failed_node_id,
            nodes=self.store.snapshot.nodes,
            notify=self._notify,
        )
        self.token.reset()
        ctx.log(node_id=None, level="INFO", message="run_finished", outcome=outcome.value)

        return RunResult(
            run_id=run_id,
            outcome=outcome,
            plan=tuple(plan),
            failed_node_id=failed_node_id,
            error=error,
        )
