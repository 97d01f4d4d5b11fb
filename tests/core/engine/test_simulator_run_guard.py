# tests/core/engine/test_simulator_run_guard.py
"""
Testes da guarda de run única do ExecutionSimulator.

Uma segunda chamada a `run()` enquanto outra run está ativa é no-op:
retorna None, não emite notificações e não altera status.
"""

import asyncio

import pytest

try:
    from atlas_pipegraph.core.engine.context import RunContext
    from atlas_pipegraph.core.engine.simulator import ExecutionSimulator, RunOutcome
    from atlas_pipegraph.core.graph.store import GraphStatusStore
except Exception as e:
    RunContext = None
    ExecutionSimulator = None
    RunOutcome = None
    GraphStatusStore = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"""Missing simulator run guard. Implement:
- src/atlas_pipegraph/core/engine/simulator.py (ExecutionSimulator.run, is_running)
Import error: {_IMPORT_ERR}
""")


def test_concurrent_run_is_noop(make_graph, recorder):
    """
    Verifica que apenas uma run por simulador fica ativa.

    Cenário:
        - a primeira run é iniciada como task e suspensa no primeiro nó
        - a segunda chamada retorna None imediatamente

    Esperado:
        - exatamente uma notificação "started" e uma terminal
        - evento `run_ignored_already_running` registrado no contexto
    """
    _require_imports()
    ctx = RunContext.create(config={"simulation": {"step_delay": 0.01, "pause": 0}})
    store = GraphStatusStore(make_graph(["a", "b"], [("a", "b")]))
    sim = ExecutionSimulator(store, ctx=ctx, on_notify=recorder)

    async def scenario():
        first = asyncio.ensure_future(sim.run())
        await asyncio.sleep(0)
        assert sim.is_running is True
        second = await sim.run()
        return await first, second

    first, second = asyncio.run(scenario())

    assert second is None
    assert first.outcome == RunOutcome.COMPLETED
    assert recorder.calls == [
        ("info", "Pipeline started"),
        ("info", "Pipeline completed successfully"),
    ]
    assert any(ev["message"] == "run_ignored_already_running" for ev in ctx.events)
    assert sim.is_running is False


def test_sequential_runs_are_allowed(make_graph, dummy_ctx):
    _require_imports()
    sim = ExecutionSimulator(GraphStatusStore(make_graph(["a"], [])), ctx=dummy_ctx)
    assert asyncio.run(sim.run()) is not None
    assert asyncio.run(sim.run()) is not None
