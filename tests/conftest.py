# tests/conftest.py
"""
Fixtures compartilhados para testes do Atlas PipeGraph.

Este módulo define fixtures reutilizáveis que fornecem:
- configurações mínimas e determinísticas (delays zerados)
- contexto de execução controlado (RunContext)
- uma fábrica de grafos a partir de ids e pares de arestas
- um colaborador DVC falso, sem subprocessos nem filesystem

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Código assíncrono é conduzido com `asyncio.run` dentro de testes síncronos
    - Imports do core são realizados de forma lazy para melhorar a clareza
      de erros durante falhas

Invariantes:
    - Nenhuma fixture executa simulação real
    - Nenhuma fixture invoca ferramentas externas
    - Todas as fixtures são seguras para execução em paralelo

Limites explícitos:
    - Não substituir testes de integração
    - Não conter lógica de domínio
"""

from datetime import datetime, timezone

import pytest


@pytest.fixture
def fast_config() -> dict:
    """
    Configuração resolvida mínima, com delays zerados.

    Mantém a mesma forma de `defaults.yaml`, mas sem espera entre nós, para
    que simulações terminem imediatamente nos testes.

    Returns:
        dict: Configuração pronta para o RunContext.
    """
    return {
        "simulation": {"step_delay": 0, "pause": 0},
        "planner": {"on_cycle": "omit"},
        "parsers": {"gitlab": {"default_stages": [".pre", "build", "test", "deploy", ".post"]}},
    }


@pytest.fixture
def dummy_ctx(fast_config):
    """
    RunContext determinístico para testes.

    `run_id` e `created_at` são fixos; o simulador gera um novo `run_id` a
    cada `run()`, portanto testes de simulação não devem depender do valor
    inicial.
    """
    from atlas_pipegraph.core.engine.context import RunContext

    return RunContext(
        run_id="run-test-001",
        created_at=datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc),
        config=fast_config,
        meta={"source": "pytest"},
    )


@pytest.fixture
def make_graph():
    """
    Fábrica de `PipelineGraph` a partir de ids de nós e pares de arestas.

    Uso:
        make_graph(["a", "b"], [("a", "b")])
        make_graph(["a"], [], labels={"a": "Build"})

    Ids de arestas seguem o formato `e-<origem>-<destino>`.
    """
    from atlas_pipegraph.core.graph.types import PipelineEdge, PipelineGraph, PipelineNode

    def _make(node_ids, edge_pairs=(), *, labels=None, framework="Test", file_path="pipeline.yml"):
        labels = labels or {}
        nodes = [PipelineNode(id=nid, label=labels.get(nid, nid)) for nid in node_ids]
        edges = [PipelineEdge(id=f"e-{s}-{t}", source=s, target=t) for s, t in edge_pairs]
        return PipelineGraph.build(file_path=file_path, framework=framework, nodes=nodes, edges=edges)

    return _make


@pytest.fixture
def FakeDvcTool():
    """
    Fixture factory que fornece um colaborador DVC falso (duck typing).

    A classe retornada implementa o protocolo `DvcTool` com respostas fixas
    e registra os diretórios de trabalho recebidos em `calls`. Quando
    `error` é informado, `flow_text` levanta essa exceção.

    Returns:
        type: Classe _FakeDvcTool instanciável pelos testes.
    """

    class _FakeDvcTool:
        def __init__(self, flow_text="", lock=None, params=None, error=None):
            self._flow_text = flow_text
            self._lock = lock or {}
            self._params = params or {}
            self._error = error
            self.calls = []

        async def flow_text(self, cwd):
            self.calls.append(cwd)
            if self._error is not None:
                raise self._error
            return self._flow_text

        async def stage_metadata(self, cwd):
            return self._lock

        async def params(self, cwd):
            return self._params

    return _FakeDvcTool


@pytest.fixture
def recorder():
    """
    Coletor de notificações do simulador.

    Retorna um objeto chamável `(level, message)` que acumula as chamadas em
    `.calls`, na ordem em que foram emitidas.
    """

    class _Recorder:
        def __init__(self):
            self.calls = []

        def __call__(self, level, message):
            self.calls.append((level.value, message))

    return _Recorder()
