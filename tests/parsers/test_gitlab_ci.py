# tests/parsers/test_gitlab_ci.py
"""
Testes do builder de grafo do GitLab CI.

Os testes asseguram que:
- apenas arquivos de CI do GitLab são reconhecidos
- chaves reservadas e templates (".") não viram jobs
- `needs` gera arestas explícitas apenas para jobs existentes
- jobs sem `needs` dependem de todos os jobs de todos os stages anteriores,
  inclusive através de stages vazios
- `needs: []` suprime as dependências implícitas
- YAML inválido resulta em grafo vazio com erro, sem exceção
"""

import asyncio

import pytest

try:
    from atlas_pipegraph.core.errors import GRAPH_PARSE_ERROR
    from atlas_pipegraph.parsers.gitlab_ci import GitLabCIParser
except Exception as e:
    GRAPH_PARSE_ERROR = None
    GitLabCIParser = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"""Missing GitLab CI parser. Implement:
- src/atlas_pipegraph/parsers/gitlab_ci.py (GitLabCIParser)
Import error: {_IMPORT_ERR}
""")


def _parse(content, file_path=".gitlab-ci.yml", config=None):
    return asyncio.run(GitLabCIParser(config).parse(content, file_path))


def _edge_ids(graph):
    return [e.id for e in graph.edges]


@pytest.mark.parametrize(
    "file_name, expected",
    [
        (".gitlab-ci.yml", True),
        ("repo/.gitlab-ci.yaml", True),
        ("ci/templates/build.gitlab-ci.yml", True),
        ("repo\\.gitlab\\ci\\deploy.yml", True),
        (".gitlab/issue_templates/bug.md", False),
        (".github/workflows/ci.yml", False),
        ("pipeline.yml", False),
    ],
)
def test_can_parse(file_name, expected):
    _require_imports()
    assert GitLabCIParser().can_parse(file_name, "") is expected


def test_implicit_dependency_crosses_empty_stage():
    """
    Verifica a dependência implícita através de um stage vazio.

    stages: [build, test, deploy], com jobs apenas em build e deploy: o job
    de deploy depende do job de build mesmo sem nenhum job em test.
    """
    _require_imports()
    graph = _parse("""
stages: [build, test, deploy]
compile:
  stage: build
  script: make
ship:
  stage: deploy
  script: ./ship.sh
""")
    assert [n.id for n in graph.nodes] == ["compile", "ship"]
    assert _edge_ids(graph) == ["e-compile-stage-ship"]
    assert graph.edges[0].source == "compile"
    assert graph.edges[0].target == "ship"


def test_every_previous_stage_contributes_edges():
    """
    A regra implícita é deliberadamente abrangente: um job do terceiro stage
    recebe arestas de todos os jobs dos dois stages anteriores, e não apenas
    do imediatamente anterior.
    """
    _require_imports()
    graph = _parse("""
stages: [build, test, deploy]
a: {stage: build, script: x}
b: {stage: test, script: x}
c: {stage: deploy, script: x}
""")
    assert _edge_ids(graph) == ["e-a-stage-b", "e-b-stage-c", "e-a-stage-c"]


def test_empty_needs_suppresses_implicit_edges():
    _require_imports()
    graph = _parse("""
stages: [build, deploy]
compile: {stage: build, script: x}
ship:
  stage: deploy
  needs: []
  script: x
""")
    assert [n.id for n in graph.nodes] == ["compile", "ship"]
    assert graph.edges == ()


def test_explicit_needs_replace_stage_edges():
    _require_imports()
    graph = _parse("""
stages: [build, test, deploy]
lint: {stage: build, script: x}
compile: {stage: build, script: x}
unit:
  stage: test
  needs: [compile, {job: lint}, ghost]
  script: x
""")
    assert _edge_ids(graph) == ["e-compile-needs-unit", "e-lint-needs-unit"]


def test_reserved_keys_and_templates_are_not_jobs():
    _require_imports()
    graph = _parse("""
image: python:3.12
variables: {A: "1"}
default: {tags: [docker]}
workflow: {rules: []}
include: [{local: other.yml}]
.template:
  script: echo hidden
job: {script: echo}
""")
    assert [n.id for n in graph.nodes] == ["job"]


def test_stage_defaults_to_test_and_default_stage_order():
    """
    Sem `stages` no documento, a ordem configurada é usada; job sem `stage`
    pertence a "test" e portanto depende dos jobs de build.
    """
    _require_imports()
    graph = _parse("""
compile: {stage: build, script: x}
unit: {script: x}
""")
    assert graph.node("unit").data == {"stage": "test"}
    assert _edge_ids(graph) == ["e-compile-stage-unit"]


def test_default_stages_come_from_config():
    _require_imports()
    config = {"parsers": {"gitlab": {"default_stages": ["one", "two"]}}}
    graph = _parse("""
x: {stage: one, script: x}
y: {stage: two, script: x}
""", config=config)
    assert _edge_ids(graph) == ["e-x-stage-y"]


def test_job_in_unknown_stage_gets_no_implicit_edges():
    _require_imports()
    graph = _parse("""
stages: [build]
compile: {stage: build, script: x}
odd: {stage: nowhere, script: x}
""")
    assert graph.edges == ()


def test_invalid_yaml_yields_error_graph():
    _require_imports()
    graph = _parse("stages: [build\njob: {", file_path="broken/.gitlab-ci.yml")
    assert graph.ok is False
    assert graph.nodes == ()
    assert graph.edges == ()
    assert graph.framework == "GitLab CI"
    assert graph.error.type == GRAPH_PARSE_ERROR
    assert graph.error.details["file_path"] == "broken/.gitlab-ci.yml"


def test_non_mapping_document_yields_empty_graph():
    _require_imports()
    graph = _parse("- just\n- a list\n")
    assert graph.ok is True
    assert graph.nodes == ()
