"""
Builder de grafo para pipelines do GitLab CI.

Semântica de stages:
    - `stages` no topo do documento define a ordem; sem ela, usa a lista
      configurada em `parsers.gitlab.default_stages`
    - cada job tem um stage (padrão "test")
    - chaves reservadas e chaves iniciadas por "." não são jobs

Dependências:
    - explícitas: `needs` (string ou `{job: nome}`) gera aresta
      `e-<origem>-needs-<destino>` apenas se o job existir
    - implícitas: um job **sem** a chave `needs` depende de todos os jobs de
      todos os stages anteriores, inclusive através de stages vazios, e não
      apenas do stage anterior não vazio. `needs: []` conta como declarado e
      suprime as arestas implícitas. A regra gera arestas redundantes em
      pipelines longos e é mantida literalmente.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Set

from atlas_pipegraph.core.config.settings import gitlab_default_stages
from atlas_pipegraph.core.graph.types import NodeType, PipelineEdge, PipelineGraph, PipelineNode

from .base import failed_graph, load_yaml_document, normalize_path


RESERVED_KEYWORDS = frozenset({
    "image",
    "services",
    "stages",
    "types",
    "before_script",
    "after_script",
    "variables",
    "cache",
    "include",
    "workflow",
    "default",
})

DEFAULT_JOB_STAGE = "test"


@dataclass(frozen=True)
class GitLabJob:
    id: str
    stage: str
    has_needs: bool
    needs: List[Any] = field(default_factory=list)


class GitLabCIParser:
    name = "GitLab CI"

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.default_stages: List[str] = gitlab_default_stages(config)

    def can_parse(self, file_name: str, content: str) -> bool:
        path = normalize_path(file_name)
        segments = path.split("/")

        if any(s in (".gitlab-ci.yml", ".gitlab-ci.yaml") for s in segments):
            return True
        if segments[-1].endswith((".gitlab-ci.yml", ".gitlab-ci.yaml")):
            return True

        if ".gitlab" in segments and path.endswith((".yml", ".yaml")):
            idx = segments.index(".gitlab")
            if idx + 1 < len(segments) and segments[idx + 1] == "ci":
                return True
        return False

    async def parse(self, content: str, file_path: str) -> PipelineGraph:
        try:
            return self._build(content, file_path)
        except Exception as exc:
            return failed_graph(exc, framework=self.name, file_path=file_path)

    def _build(self, content: str, file_path: str) -> PipelineGraph:
        doc = load_yaml_document(content)
        if not isinstance(doc, dict):
            return PipelineGraph.empty(file_path=file_path, framework=self.name)

        raw_stages = doc.get("stages")
        stages = [str(s) for s in raw_stages] if isinstance(raw_stages, list) else list(self.default_stages)

        jobs = self.jobs_from_document(doc)
        nodes = [
            PipelineNode(id=job.id, label=job.id, type=NodeType.DEFAULT, data={"stage": job.stage})
            for job in jobs
        ]

        edges: List[PipelineEdge] = []
        job_ids = {job.id for job in jobs}
        self._needs_edges(jobs, job_ids, edges)
        self._stage_edges(jobs, stages, edges)

        return PipelineGraph.build(file_path=file_path, framework=self.name, nodes=nodes, edges=edges)

    def jobs_from_document(self, doc: Dict[str, Any]) -> List[GitLabJob]:
        jobs: List[GitLabJob] = []
        for key, value in doc.items():
            key = str(key)
            if key in RESERVED_KEYWORDS or key.startswith("."):
                continue
            if not isinstance(value, dict):
                continue
            needs = value.get("needs")
            jobs.append(
                GitLabJob(
                    id=key,
                    stage=str(value.get("stage") or DEFAULT_JOB_STAGE),
                    has_needs="needs" in value,
                    needs=list(needs) if isinstance(needs, list) else [],
                )
            )
        return jobs

    def _needs_edges(self, jobs: Sequence[GitLabJob], job_ids: Set[str], edges: List[PipelineEdge]) -> None:
        for job in jobs:
            for need in job.needs:
                need_id = need if isinstance(need, str) else (need.get("job") if isinstance(need, dict) else None)
                if need_id and need_id in job_ids:
                    edges.append(PipelineEdge(id=f"e-{need_id}-needs-{job.id}", source=need_id, target=job.id))

    def _stage_edges(self, jobs: Sequence[GitLabJob], stages: Sequence[str], edges: List[PipelineEdge]) -> None:
        stage_index: Dict[str, int] = {}
        for index, stage in enumerate(stages):
            stage_index.setdefault(stage, index)

        jobs_by_stage: Dict[str, List[GitLabJob]] = {}
        for job in jobs:
            jobs_by_stage.setdefault(job.stage, []).append(job)

        for job in jobs:
            if job.has_needs:
                continue
            current = stage_index.get(job.stage)
            if current is None or current <= 0:
                continue

            for i in range(current - 1, -1, -1):
                for prev in jobs_by_stage.get(stages[i], []):
                    edges.append(PipelineEdge(id=f"e-{prev.id}-stage-{job.id}", source=prev.id, target=job.id))
