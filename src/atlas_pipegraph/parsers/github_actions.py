"""
Builder de grafo para workflows do GitHub Actions.

Um nó por job declarado em `jobs`; arestas vêm exclusivamente do campo
`needs` de cada job (string ou lista de strings/objetos `{job: nome}`).
Referências a jobs inexistentes são descartadas silenciosamente.
"""

from __future__ import annotations

from typing import Any, Dict, List

from atlas_pipegraph.core.graph.types import NodeType, PipelineEdge, PipelineGraph, PipelineNode

from .base import failed_graph, load_yaml_document, normalize_path


def _need_names(needs: Any) -> List[str]:
    items = needs if isinstance(needs, list) else [needs]
    names: List[str] = []
    for item in items:
        if isinstance(item, str):
            names.append(item)
        elif isinstance(item, dict) and isinstance(item.get("job"), str):
            names.append(item["job"])
    return names


class GitHubActionsParser:
    name = "GitHub Action"

    def can_parse(self, file_name: str, content: str) -> bool:
        segments = normalize_path(file_name).split("/")
        if len(segments) < 3:
            return False
        if not segments[-1].endswith((".yml", ".yaml")):
            return False
        return segments[-3] == ".github" and segments[-2] == "workflows"

    async def parse(self, content: str, file_path: str) -> PipelineGraph:
        try:
            return self._build(content, file_path)
        except Exception as exc:
            return failed_graph(exc, framework=self.name, file_path=file_path)

    def _build(self, content: str, file_path: str) -> PipelineGraph:
        doc = load_yaml_document(content)
        jobs = doc.get("jobs") if isinstance(doc, dict) else None
        if not isinstance(jobs, dict):
            return PipelineGraph.empty(file_path=file_path, framework=self.name)

        nodes: List[PipelineNode] = []
        edges: List[PipelineEdge] = []
        job_ids = {str(k) for k in jobs}

        for job_id, job in jobs.items():
            job_id = str(job_id)
            job = job if isinstance(job, dict) else {}
            data: Dict[str, Any] = {}
            if "runs-on" in job:
                data["runs_on"] = job["runs-on"]
            nodes.append(
                PipelineNode(
                    id=job_id,
                    label=str(job.get("name") or job_id),
                    type=NodeType.DEFAULT,
                    data=data,
                )
            )

            if job.get("needs") is None:
                continue
            for need in _need_names(job["needs"]):
                if need not in job_ids:
                    continue
                edges.append(PipelineEdge(id=f"e-{need}-needs-{job_id}", source=need, target=job_id))

        return PipelineGraph.build(file_path=file_path, framework=self.name, nodes=nodes, edges=edges)
