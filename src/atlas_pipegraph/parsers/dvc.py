"""
Builder de grafo para pipelines DVC (modelo stage/artefato).

O grafo é montado a partir de duas fontes entregues pelo colaborador
`DvcTool`:
    - o fluxograma textual (`id["label"]` e `A --> B`), que fornece os ids e
      labels dos stages e as arestas de controle
    - os metadados de stages (`dvc.lock`), que fornecem saídas e dependências

Pipeline interno:
    1. `build_stage_maps`: stage → saídas, stage → dependências, saída → produtor
       e stage → parâmetros registrados no lock
    2. `build_stage_and_artifact_nodes`: um nó por stage e um nó `artifact`
       por saída, classificado por tipo de conteúdo
    3. `build_edges`: stage → artefato (saídas), artefato → stage
       (dependências conhecidas) e, quando nenhum artefato liga dois stages,
       a aresta direta do fluxograma

Decisões arquiteturais:
    - A proveniência pelos dados tem prioridade; arestas de controle do
      fluxograma só entram quando a proveniência é desconhecida
    - Indisponibilidade da ferramenta resulta em grafo vazio com `error`
    - Entradas ausentes ou malformadas produzem mapas vazios, nunca exceções

Limites explícitos:
    - Não localiza nem invoca a CLI (ver `dvc_tool`)
    - Não lê `dvc.yaml` diretamente
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from atlas_pipegraph.core.errors import tool_unavailable
from atlas_pipegraph.core.exceptions import ToolUnavailableError
from atlas_pipegraph.core.graph.types import NodeType, PipelineEdge, PipelineGraph, PipelineNode

from .base import failed_graph
from .dvc_tool import DvcCliTool, DvcTool, working_directory


NODE_PATTERN = re.compile(r'^\s*([^\s\[]+)\["(.*)"\]', re.MULTILINE)
EDGE_PATTERN = re.compile(r"^\s*([^\s-]+)\s*-->\s*(\S+)", re.MULTILINE)

IMAGE_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".gif", ".bmp", ".svg", ".webp", ".tif", ".tiff"})
TABLE_EXTENSIONS = frozenset({".csv", ".tsv", ".parquet", ".xlsx", ".xls", ".feather", ".arrow"})
VIDEO_EXTENSIONS = frozenset({".mp4", ".avi", ".mov", ".mkv", ".webm"})
AUDIO_EXTENSIONS = frozenset({".mp3", ".wav", ".flac", ".ogg", ".m4a"})


@dataclass
class StageMaps:
    stage_to_outputs: Dict[str, List[str]] = field(default_factory=dict)
    stage_to_deps: Dict[str, List[str]] = field(default_factory=dict)
    output_to_producer: Dict[str, str] = field(default_factory=dict)
    stage_to_params: Dict[str, Dict[str, Any]] = field(default_factory=dict)


def classify_artifact(path: str) -> str:
    """
    Classifica o conteúdo de um artefato pelo caminho.

    Retorna um de: image, table, video, audio, folder, other. Caminhos
    terminados em "/" ou sem extensão são tratados como pastas.
    """
    if path.endswith("/"):
        return "folder"
    suffix = PurePosixPath(path).suffix.lower()
    if not suffix:
        return "folder"
    if suffix in IMAGE_EXTENSIONS:
        return "image"
    if suffix in TABLE_EXTENSIONS:
        return "table"
    if suffix in VIDEO_EXTENSIONS:
        return "video"
    if suffix in AUDIO_EXTENSIONS:
        return "audio"
    return "other"


def _paths(entries: Any) -> List[str]:
    if not isinstance(entries, list):
        return []
    out: List[str] = []
    for entry in entries:
        if isinstance(entry, str):
            out.append(entry)
        elif isinstance(entry, dict) and isinstance(entry.get("path"), str):
            out.append(entry["path"])
    return out


def parse_flow_nodes(flow_text: str) -> List[Tuple[str, str]]:
    seen: Set[str] = set()
    out: List[Tuple[str, str]] = []
    for match in NODE_PATTERN.finditer(flow_text or ""):
        node_id, label = match.group(1), match.group(2)
        if node_id in seen:
            continue
        seen.add(node_id)
        out.append((node_id, label))
    return out


def parse_flow_edges(flow_text: str) -> List[Tuple[str, str]]:
    return [(m.group(1), m.group(2)) for m in EDGE_PATTERN.finditer(flow_text or "")]


def _lock_params(entry: Any) -> Dict[str, Any]:
    # dvc.lock agrupa por arquivo: {params.yaml: {train.epochs: 10}}
    if not isinstance(entry, dict):
        return {}
    merged: Dict[str, Any] = {}
    for values in entry.values():
        if isinstance(values, dict):
            merged.update(values)
    return merged


def _stage_name(label: str, known: Dict[str, Any]) -> str:
    # labels de dvc.yaml aninhados vêm como "sub/dvc.yaml:stage"
    if label in known or ":" not in label:
        return label
    return label.rsplit(":", 1)[1]


def _node_stage(node: PipelineNode) -> str:
    return str(node.data.get("stage") or node.label)


class DVCParser:
    name = "DVC"

    def __init__(self, tool: Optional[DvcTool] = None):
        self.tool: DvcTool = tool if tool is not None else DvcCliTool()

    def can_parse(self, file_name: str, content: str) -> bool:
        lower = file_name.lower()
        return lower.endswith("dvc.yaml") or lower.endswith("dvc.yml")

    async def parse(self, content: str, file_path: str) -> PipelineGraph:
        cwd = working_directory(file_path)
        try:
            flow_text = await self.tool.flow_text(cwd)
            lock_data = await self.tool.stage_metadata(cwd)
            params = await self.tool.params(cwd)
        except ToolUnavailableError as exc:
            return PipelineGraph.empty(
                file_path=file_path,
                framework=self.name,
                error=tool_unavailable(tool="dvc", cwd=cwd, reason=exc.message),
            )
        except Exception as exc:
            return failed_graph(exc, framework=self.name, file_path=file_path)

        try:
            maps = self.build_stage_maps(lock_data)
            nodes, artifact_by_path = self.build_stage_and_artifact_nodes(
                flow_text, maps.stage_to_outputs, maps.stage_to_deps, params, maps.stage_to_params
            )
            edges = self.build_edges(flow_text, nodes, maps.stage_to_outputs, maps.stage_to_deps, artifact_by_path)
        except Exception as exc:
            return failed_graph(exc, framework=self.name, file_path=file_path)

        return PipelineGraph.build(file_path=file_path, framework=self.name, nodes=nodes, edges=edges)

    def build_stage_maps(self, lock_data: Any) -> StageMaps:
        maps = StageMaps()
        stages = lock_data.get("stages") if isinstance(lock_data, dict) else None
        if not isinstance(stages, dict):
            return maps

        for stage_name, stage in stages.items():
            if not isinstance(stage, dict):
                continue
            name = str(stage_name)
            outs = _paths(stage.get("outs"))
            deps = _paths(stage.get("deps"))
            maps.stage_to_outputs[name] = outs
            maps.stage_to_deps[name] = deps
            params = _lock_params(stage.get("params"))
            if params:
                maps.stage_to_params[name] = params
            for out in outs:
                maps.output_to_producer.setdefault(out, name)
        return maps

    def build_stage_and_artifact_nodes(
        self,
        flow_text: str,
        stage_to_outputs: Dict[str, List[str]],
        stage_to_deps: Dict[str, List[str]],
        extra_metadata: Optional[Dict[str, Any]] = None,
        stage_to_params: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> Tuple[List[PipelineNode], Dict[str, PipelineNode]]:
        extra = extra_metadata if isinstance(extra_metadata, dict) else {}
        locked = stage_to_params or {}
        known = {**stage_to_outputs, **stage_to_deps}

        stage_nodes: List[PipelineNode] = []
        artifact_nodes: List[PipelineNode] = []
        artifact_by_path: Dict[str, PipelineNode] = {}

        for node_id, label in parse_flow_nodes(flow_text):
            stage = _stage_name(label, known)
            outs = list(stage_to_outputs.get(stage, []))
            # dvc.lock primeiro; params.yaml por nome de stage
            params = locked.get(stage) or extra.get(stage)
            stage_nodes.append(
                PipelineNode(
                    id=node_id,
                    label=label,
                    type=NodeType.DEFAULT,
                    data={
                        "framework": self.name,
                        "stage": stage,
                        "deps": list(stage_to_deps.get(stage, [])),
                        "outs": outs,
                        "params": params if isinstance(params, dict) else {},
                    },
                )
            )

            for index, path in enumerate(outs):
                if path in artifact_by_path:
                    continue
                artifact = PipelineNode(
                    id=f"art-{node_id}-{index}",
                    label=path,
                    type=NodeType.ARTIFACT,
                    data={
                        "framework": self.name,
                        "path": path,
                        "data_type": classify_artifact(path),
                        "producer": node_id,
                    },
                )
                artifact_nodes.append(artifact)
                artifact_by_path[path] = artifact

        return stage_nodes + artifact_nodes, artifact_by_path

    def build_edges(
        self,
        flow_text: str,
        nodes: Sequence[PipelineNode],
        stage_to_outputs: Dict[str, List[str]],
        stage_to_deps: Dict[str, List[str]],
        artifact_by_path: Dict[str, PipelineNode],
    ) -> List[PipelineEdge]:
        stage_nodes = [n for n in nodes if n.type == NodeType.DEFAULT]
        stage_ids = {n.id for n in stage_nodes}

        edges: List[PipelineEdge] = []
        seen: Set[str] = set()

        def add(source: str, target: str) -> None:
            edge_id = f"e-{source}-{target}"
            if edge_id in seen:
                return
            seen.add(edge_id)
            edges.append(PipelineEdge(id=edge_id, source=source, target=target))

        producers_by_path: Dict[str, List[str]] = {}
        for stage in stage_nodes:
            for path in stage_to_outputs.get(_node_stage(stage), []):
                producers_by_path.setdefault(path, []).append(stage.id)
                artifact = artifact_by_path.get(path)
                if artifact is not None:
                    add(stage.id, artifact.id)

        linked: Set[Tuple[str, str]] = set()
        for stage in stage_nodes:
            for path in stage_to_deps.get(_node_stage(stage), []):
                artifact = artifact_by_path.get(path)
                if artifact is None:
                    continue
                add(artifact.id, stage.id)
                for producer in producers_by_path.get(path, []):
                    linked.add((producer, stage.id))

        for source, target in parse_flow_edges(flow_text):
            if source not in stage_ids or target not in stage_ids:
                continue
            if (source, target) in linked:
                continue
            add(source, target)

        return edges
