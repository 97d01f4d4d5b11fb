"""
Builder de grafo para o formato JSON próprio (`caldera.json`).

O arquivo já contém o grafo no wire shape `{framework?, nodes, edges}` e é
convertido diretamente em `PipelineGraph`. Ausência de `framework` resulta
em "Custom Pipeline".
"""

from __future__ import annotations

import json
import posixpath

from atlas_pipegraph.core.exceptions import GraphParseError
from atlas_pipegraph.core.graph.types import PipelineGraph

from .base import failed_graph, normalize_path


CUSTOM_FILE_NAME = "caldera.json"


class CustomParser:
    name = "Custom Pipeline"

    def can_parse(self, file_name: str, content: str) -> bool:
        return posixpath.basename(normalize_path(file_name)).lower() == CUSTOM_FILE_NAME

    async def parse(self, content: str, file_path: str) -> PipelineGraph:
        try:
            data = json.loads(content)
            if not isinstance(data, dict):
                raise GraphParseError(
                    message="Custom pipeline root must be an object",
                    details={"root_type": type(data).__name__},
                )
            if not data.get("framework"):
                data = {**data, "framework": self.name}
            # erro embutido no arquivo não é aceito como entrada
            data.pop("error", None)
            return PipelineGraph.from_dict(data, file_path=file_path)
        except Exception as exc:
            return failed_graph(exc, framework=self.name, file_path=file_path)
