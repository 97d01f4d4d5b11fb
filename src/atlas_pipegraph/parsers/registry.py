"""
Registro e descoberta de parsers de formato.

Este módulo define o `ParserRegistry`, responsável por manter o conjunto
fechado e ordenado de parsers e por escolher, para um arquivo, o primeiro
parser cujo `can_parse` o reconheça.

Decisões arquiteturais:
    - A ordem de registro é a ordem de teste em `find`
    - Nomes duplicados são erro de configuração (fatal no registro)
    - Arquivo não reconhecido não levanta exceção: vira grafo vazio com
      erro `UNSUPPORTED_FORMAT`

Invariantes:
    - Cada `parser.name` é único no registry
    - `list()` reflete exatamente a ordem de registro

Limites explícitos:
    - Não descobre arquivos no disco
    - Não planeja nem simula execução
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from atlas_pipegraph.core.errors import unsupported_format
from atlas_pipegraph.core.graph.types import PipelineGraph

from .base import GraphParser
from .custom import CustomParser
from .dvc import DVCParser
from .dvc_tool import DvcTool
from .github_actions import GitHubActionsParser
from .gitlab_ci import GitLabCIParser


class DuplicateParserError(ValueError):
    """Levantada ao registrar dois parsers com o mesmo `name`."""


@dataclass
class ParserRegistry:
    """
    Registro canônico de parsers, em ordem de prioridade.

    O primeiro parser registrado que reconhece o arquivo vence; por isso
    formatos mais específicos devem ser registrados antes dos genéricos.
    """

    _parsers: Dict[str, GraphParser] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)

    def add(self, parser: GraphParser) -> None:
        name = getattr(parser, "name", None)
        if not isinstance(name, str) or not name.strip():
            raise ValueError("parser.name must be a non-empty string")

        if name in self._parsers:
            raise DuplicateParserError(f"Duplicate parser name: {name}")

        self._parsers[name] = parser
        self._order.append(name)

    def get(self, name: str) -> GraphParser:
        return self._parsers[name]

    def list(self) -> List[GraphParser]:
        return [self._parsers[n] for n in self._order]

    def find(self, file_name: str, content: str) -> Optional[GraphParser]:
        for name in self._order:
            parser = self._parsers[name]
            if parser.can_parse(file_name, content):
                return parser
        return None

    async def parse(self, file_name: str, content: str) -> PipelineGraph:
        parser = self.find(file_name, content)
        if parser is None:
            return PipelineGraph.empty(
                file_path=file_name,
                framework="Unknown",
                error=unsupported_format(file_path=file_name, available_parsers=list(self._order)),
            )
        return await parser.parse(content, file_name)


def default_registry(
    config: Optional[Dict[str, Any]] = None,
    dvc_tool: Optional[DvcTool] = None,
) -> ParserRegistry:
    registry = ParserRegistry()
    registry.add(GitLabCIParser(config))
    registry.add(DVCParser(dvc_tool))
    registry.add(CustomParser())
    registry.add(GitHubActionsParser())
    return registry
