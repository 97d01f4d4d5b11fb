"""
Parsers de formato do Atlas PipeGraph.

Conjunto fechado de builders que compartilham o contrato `GraphParser`:

    - gitlab_ci      → `.gitlab-ci.yml` (stages + needs)
    - dvc            → `dvc.yaml` (stages + artefatos), via colaborador `dvc_tool`
    - custom         → `caldera.json` (grafo já no wire shape)
    - github_actions → `.github/workflows/*.yml` (needs)

A seleção é feita pelo `ParserRegistry` (ver `default_registry`).
"""

from .base import GraphParser
from .custom import CustomParser
from .dvc import DVCParser, StageMaps, classify_artifact
from .dvc_tool import CommandInfo, DvcCliTool, DvcTool
from .github_actions import GitHubActionsParser
from .gitlab_ci import GitLabCIParser
from .registry import DuplicateParserError, ParserRegistry, default_registry

__all__ = [
    "GraphParser",
    "CustomParser",
    "DVCParser",
    "StageMaps",
    "classify_artifact",
    "CommandInfo",
    "DvcCliTool",
    "DvcTool",
    "GitHubActionsParser",
    "GitLabCIParser",
    "DuplicateParserError",
    "ParserRegistry",
    "default_registry",
]
