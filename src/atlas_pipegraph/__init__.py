"""
Atlas PipeGraph: grafos de pipelines CI/CD e de dados, com simulação de execução.

Este pacote raiz define o namespace público do Atlas PipeGraph, que converte
arquivos de definição de pipeline (GitLab CI, GitHub Actions, DVC e um formato
JSON próprio) em um grafo canônico e simula sua execução nó a nó.

Arquitetura em alto nível:
    - parsers      → reconhecimento de formato e construção do grafo
    - core.graph   → modelo canônico e store observável de status
    - core.engine  → plano de execução (Kahn) e simulador cancelável
    - core.config  → carregamento, merge e hashing de configuração

Limites explícitos:
    - Não executa jobs reais
    - Não renderiza grafos (o renderer consome o wire shape de `to_dict`)
"""

from .core.engine import ExecutionSimulator, RunContext, build_execution_plan
from .core.graph import GraphStatusStore, PipelineGraph
from .parsers import ParserRegistry, default_registry

__all__ = [
    "ExecutionSimulator",
    "RunContext",
    "build_execution_plan",
    "GraphStatusStore",
    "PipelineGraph",
    "ParserRegistry",
    "default_registry",
]
