# src/atlas_pipegraph/core/config/__init__.py

"""
Camada de configuração do Atlas PipeGraph.

Este pacote contém as estruturas e utilitários responsáveis por carregar,
mesclar, validar estruturalmente e identificar configurações do Atlas PipeGraph.

Responsabilidades do pacote:
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução de configuração final via deep-merge determinístico
    - Leitura tipada das chaves conhecidas (`settings`)
    - Geração de hash canônico para rastreabilidade de runs

Princípios fundamentais:
    - Nenhuma heurística implícita durante merge
    - Overrides são sempre explícitos
    - A mesma entrada sempre produz a mesma configuração final

Limites explícitos:
    - Não executa simulações
    - Não interage com parsers diretamente
"""

from .errors import (
    ConfigError,
    ConfigTypeConflictError,
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    InvalidConfigValueError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .loader import DEFAULTS_PATH, load_config
from .merge import deep_merge
from .settings import SimulationSettings, gitlab_default_stages, planner_on_cycle, simulation_settings

__all__ = [
    "ConfigError",
    "ConfigTypeConflictError",
    "DefaultsNotFoundError",
    "InvalidConfigRootTypeError",
    "InvalidConfigValueError",
    "UnsupportedConfigFormatError",
    "compute_config_hash",
    "DEFAULTS_PATH",
    "load_config",
    "deep_merge",
    "SimulationSettings",
    "gitlab_default_stages",
    "planner_on_cycle",
    "simulation_settings",
]
