# src/atlas_pipegraph/core/config/errors.py
"""
Exceções da camada de configuração.

Toda falha ao ler, mesclar ou interpretar configuração herda de
`ConfigError`. São falhas de uso (arquivo errado, valor fora do domínio),
levantadas antes de qualquer parsing ou simulação.
"""


class ConfigError(Exception):
    """Base de todas as falhas de configuração."""


class DefaultsNotFoundError(ConfigError):
    """O arquivo de configuração base não existe no caminho informado."""


class UnsupportedConfigFormatError(ConfigError):
    """
    Extensão sem leitor registrado.

    Aceitas: `.yaml`, `.yml`, `.json`.
    """


class InvalidConfigRootTypeError(ConfigError):
    """A raiz do arquivo não é um mapeamento."""


class ConfigTypeConflictError(ConfigError):
    """
    Uma chave tem naturezas incompatíveis entre base e override.

    Exemplo:
        - base:     {"simulation": {"step_delay": 1.5}}
        - override: {"simulation": "fast"}

    Não há coerção: o conflito é sempre explícito.
    """


class InvalidConfigValueError(ConfigError):
    """
    Chave conhecida com valor fora do domínio.

    Exemplos:
        - `planner.on_cycle` diferente de "omit" ou "error"
        - `simulation.step_delay` negativo
        - `parsers.gitlab.default_stages` que não seja lista de strings
    """
