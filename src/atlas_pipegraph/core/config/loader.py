"""
Resolução da configuração efetiva do Atlas PipeGraph.

Duas camadas, aplicadas em ordem:
    1. defaults: obrigatória; quando não informada, o `defaults.yaml` do pacote
    2. local: opcional; arquivo ausente é ignorado

A camada local é aplicada sobre os defaults com `deep_merge`. O resultado é
sempre um `dict` novo; os arquivos lidos nunca são alterados.

Formatos aceitos por extensão: `.yaml`, `.yml` (PyYAML `safe_load`) e `.json`.
A semântica das chaves é validada por quem as consome (ver `settings`).
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, Optional, TextIO

import yaml  # PyYAML

from .errors import (
    DefaultsNotFoundError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .merge import deep_merge


DEFAULTS_PATH = Path(__file__).with_name("defaults.yaml")

_READERS: Dict[str, Callable[[TextIO], Any]] = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.load,
}


def read_config_file(path: Path) -> Dict[str, Any]:
    """
    Lê um único arquivo de configuração.

    Arquivo vazio vale como `{}`; qualquer raiz que não seja mapeamento é
    rejeitada.

    Raises:
        DefaultsNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se a extensão não tiver leitor.
        InvalidConfigRootTypeError: Se a raiz não for `dict`.
    """
    if not path.exists():
        raise DefaultsNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    reader = _READERS.get(path.suffix.lower())
    if reader is None:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix or '(sem extensão)'}")

    with path.open("r", encoding="utf-8") as f:
        data = reader(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict em {path.name}, recebido: {type(data).__name__}"
        )
    return data


def load_config(
    *,
    defaults_path: Optional[str] = None,
    local_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Carrega defaults e, se existir, o override local.

    Args:
        defaults_path (Optional[str]): Arquivo base; None usa o `defaults.yaml` empacotado.
        local_path (Optional[str]): Override opcional; ignorado se não existir.

    Returns:
        Dict[str, Any]: Configuração efetiva.

    Raises:
        DefaultsNotFoundError, UnsupportedConfigFormatError,
        InvalidConfigRootTypeError, ConfigTypeConflictError
    """
    config = read_config_file(Path(defaults_path) if defaults_path is not None else DEFAULTS_PATH)

    if local_path is None:
        return config

    local_file = Path(local_path)
    if not local_file.exists():
        return config
    return deep_merge(config, read_config_file(local_file))
