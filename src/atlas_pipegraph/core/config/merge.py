"""
Deep-merge determinístico de camadas de configuração.

Regras, por chave presente no override:
    - ausente na base → copiada
    - dict sobre dict → merge recursivo
    - list sobre list → substituição integral (ordem de stages, por exemplo,
      só faz sentido como um todo)
    - None em qualquer dos lados → o override vence
    - escalares de mesma natureza → o override vence; int e float contam
      como a mesma natureza, bool não
    - qualquer outra combinação → `ConfigTypeConflictError`

Nenhum argumento é mutado; o retorno não compartilha objetos mutáveis com
as entradas.
"""

from copy import deepcopy
from typing import Any, Dict

from .errors import ConfigTypeConflictError


def _kind(value: Any) -> type:
    if isinstance(value, bool):
        return bool
    if isinstance(value, (int, float)):
        return float
    return type(value)


def _merge_value(key: str, base_value: Any, override_value: Any) -> Any:
    if isinstance(base_value, dict) and isinstance(override_value, dict):
        return deep_merge(base_value, override_value)

    if base_value is None or override_value is None:
        return deepcopy(override_value)

    if _kind(base_value) is not _kind(override_value):
        raise ConfigTypeConflictError(
            f"Conflito de tipo na chave '{key}': "
            f"{type(base_value).__name__} vs {type(override_value).__name__}"
        )

    # listas e escalares: substituição integral
    return deepcopy(override_value)


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Aplica `override` sobre `base` e devolve um novo dicionário.

    Raises:
        ConfigTypeConflictError: Se uma chave tiver naturezas incompatíveis.
    """
    merged: Dict[str, Any] = deepcopy(base)
    for key, override_value in override.items():
        if key in merged:
            merged[key] = _merge_value(key, merged[key], override_value)
        else:
            merged[key] = deepcopy(override_value)
    return merged
