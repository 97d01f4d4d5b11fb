"""
Identidade da configuração efetiva de uma simulação.

O hash é registrado no evento `run_started`, de modo que duas runs possam
ser comparadas pela configuração que as produziu.
"""

import hashlib
import json
from typing import Any, Dict


def canonical_json(config: Dict[str, Any]) -> str:
    """JSON com chaves ordenadas, separadores compactos e UTF-8 literal."""
    return json.dumps(config, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    SHA-256 hexadecimal (64 caracteres) de `canonical_json(config)`.

    A ordem de chaves não afeta o resultado; qualquer valor alterado afeta.

    Raises:
        TypeError: Se `config` não for `dict`.
    """
    if not isinstance(config, dict):
        raise TypeError(f"Config para hashing deve ser dict, recebido: {type(config).__name__}")
    return hashlib.sha256(canonical_json(config).encode("utf-8")).hexdigest()
