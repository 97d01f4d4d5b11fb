"""
Leitura tipada de chaves conhecidas da configuração efetiva.

Os componentes recebem a configuração como `dict` puro (como resolvida por
`load_config`) e leem apenas as seções que lhes dizem respeito. Chaves
ausentes assumem os mesmos valores do `defaults.yaml` empacotado.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .errors import InvalidConfigValueError


DEFAULT_STEP_DELAY = 1.5
DEFAULT_PAUSE = 0.3
DEFAULT_GITLAB_STAGES = [".pre", "build", "test", "deploy", ".post"]
ON_CYCLE_CHOICES = ("omit", "error")


@dataclass(frozen=True)
class SimulationSettings:
    """Parâmetros temporais do simulador (em segundos)."""

    step_delay: float = DEFAULT_STEP_DELAY
    pause: float = DEFAULT_PAUSE


def _section(config: Optional[Dict[str, Any]], name: str) -> Dict[str, Any]:
    section = (config or {}).get(name, {}) or {}
    if not isinstance(section, dict):
        raise InvalidConfigValueError(f"Seção '{name}' deve ser dict, recebido: {type(section).__name__}")
    return section


def _non_negative(value: Any, key: str, default: float) -> float:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidConfigValueError(f"'{key}' deve ser numérico, recebido: {value!r}")
    if value < 0:
        raise InvalidConfigValueError(f"'{key}' não pode ser negativo: {value!r}")
    return float(value)


def simulation_settings(config: Optional[Dict[str, Any]]) -> SimulationSettings:
    sim = _section(config, "simulation")
    return SimulationSettings(
        step_delay=_non_negative(sim.get("step_delay"), "simulation.step_delay", DEFAULT_STEP_DELAY),
        pause=_non_negative(sim.get("pause"), "simulation.pause", DEFAULT_PAUSE),
    )


def planner_on_cycle(config: Optional[Dict[str, Any]]) -> str:
    planner = _section(config, "planner")
    value = planner.get("on_cycle", "omit")
    if value not in ON_CYCLE_CHOICES:
        raise InvalidConfigValueError(
            f"'planner.on_cycle' deve ser um de {ON_CYCLE_CHOICES}, recebido: {value!r}"
        )
    return value


def gitlab_default_stages(config: Optional[Dict[str, Any]]) -> List[str]:
    gitlab = _section(_section(config, "parsers"), "gitlab")
    stages = gitlab.get("default_stages")
    if stages is None:
        return list(DEFAULT_GITLAB_STAGES)
    if not isinstance(stages, list) or not all(isinstance(s, str) for s in stages):
        raise InvalidConfigValueError("'parsers.gitlab.default_stages' deve ser uma lista de strings")
    return list(stages)
