"""
Contexto de execução de uma simulação.

Este módulo define o `RunContext`, a estrutura que acompanha uma instância
do simulador: identidade da run, configuração resolvida e o log estruturado
de eventos emitidos durante cada simulação.

O RunContext atua como o único meio de:
    - acessar a configuração efetiva (delays, política de ciclos)
    - registrar logs estruturados (início, transições, término)
    - coletar warnings não fatais associados a nós

Princípios fundamentais:
    - Isolamento por simulador (sem estado global compartilhado)
    - Comunicação explícita e rastreável
    - Estrutura simples e testável

Invariantes:
    - Logs sempre incluem `run_id` e `node_id` (None para eventos de run)
    - Warnings são agrupados por `node_id`
    - Timestamps são sempre UTC em ISO-8601

Limites explícitos:
    - Não executa nós
    - Não planeja nem coordena execução
    - Não persiste eventos automaticamente
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


@dataclass
class RunContext:
    """
    Contexto canônico de uma instância do simulador.

    Campos:
        - run_id: identificador da run (regenerável via `new_run`)
        - created_at: instante de criação (UTC)
        - config: configuração resolvida (`load_config`)
        - meta: metadados livres do chamador
        - events: log estruturado e ordenado de eventos
        - warnings: avisos não fatais por nó
    """
    run_id: str
    created_at: datetime
    config: Dict[str, Any]
    meta: Dict[str, Any] = field(default_factory=dict)

    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    @classmethod
    def create(cls, config: Optional[Dict[str, Any]] = None, **meta: Any) -> "RunContext":
        return cls(
            run_id=uuid.uuid4().hex,
            created_at=datetime.now(timezone.utc),
            config=dict(config or {}),
            meta=dict(meta),
        )

    def new_run(self) -> str:
        """Gera um novo `run_id` para a próxima simulação; o log é mantido."""
        self.run_id = uuid.uuid4().hex
        return self.run_id

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, node_id: Optional[str], level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "node_id": node_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, node_id: str, message: str) -> None:
        if node_id not in self.warnings:
            self.warnings[node_id] = []
        self.warnings[node_id].append(message)

    def events_for(self, run_id: str) -> List[Dict[str, Any]]:
        return [ev for ev in self.events if ev["run_id"] == run_id]
