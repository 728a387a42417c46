# src/delivflow/core/plan/registry.py
"""
Registro estrutural de tarefas de um estágio.

Este módulo define o `TaskRegistry`, responsável por registrar tarefas
de um estágio e validar a integridade estrutural antes que a tarefa
receba onda e artefatos.

O registry atua como uma camada de proteção antecipada, garantindo que:
    - cada tarefa possua um identificador válido
    - não existam identificadores duplicados no mesmo estágio
    - a ordem de registro seja preservada (ela determina as ondas)

Invariantes:
    - Cada tarefa registrada possui um `task_id` único no estágio
    - A lista de tarefas reflete exatamente a ordem de registro
    - Nenhuma tarefa inválida é aceita

Limites explícitos:
    - Não calcula ondas (ver `run_order`)
    - Não conecta artefatos (ver `artifacts`)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Generic, List, TypeVar

from delivflow.core.errors import duplicate_task_identifier, invalid_configuration


T = TypeVar("T")


@dataclass
class TaskRegistry(Generic[T]):
    """
    Registro ordenado de tarefas de um único estágio.

    A unicidade de `task_id` é imposta no momento do registro; a tentativa
    de duplicidade não altera o estado interno.
    """

    stage: str
    _tasks: Dict[str, T] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)

    def ensure_available(self, task_id: str) -> None:
        if not isinstance(task_id, str) or not task_id.strip():
            raise invalid_configuration(field_name="task_id", value=task_id, expected="a non-empty string")
        if task_id in self._tasks:
            raise duplicate_task_identifier(task_id=task_id, stage=self.stage)

    def add(self, task_id: str, task: T) -> None:
        self.ensure_available(task_id)
        self._tasks[task_id] = task
        self._order.append(task_id)

    def get(self, task_id: str) -> T:
        return self._tasks[task_id]

    def ids(self) -> List[str]:
        return list(self._order)

    def list(self) -> List[T]:
        return [self._tasks[tid] for tid in self._order]

    def __len__(self) -> int:
        return len(self._order)
