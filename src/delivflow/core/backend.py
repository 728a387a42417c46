# src/delivflow/core/backend.py
"""
Contratos dos colaboradores externos do planejador.

O core não sabe como uma tarefa é executada nem como um alarme é criado:
ele entrega definições imutáveis a backends que devolvem handles opacos.

Colaboradores:
    - ResourceBackend → recebe uma `RunnableDefinition` e devolve um handle
      de unidade de execução
    - AlarmBackend    → recebe uma `AlarmDefinition` e devolve um handle de alarme

Conformidade é verificada por duck typing (`@runtime_checkable`), sem
herança obrigatória.

Invariantes:
    - Backends só são chamados depois que todas as validações do registro passaram
    - Um backend nunca recebe uma definição inválida (ex.: Windows + assume role)
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from delivflow.core.shell.alarm import AlarmDefinition
from delivflow.core.shell.shellable import RunnableDefinition


@runtime_checkable
class ResourceBackend(Protocol):
    def create_execution_unit(self, definition: RunnableDefinition) -> Any:
        """Materializa a definição em uma unidade executável e devolve um handle opaco."""
        ...


@runtime_checkable
class AlarmBackend(Protocol):
    def create_alarm(self, alarm: AlarmDefinition) -> Any:
        """Cria o alarme descrito e devolve um handle opaco."""
        ...
