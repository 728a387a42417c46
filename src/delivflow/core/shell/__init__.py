"""
Wrapper seguro de execução do DelivFlow.

Componentes:
    - shellable   → `ShellableOptions`, `RunnableDefinition`, `materialize_shellable`
    - platform    → perfis de plataforma (imagem e família de shell)
    - credentials → comandos de troca de credenciais (assume role)
    - alarm       → definição do alarme de saúde por tarefa
"""

from .alarm import AlarmDefinition, MetricReference, alarm_for
from .credentials import assume_role_commands
from .platform import PlatformProfile, profile_for
from .shellable import RunnableDefinition, ShellableOptions, materialize_shellable

__all__ = [
    "AlarmDefinition",
    "MetricReference",
    "alarm_for",
    "assume_role_commands",
    "PlatformProfile",
    "profile_for",
    "RunnableDefinition",
    "ShellableOptions",
    "materialize_shellable",
]
