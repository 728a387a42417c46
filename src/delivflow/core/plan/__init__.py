# src/delivflow/core/plan/__init__.py
"""
# Plan Core — DelivFlow

Este pacote define as estruturas que compõem o plano de um pipeline.

## Componentes

- **types**: plataformas, categorias de estágio/tarefa, artefatos, assume role, alarme
- **run_order**: `determine_run_order` (onda = floor(index / concurrency) + 1)
- **artifacts**: `ArtifactChain`, cadeia do artefato primário corrente
- **registry**: `TaskRegistry`, unicidade de `task_id` por estágio
- **stages**: `Stage`, `StageComposer`, `PlannedAction`
- **producers**: variantes fechadas de tarefa (Build, Test, Publish, Shell genérico)

## Invariantes

- Ondas são contíguas a partir de 1 dentro de cada estágio
- Nenhuma onda excede o limite de concorrência
- Estágios seguem a ordem fixa Source → Build → Test* → Publish
- Nomes de artefato são únicos no plano
"""

from .artifacts import ArtifactChain, ChainLink, artifact_name_for
from .registry import TaskRegistry
from .run_order import UNLIMITED, determine_run_order, group_into_waves, normalize_concurrency
from .stages import PlannedAction, Stage, StageComposer
from .types import (
    AlarmOptions,
    Artifact,
    AssumeRole,
    AutoBuildTrigger,
    ShellPlatform,
    SourceRepository,
    StageKind,
    TaskKind,
)

__all__ = [
    "ArtifactChain",
    "ChainLink",
    "artifact_name_for",
    "TaskRegistry",
    "UNLIMITED",
    "determine_run_order",
    "group_into_waves",
    "normalize_concurrency",
    "PlannedAction",
    "Stage",
    "StageComposer",
    "AlarmOptions",
    "Artifact",
    "AssumeRole",
    "AutoBuildTrigger",
    "ShellPlatform",
    "SourceRepository",
    "StageKind",
    "TaskKind",
]
