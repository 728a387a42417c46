# src/delivflow/core/plan/types.py
"""
Tipos canônicos do plano do DelivFlow.

Este módulo define as estruturas e enums que padronizam a comunicação
entre o alocador de run order, a cadeia de artefatos, o compositor de
estágios e o wrapper de execução.

Componentes principais:
    - ShellPlatform  → plataformas de execução (família Linux e Windows)
    - StageKind      → categorias de estágio com ordem fixa
    - TaskKind       → classificação semântica das tarefas
    - Artifact       → handle nomeado de saída de uma tarefa
    - AssumeRole     → descritor de troca de credenciais temporárias
    - AlarmOptions   → configuração do alarme de saúde de uma tarefa
    - AutoBuildTrigger → gatilho automático do build primário
    - SourceRepository → descritor do repositório de origem

Invariantes:
    - Enums possuem valores textuais canônicos (serializáveis no Manifest)
    - Estruturas são imutáveis (frozen) e validadas na construção
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

from delivflow.core.errors import invalid_configuration


def require_positive_int(field_name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise invalid_configuration(field_name=field_name, value=value, expected="a positive integer")
    return value


def require_non_empty_str(field_name: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise invalid_configuration(field_name=field_name, value=value, expected="a non-empty string")
    return value


class ShellPlatform(str, Enum):
    """
    Plataformas suportadas pelo wrapper de execução.

    A plataforma seleciona apenas a imagem e a família de shell usada para
    invocar o entrypoint; ela não altera a semântica de agendamento.
    """
    LINUX_UBUNTU = "linux_ubuntu"
    LINUX_AMAZON = "linux_amazon"
    WINDOWS = "windows"

    @property
    def is_windows(self) -> bool:
        return self is ShellPlatform.WINDOWS

    @classmethod
    def parse(cls, value: Any) -> "ShellPlatform":
        if isinstance(value, ShellPlatform):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise invalid_configuration(
                field_name="platform",
                value=value,
                expected="one of " + ", ".join(p.value for p in cls),
            ) from None


class StageKind(str, Enum):
    """
    Categorias de estágio, na ordem fixa Source → Build → Test → Publish.

    Podem existir vários estágios TEST (nomes distintos), todos entre
    Build e Publish, na ordem em que foram criados.
    """
    SOURCE = "source"
    BUILD = "build"
    TEST = "test"
    PUBLISH = "publish"

    @property
    def rank(self) -> int:
        return _STAGE_RANK[self]


_STAGE_RANK = {
    StageKind.SOURCE: 0,
    StageKind.BUILD: 1,
    StageKind.TEST: 2,
    StageKind.PUBLISH: 3,
}


class TaskKind(str, Enum):
    """Classificação semântica das tarefas registradas no plano."""
    SOURCE = "source"
    BUILD = "build"
    TEST = "test"
    PUBLISH = "publish"
    SHELL = "shell"


@dataclass(frozen=True)
class Artifact:
    """
    Handle nomeado para a saída opaca de uma tarefa.

    `producer` registra apenas a proveniência ("<estágio>/<tarefa>") e não
    mantém referência ao objeto da tarefa.
    """
    name: str
    producer: Optional[str] = None

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class AssumeRole:
    """Descritor de assume role: ARN, nome de sessão e external id opcional."""
    role_arn: str
    session_name: str
    external_id: Optional[str] = None

    def __post_init__(self) -> None:
        require_non_empty_str("assume_role.role_arn", self.role_arn)
        require_non_empty_str("assume_role.session_name", self.session_name)
        if self.external_id is not None:
            require_non_empty_str("assume_role.external_id", self.external_id)


@dataclass(frozen=True)
class AlarmOptions:
    """
    Configuração do alarme de saúde associado a cada tarefa.

    O alarme dispara quando o número de falhas dentro de `period_sec`
    atinge `threshold` em `evaluation_periods` janelas consecutivas.
    """
    evaluation_periods: int = 1
    threshold: int = 1
    period_sec: int = 300

    def __post_init__(self) -> None:
        require_positive_int("alarm.evaluation_periods", self.evaluation_periods)
        require_positive_int("alarm.threshold", self.threshold)
        require_positive_int("alarm.period_sec", self.period_sec)

    def with_overrides(
        self,
        *,
        evaluation_periods: Optional[int] = None,
        threshold: Optional[int] = None,
        period_sec: Optional[int] = None,
    ) -> "AlarmOptions":
        return AlarmOptions(
            evaluation_periods=self.evaluation_periods if evaluation_periods is None else evaluation_periods,
            threshold=self.threshold if threshold is None else threshold,
            period_sec=self.period_sec if period_sec is None else period_sec,
        )


AUTO_BUILD_EVENTS: Tuple[str, ...] = ("PUSH", "PULL_REQUEST_CREATED", "PULL_REQUEST_UPDATED")


@dataclass(frozen=True)
class AutoBuildTrigger:
    """
    Gatilho automático do build primário a partir de eventos do repositório.

    É apenas configuração: não interfere em ondas nem em artefatos.
    """
    events: Tuple[str, ...] = AUTO_BUILD_EVENTS
    webhook: bool = True
    public_logs: bool = False
    build_spec: Optional[str] = None

    @property
    def filter_pattern(self) -> str:
        return ",".join(self.events)


@dataclass(frozen=True)
class SourceRepository:
    """Repositório de origem observado pelo notificador externo de mudanças."""
    name: str
    provider: str = "codecommit"
    branch: str = "master"

    def __post_init__(self) -> None:
        require_non_empty_str("repo.name", self.name)
        require_non_empty_str("repo.provider", self.provider)
        require_non_empty_str("repo.branch", self.branch)
