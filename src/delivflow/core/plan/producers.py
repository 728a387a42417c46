# src/delivflow/core/plan/producers.py
"""
Produtores de tarefa: conjunto fechado de variantes registráveis no plano.

Cada variante expõe o mesmo contrato de materialização:
    - `task_id`, `kind`, `stage_name`, `stage_kind`
    - `advances_chain`: se a saída passa a ser o artefato primário corrente
    - `materialize(settings, trigger=None)` → `RunnableDefinition`

Variantes:
    - BuildTask        → estágio Build, avança a cadeia
    - TestTask         → estágio de teste (nome configurável), avança a cadeia
    - PublishTask      → estágio Publish, nunca avança a cadeia
    - GenericShellTask → estágio arbitrário (exceto Source), avança a cadeia

O conjunto é fechado (`TaskProducer`): o Pipeline despacha apenas sobre
essas quatro variantes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Union

from delivflow.core.errors import invalid_configuration
from delivflow.core.shell.shellable import RunnableDefinition, ShellableOptions, materialize_shellable

from .types import AutoBuildTrigger, StageKind, TaskKind

if TYPE_CHECKING:  # pragma: no cover
    from delivflow.core.config.settings import PipelineSettings


SOURCE_STAGE = "Source"
BUILD_STAGE = "Build"
TEST_STAGE = "Test"
PUBLISH_STAGE = "Publish"

_RESERVED_STAGES = {
    SOURCE_STAGE: StageKind.SOURCE,
    BUILD_STAGE: StageKind.BUILD,
    PUBLISH_STAGE: StageKind.PUBLISH,
}


def stage_kind_for(stage_name: str) -> StageKind:
    """Categoria de um nome de estágio: Build/Publish/Source reservados, os demais são de teste."""
    return _RESERVED_STAGES.get(stage_name, StageKind.TEST)


def _materialize(
    task_id: str,
    shell: ShellableOptions,
    settings: "PipelineSettings",
    trigger: Optional[AutoBuildTrigger],
) -> RunnableDefinition:
    return materialize_shellable(
        task_id,
        shell,
        default_platform=settings.default_platform,
        default_privileged=settings.privileged,
        alarm_defaults=settings.alarm,
        trigger=trigger,
    )


@dataclass(frozen=True)
class BuildTask:
    task_id: str
    shell: ShellableOptions

    kind = TaskKind.BUILD
    advances_chain = True

    @property
    def stage_name(self) -> str:
        return BUILD_STAGE

    @property
    def stage_kind(self) -> StageKind:
        return StageKind.BUILD

    def materialize(self, settings: "PipelineSettings", trigger: Optional[AutoBuildTrigger] = None) -> RunnableDefinition:
        return _materialize(self.task_id, self.shell, settings, trigger)


@dataclass(frozen=True)
class TestTask:
    task_id: str
    shell: ShellableOptions
    stage: str = TEST_STAGE

    kind = TaskKind.TEST
    advances_chain = True
    # evita coleta pelo pytest
    __test__ = False

    def __post_init__(self) -> None:
        if not isinstance(self.stage, str) or not self.stage.strip():
            raise invalid_configuration(field_name="stage", value=self.stage, expected="a non-empty string")
        if stage_kind_for(self.stage) is not StageKind.TEST:
            raise invalid_configuration(
                field_name="stage",
                value=self.stage,
                expected=f"a test stage name other than {', '.join(sorted(_RESERVED_STAGES))}",
            )

    @property
    def stage_name(self) -> str:
        return self.stage

    @property
    def stage_kind(self) -> StageKind:
        return StageKind.TEST

    def materialize(self, settings: "PipelineSettings", trigger: Optional[AutoBuildTrigger] = None) -> RunnableDefinition:
        return _materialize(self.task_id, self.shell, settings, trigger)


@dataclass(frozen=True)
class PublishTask:
    task_id: str
    shell: ShellableOptions

    kind = TaskKind.PUBLISH
    advances_chain = False

    @property
    def stage_name(self) -> str:
        return PUBLISH_STAGE

    @property
    def stage_kind(self) -> StageKind:
        return StageKind.PUBLISH

    def materialize(self, settings: "PipelineSettings", trigger: Optional[AutoBuildTrigger] = None) -> RunnableDefinition:
        return _materialize(self.task_id, self.shell, settings, trigger)


@dataclass(frozen=True)
class GenericShellTask:
    stage: str
    task_id: str
    shell: ShellableOptions

    kind = TaskKind.SHELL
    advances_chain = True

    def __post_init__(self) -> None:
        if not isinstance(self.stage, str) or not self.stage.strip():
            raise invalid_configuration(field_name="stage", value=self.stage, expected="a non-empty string")
        if stage_kind_for(self.stage) is StageKind.SOURCE:
            raise invalid_configuration(
                field_name="stage",
                value=self.stage,
                expected="any stage except the reserved Source stage",
            )

    @property
    def stage_name(self) -> str:
        return self.stage

    @property
    def stage_kind(self) -> StageKind:
        return stage_kind_for(self.stage)

    def materialize(self, settings: "PipelineSettings", trigger: Optional[AutoBuildTrigger] = None) -> RunnableDefinition:
        return _materialize(self.task_id, self.shell, settings, trigger)


TaskProducer = Union[BuildTask, TestTask, PublishTask, GenericShellTask]
