# tests/core/test_pipeline_validation.py
"""
Testes de rejeição do Pipeline Assembler.

Este módulo valida que configurações inválidas são rejeitadas de forma
síncrona pela chamada de registro que as introduziu, antes que qualquer
backend seja chamado e sem alterar o plano.

Cenários cobertos:
- tarefa endereçada a um estágio já superado
- identificadores de tarefa duplicados no mesmo estágio
- nomes de artefato duplicados no plano
- assume role em Windows
- concorrência inválida
- publicador configurado para avançar a cadeia

Invariantes:
    - Um registro rejeitado não cria estágio, ação nem artefato
    - Backends nunca recebem definições inválidas
    - Toda rejeição gera um evento `registration_rejected` no Event Log
"""

import pytest

from delivflow import AssumeRole, Pipeline, PublishTask, ShellPlatform
from delivflow.core.config.settings import PipelineSettings
from delivflow.core.errors import STAGE_SUPERSEDED, UNSUPPORTED_PLATFORM
from delivflow.core.exceptions import (
    DuplicateArtifactName,
    DuplicateTaskIdentifier,
    InvalidConfiguration,
    StageSuperseded,
    UnsupportedPlatform,
)


def _snapshot(pipeline):
    return (
        pipeline.stage_names,
        [len(s) for s in pipeline.stages],
        [a.name for a in pipeline.artifacts],
        pipeline.current_artifact,
    )


def test_build_after_test_stage_is_superseded(repo, shell_options):
    pipeline = Pipeline(repo=repo, build=shell_options())
    pipeline.add_test("unit", shell_options())
    before = _snapshot(pipeline)

    with pytest.raises(StageSuperseded):
        pipeline.add_build("late", shell_options())

    assert _snapshot(pipeline) == before


def test_test_after_publish_is_superseded(repo, shell_options):
    pipeline = Pipeline(repo=repo)
    pipeline.add_publish(PublishTask(task_id="npm", shell=shell_options()))

    with pytest.raises(StageSuperseded):
        pipeline.add_test("unit", shell_options())


def test_returning_to_earlier_test_stage_is_superseded(repo, shell_options):
    pipeline = Pipeline(repo=repo)
    pipeline.add_test("unit", shell_options(), stage="Unit")
    pipeline.add_test("api", shell_options(), stage="Integration")

    with pytest.raises(StageSuperseded):
        pipeline.add_test("more", shell_options(), stage="Unit")


def test_duplicate_task_id_in_stage(repo, shell_options, RecordingBackend):
    backend = RecordingBackend()
    pipeline = Pipeline(repo=repo, backend=backend)
    pipeline.add_test("unit", shell_options())

    with pytest.raises(DuplicateTaskIdentifier):
        pipeline.add_test("unit", shell_options())

    assert len(backend.definitions) == 1
    assert len(pipeline.stage("Test")) == 1


def test_duplicate_output_artifact_name(repo, shell_options, RecordingBackend):
    backend = RecordingBackend()
    pipeline = Pipeline(repo=repo, backend=backend)
    pipeline.add_test("a", shell_options(), output_artifact_name="Out")
    before = _snapshot(pipeline)

    with pytest.raises(DuplicateArtifactName):
        pipeline.add_test("b", shell_options(), output_artifact_name="Out")

    assert _snapshot(pipeline) == before
    assert len(backend.definitions) == 1


def test_output_name_cannot_shadow_source(repo, shell_options):
    pipeline = Pipeline(repo=repo)
    with pytest.raises(DuplicateArtifactName):
        pipeline.add_build("Build", shell_options(), output_artifact_name="Source")


def test_windows_assume_role_rejected_before_backend(repo, shell_options, RecordingBackend, RecordingAlarmBackend):
    """
    Assume role em Windows é rejeitado no registro, antes de qualquer backend.

    Invariantes:
        - Nenhuma definição chega ao Resource Backend
        - Nenhum alarme é criado
        - O estágio Test não é criado
    """
    backend = RecordingBackend()
    alarms = RecordingAlarmBackend()
    pipeline = Pipeline(repo=repo, backend=backend, alarm_backend=alarms)

    opts = shell_options(
        platform=ShellPlatform.WINDOWS,
        assume_role=AssumeRole(role_arn="arn:aws:iam::1:role/Deploy", session_name="deploy"),
    )
    with pytest.raises(UnsupportedPlatform) as ei:
        pipeline.add_test("win", opts)

    assert str(ei.value) == "assume_role is not supported on Windows"
    assert backend.definitions == []
    assert alarms.alarms == []
    assert pipeline.stage_names == ["Source"]


def test_unknown_input_artifact(repo, shell_options):
    pipeline = Pipeline(repo=repo)
    with pytest.raises(InvalidConfiguration):
        pipeline.add_test("unit", shell_options(), input_artifact="Artifact_Missing")
    assert pipeline.stage_names == ["Source"]


@pytest.mark.parametrize("bad", [0, -2, "many", True])
def test_invalid_concurrency_rejected_at_construction(bad):
    with pytest.raises(InvalidConfiguration):
        PipelineSettings(concurrency=bad)


def test_publish_cannot_advance_chain(repo, shell_options):
    pipeline = Pipeline(repo=repo)
    with pytest.raises(InvalidConfiguration):
        pipeline.add(PublishTask(task_id="npm", shell=shell_options()), advance_chain=True)


def test_reserved_stage_name_for_tests_is_rejected(repo, shell_options):
    pipeline = Pipeline(repo=repo)
    with pytest.raises(InvalidConfiguration):
        pipeline.add_test("unit", shell_options(), stage="Publish")


def test_shellable_in_source_stage_is_rejected(repo, shell_options):
    pipeline = Pipeline(repo=repo)
    with pytest.raises(InvalidConfiguration):
        pipeline.add_shellable("Source", "extra", shell_options())


def test_non_producer_is_rejected(repo):
    pipeline = Pipeline(repo=repo)
    with pytest.raises(InvalidConfiguration):
        pipeline.add(object())


def test_invalid_backend_is_rejected(repo):
    with pytest.raises(InvalidConfiguration):
        Pipeline(repo=repo, backend=object())


def test_rejections_are_recorded_in_event_log(repo, shell_options):
    pipeline = Pipeline(repo=repo)
    pipeline.add_test("unit", shell_options())
    pipeline.add_publish(PublishTask(task_id="npm", shell=shell_options()))

    with pytest.raises(StageSuperseded):
        pipeline.add_test("late", shell_options())
    win = shell_options(platform="windows", assume_role=AssumeRole(role_arn="arn", session_name="s"))
    with pytest.raises(UnsupportedPlatform):
        pipeline.add_publish(PublishTask(task_id="win", shell=win))

    rejected = [e for e in pipeline.events if e["event_type"] == "registration_rejected"]
    assert [e["task_id"] for e in rejected] == ["late", "win"]
    assert rejected[0]["payload"]["type"] == STAGE_SUPERSEDED
    assert rejected[1]["payload"]["type"] == UNSUPPORTED_PLATFORM
    assert rejected[1]["payload"]["details"]["platform"] == "Windows"


@pytest.mark.parametrize("bad_stage", ["", "   ", None, 5])
def test_test_stage_name_must_be_non_empty_string(repo, shell_options, bad_stage):
    pipeline = Pipeline(repo=repo)
    with pytest.raises(InvalidConfiguration):
        pipeline.add_test("unit", shell_options(), stage=bad_stage)
    assert pipeline.stage_names == ["Source"]


def test_auto_build_requires_primary_build_before_tests(repo, shell_options, RecordingBackend):
    """
    Com auto build habilitado, o estágio Build não pode ser superado vazio.

    Invariantes:
        - O registro de teste é rejeitado com `InvalidConfiguration`
        - Nenhum estágio é criado e nenhum backend é chamado
        - Após o build primário, testes são aceitos normalmente
    """
    backend = RecordingBackend()
    pipeline = Pipeline(repo=repo, settings=PipelineSettings(auto_build=True), backend=backend)

    with pytest.raises(InvalidConfiguration):
        pipeline.add_test("unit", shell_options())
    with pytest.raises(InvalidConfiguration):
        pipeline.add_publish(PublishTask(task_id="npm", shell=shell_options()))

    assert pipeline.stage_names == ["Source"]
    assert backend.definitions == []
    rejected = [e for e in pipeline.events if e["event_type"] == "registration_rejected"]
    assert rejected[0]["payload"]["details"]["field"] == "auto_build"

    pipeline.add_build("Build", shell_options())
    unit = pipeline.add_test("unit", shell_options())

    assert pipeline.stage("Build").actions[0].definition.trigger is not None
    assert unit.definition.trigger is None


def test_failing_alarm_backend_stops_before_execution_unit(repo, shell_options, RecordingBackend):
    class _FailingAlarmBackend:
        def create_alarm(self, alarm):
            raise RuntimeError("alarm quota exceeded")

    backend = RecordingBackend()
    pipeline = Pipeline(repo=repo, backend=backend, alarm_backend=_FailingAlarmBackend())

    with pytest.raises(RuntimeError):
        pipeline.add_test("unit", shell_options())

    assert backend.definitions == []
    assert pipeline.stage_names == ["Source"]
    assert pipeline.current_artifact.name == "Source"
