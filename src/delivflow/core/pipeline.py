# src/delivflow/core/pipeline.py
"""
Pipeline Assembler — fachada de registro do DelivFlow.

O `Pipeline` é o único dono da lista de estágios e do ponteiro de
artefato primário corrente. Cada operação de registro:

    1. resolve o estágio de destino (criado no primeiro uso, ordem fixa)
    2. materializa a tarefa pelo wrapper seguro de execução
    3. valida unicidade de tarefa (no estágio) e de artefato (no plano)
    4. calcula a onda a partir da contagem atual do estágio
    5. entrega definição e alarme aos backends externos (se configurados)
    6. encadeia o artefato e confirma a ação no plano

Todas as validações acontecem antes do passo 5: uma configuração inválida
nunca chega a um backend, e o erro é levantado de forma síncrona pela
chamada que o introduziu. Rejeições também são registradas no Event Log.

O alarme é criado antes da unidade de execução. Backends não oferecem
remoção: se `create_execution_unit` falhar, o alarme já criado permanece
no provedor e a tarefa não entra no plano.

Todo registro devolve um `ActionHandle` cujo `output_artifact` pode ser
usado para fixar a entrada de consumidores posteriores (fan-out).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from delivflow import __version__
from delivflow.core.backend import AlarmBackend, ResourceBackend
from delivflow.core.config.settings import PipelineSettings, resolve_settings
from delivflow.core.errors import invalid_configuration, to_error_payload
from delivflow.core.exceptions import DelivException
from delivflow.core.plan.artifacts import ArtifactChain, ArtifactRef, artifact_name_for
from delivflow.core.plan.producers import (
    BUILD_STAGE,
    SOURCE_STAGE,
    TEST_STAGE,
    BuildTask,
    GenericShellTask,
    PublishTask,
    TaskProducer,
    TestTask,
)
from delivflow.core.plan.stages import PlannedAction, Stage, StageComposer
from delivflow.core.plan.types import (
    Artifact,
    SourceRepository,
    StageKind,
    TaskKind,
    require_non_empty_str,
)
from delivflow.core.shell.shellable import ShellableOptions
from delivflow.core.traceability.manifest import PlanManifest, add_event, add_warning, create_manifest


ActionHandle = PlannedAction

SOURCE_ACTION = "Pull"
SOURCE_ARTIFACT = "Source"

_PRODUCER_TYPES = (BuildTask, TestTask, PublishTask, GenericShellTask)


class Pipeline:
    """Plano de pipeline construído por registros síncronos e determinísticos."""

    def __init__(
        self,
        *,
        repo: SourceRepository,
        settings: Optional[PipelineSettings] = None,
        backend: Optional[ResourceBackend] = None,
        alarm_backend: Optional[AlarmBackend] = None,
        build: Optional[ShellableOptions] = None,
    ):
        if not isinstance(repo, SourceRepository):
            raise invalid_configuration(field_name="repo", value=repo, expected="SourceRepository")
        if settings is None:
            settings = PipelineSettings()
        if not isinstance(settings, PipelineSettings):
            raise invalid_configuration(field_name="settings", value=settings, expected="PipelineSettings")
        if backend is not None and not isinstance(backend, ResourceBackend):
            raise invalid_configuration(field_name="backend", value=backend, expected="a ResourceBackend")
        if alarm_backend is not None and not isinstance(alarm_backend, AlarmBackend):
            raise invalid_configuration(field_name="alarm_backend", value=alarm_backend, expected="an AlarmBackend")

        self.repo = repo
        self.settings = settings
        self.backend = backend
        self.alarm_backend = alarm_backend

        self._composer = StageComposer()
        source = Artifact(name=SOURCE_ARTIFACT, producer=f"{SOURCE_STAGE}/{SOURCE_ACTION}")
        self._chain = ArtifactChain(initial=source)
        self._producers: Dict[str, PlannedAction] = {}

        self.manifest: PlanManifest = create_manifest(
            pipeline_name=settings.pipeline_name,
            delivflow_version=__version__,
            config_hash=settings.config_hash,
            repo={"name": repo.name, "provider": repo.provider, "branch": repo.branch},
        )

        self._add_source_stage(source)

        if build is not None:
            self.add_build(BUILD_STAGE, build)

    @classmethod
    def from_config(cls, *, repo: SourceRepository, config: Optional[Dict[str, Any]] = None, **kwargs: Any) -> "Pipeline":
        return cls(repo=repo, settings=resolve_settings(config), **kwargs)

    # ------------------------------------------------------------------
    # Inspeção
    # ------------------------------------------------------------------
    @property
    def name(self) -> str:
        return self.settings.pipeline_name

    @property
    def concurrency(self) -> Optional[int]:
        return self.settings.concurrency

    @property
    def stages(self) -> List[Stage]:
        return self._composer.stages

    @property
    def stage_names(self) -> List[str]:
        return [s.name for s in self._composer.stages]

    @property
    def current_artifact(self) -> Artifact:
        return self._chain.current

    @property
    def artifacts(self) -> List[Artifact]:
        return self._chain.list()

    @property
    def events(self) -> List[Dict[str, Any]]:
        return self.manifest.events

    @property
    def warnings(self) -> List[Dict[str, Any]]:
        return self.manifest.warnings

    def stage(self, name: str) -> Stage:
        found = self._composer.get(name)
        if found is None:
            raise KeyError(name)
        return found

    def waves(self, stage_name: str) -> Dict[int, List[str]]:
        return self.stage(stage_name).waves()

    # ------------------------------------------------------------------
    # Registro
    # ------------------------------------------------------------------
    def add_build(
        self,
        task_id: str,
        options: ShellableOptions,
        *,
        input_artifact: Optional[ArtifactRef] = None,
        output_artifact_name: Optional[str] = None,
    ) -> ActionHandle:
        return self._guarded(
            lambda: BuildTask(task_id=task_id, shell=options),
            task_id=task_id,
            input_artifact=input_artifact,
            output_artifact_name=output_artifact_name,
        )

    def add_test(
        self,
        task_id: str,
        options: ShellableOptions,
        *,
        stage: str = TEST_STAGE,
        input_artifact: Optional[ArtifactRef] = None,
        advance_chain: Optional[bool] = None,
        output_artifact_name: Optional[str] = None,
    ) -> ActionHandle:
        return self._guarded(
            lambda: TestTask(task_id=task_id, shell=options, stage=stage),
            task_id=task_id,
            input_artifact=input_artifact,
            advance_chain=advance_chain,
            output_artifact_name=output_artifact_name,
        )

    def add_publish(
        self,
        publisher: PublishTask,
        *,
        input_artifact: Optional[ArtifactRef] = None,
        output_artifact_name: Optional[str] = None,
    ) -> ActionHandle:
        return self.add(publisher, input_artifact=input_artifact, output_artifact_name=output_artifact_name)

    def add_shellable(
        self,
        stage_name: str,
        task_id: str,
        options: ShellableOptions,
        *,
        input_artifact: Optional[ArtifactRef] = None,
        advance_chain: Optional[bool] = None,
        output_artifact_name: Optional[str] = None,
    ) -> ActionHandle:
        return self._guarded(
            lambda: GenericShellTask(stage=stage_name, task_id=task_id, shell=options),
            task_id=task_id,
            input_artifact=input_artifact,
            advance_chain=advance_chain,
            output_artifact_name=output_artifact_name,
        )

    def add(
        self,
        producer: TaskProducer,
        *,
        input_artifact: Optional[ArtifactRef] = None,
        advance_chain: Optional[bool] = None,
        output_artifact_name: Optional[str] = None,
    ) -> ActionHandle:
        """Registra qualquer variante de `TaskProducer`."""
        return self._guarded(
            lambda: producer,
            task_id=getattr(producer, "task_id", None),
            input_artifact=input_artifact,
            advance_chain=advance_chain,
            output_artifact_name=output_artifact_name,
        )

    # ------------------------------------------------------------------
    # Internos
    # ------------------------------------------------------------------
    def _guarded(self, make_producer, *, task_id: Any, **kwargs: Any) -> ActionHandle:
        try:
            return self._register(make_producer(), **kwargs)
        except DelivException as exc:
            add_event(
                self.manifest,
                event_type="registration_rejected",
                task_id=task_id if isinstance(task_id, str) else None,
                payload=to_error_payload(exc).to_dict(),
            )
            raise

    def _register(
        self,
        producer: TaskProducer,
        *,
        input_artifact: Optional[ArtifactRef] = None,
        advance_chain: Optional[bool] = None,
        output_artifact_name: Optional[str] = None,
    ) -> ActionHandle:
        if not isinstance(producer, _PRODUCER_TYPES):
            raise invalid_configuration(
                field_name="producer",
                value=producer,
                expected="BuildTask, TestTask, PublishTask or GenericShellTask",
            )

        advance = producer.advances_chain if advance_chain is None else advance_chain
        if not isinstance(advance, bool):
            raise invalid_configuration(field_name="advance_chain", value=advance_chain, expected="a boolean")
        if advance and isinstance(producer, PublishTask):
            raise invalid_configuration(
                field_name="advance_chain",
                value=advance_chain,
                expected="False for publish tasks (publishers never advance the primary chain)",
            )

        # auto build exige um build primário antes que o estágio Build seja superado
        if (
            self.settings.auto_build
            and producer.stage_kind is not StageKind.BUILD
            and self._composer.get(BUILD_STAGE) is None
        ):
            raise invalid_configuration(
                field_name="auto_build",
                value=True,
                expected="a primary build registered before any test or publish task",
            )

        stage = self._composer.resolve(name=producer.stage_name, kind=producer.stage_kind, task_id=producer.task_id)

        # o primeiro build do estágio Build é o build primário
        trigger = None
        if stage.kind is StageKind.BUILD and len(stage) == 0:
            trigger = self.settings.auto_build_trigger()

        definition = producer.materialize(self.settings, trigger)

        stage.registry.ensure_available(producer.task_id)
        ref = f"{stage.name}/{producer.task_id}"

        if output_artifact_name is None:
            output_name = artifact_name_for(pipeline=self.name, stage=stage.name, task_id=producer.task_id)
        else:
            output_name = require_non_empty_str("output_artifact_name", output_artifact_name)
        self._chain.ensure_available(output_name, producer=ref)
        source = self._chain.resolve_input(input_artifact)

        run_order = self._composer.next_run_order(stage, self.settings.concurrency)

        alarm = None
        if self.alarm_backend is not None:
            alarm = self.alarm_backend.create_alarm(definition.alarm)
        execution_unit = None
        if self.backend is not None:
            execution_unit = self.backend.create_execution_unit(definition)

        link = self._chain.append(producer=ref, output_name=output_name, declared_input=source, advance=advance)
        action = PlannedAction(
            task_id=producer.task_id,
            kind=producer.kind,
            stage=stage.name,
            run_order=run_order,
            input_artifact=link.input,
            output_artifact=link.output,
            advances_chain=advance,
            definition=definition,
            execution_unit=execution_unit,
            alarm=alarm,
        )
        self._commit(stage, action)

        if link.advanced:
            add_event(self.manifest, event_type="chain_advanced", stage=stage.name, task_id=action.task_id,
                      payload={"artifact": link.output.name})
        self._check_input_ordering(action)
        return action

    def _add_source_stage(self, source: Artifact) -> None:
        stage = self._composer.resolve(name=SOURCE_STAGE, kind=StageKind.SOURCE, task_id=SOURCE_ACTION)
        action = PlannedAction(
            task_id=SOURCE_ACTION,
            kind=TaskKind.SOURCE,
            stage=SOURCE_STAGE,
            run_order=1,
            input_artifact=None,
            output_artifact=source,
            advances_chain=True,
        )
        self._commit(stage, action)

    def _commit(self, stage: Stage, action: PlannedAction) -> None:
        if self._composer.commit(stage):
            add_event(self.manifest, event_type="stage_created", stage=stage.name,
                      payload={"kind": stage.kind.value, "position": len(self._composer.stages)})
        stage.add(action)
        self._producers[action.output_artifact.name] = action
        add_event(
            self.manifest,
            event_type="task_registered",
            stage=stage.name,
            task_id=action.task_id,
            payload={
                "kind": action.kind.value,
                "run_order": action.run_order,
                "input_artifact": action.input_artifact.name if action.input_artifact else None,
                "output_artifact": action.output_artifact.name,
            },
        )

    def _check_input_ordering(self, action: PlannedAction) -> None:
        if action.input_artifact is None:
            return
        upstream = self._producers.get(action.input_artifact.name)
        if upstream is None or upstream.stage != action.stage:
            return
        if upstream.run_order >= action.run_order:
            add_warning(
                self.manifest,
                stage=action.stage,
                task_id=action.task_id,
                message=(
                    f"consumes '{action.input_artifact.name}' produced by '{upstream.task_id}' "
                    f"in wave {upstream.run_order}, not before its own wave {action.run_order}"
                ),
            )

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------
    def to_manifest(self) -> PlanManifest:
        """Snapshot serializável do plano (estágios, ondas, artefatos e Event Log)."""
        snapshot = PlanManifest.from_dict(self.manifest.to_dict())
        snapshot.pipeline.update(
            {
                "concurrency": self.settings.concurrency,
                "auto_build": self.settings.auto_build,
                "current_artifact": self.current_artifact.name,
            }
        )
        snapshot.stages = [stage.to_dict() for stage in self._composer.stages]
        return snapshot
