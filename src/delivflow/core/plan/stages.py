# src/delivflow/core/plan/stages.py
"""
Compositor de estágios (Stage Composer).

Mantém a lista ordenada de estágios nomeados do plano e, para cada
estágio, a lista ordenada de ações com suas ondas.

Ordem fixa e total:
    Source → Build → Test* → Publish

Regras:
    - Um estágio é criado no primeiro uso, respeitando a ordem fixa
    - Uma tarefa só pode ser adicionada ao último estágio do plano; um
      estágio sucedido por outro posterior não aceita novas tarefas
    - A onda de uma tarefa é calculada a partir da contagem atual de
      tarefas do estágio e da concorrência do plano

A resolução (`resolve`) não muta o compositor: o estágio novo só entra
no plano em `commit`, depois que todas as validações do registro passaram.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from delivflow.core.errors import invalid_configuration, stage_superseded

from .registry import TaskRegistry
from .run_order import determine_run_order
from .types import Artifact, StageKind, TaskKind

if TYPE_CHECKING:  # pragma: no cover
    from delivflow.core.shell.shellable import RunnableDefinition


@dataclass(frozen=True)
class PlannedAction:
    """
    Ação materializada no plano (também é o handle devolvido ao chamador).

    `output_artifact` permite fixar a entrada de consumidores posteriores
    (fan-out de publicadores).
    """
    task_id: str
    kind: TaskKind
    stage: str
    run_order: int
    input_artifact: Optional[Artifact]
    output_artifact: Artifact
    advances_chain: bool
    definition: Optional["RunnableDefinition"] = None
    execution_unit: Any = None
    alarm: Any = None

    @property
    def ref(self) -> str:
        return f"{self.stage}/{self.task_id}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task_id": self.task_id,
            "kind": self.kind.value,
            "stage": self.stage,
            "run_order": self.run_order,
            "input_artifact": self.input_artifact.name if self.input_artifact else None,
            "output_artifact": self.output_artifact.name,
            "advances_chain": self.advances_chain,
            "definition": self.definition.to_dict() if self.definition is not None else None,
        }


@dataclass
class Stage:
    name: str
    kind: StageKind
    registry: TaskRegistry = field(init=False)

    def __post_init__(self) -> None:
        self.registry = TaskRegistry(stage=self.name)

    @property
    def actions(self) -> List[PlannedAction]:
        return self.registry.list()

    def add(self, action: PlannedAction) -> None:
        self.registry.add(action.task_id, action)

    def waves(self) -> Dict[int, List[str]]:
        out: Dict[int, List[str]] = {}
        for action in self.actions:
            out.setdefault(action.run_order, []).append(action.task_id)
        return out

    def __len__(self) -> int:
        return len(self.registry)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind.value,
            "actions": [a.to_dict() for a in self.actions],
        }


@dataclass
class StageComposer:
    """Lista ordenada de estágios; o Pipeline é o único mutador."""

    _stages: List[Stage] = field(default_factory=list, init=False, repr=False)

    @property
    def stages(self) -> List[Stage]:
        return list(self._stages)

    def get(self, name: str) -> Optional[Stage]:
        for stage in self._stages:
            if stage.name == name:
                return stage
        return None

    @property
    def last(self) -> Optional[Stage]:
        return self._stages[-1] if self._stages else None

    def resolve(self, *, name: str, kind: StageKind, task_id: str) -> Stage:
        """
        Retorna o estágio existente ou um novo estágio ainda não confirmado.

        Raises:
            InvalidConfiguration: nome de estágio já usado com outra categoria.
            StageSuperseded: o estágio (ou sua posição na ordem) já foi ultrapassado.
        """
        existing = self.get(name)
        last = self.last

        if existing is not None:
            if existing.kind is not kind:
                raise invalid_configuration(
                    field_name="stage",
                    value=name,
                    expected=f"a {kind.value} stage (existing stage is {existing.kind.value})",
                )
            if last is not existing:
                raise stage_superseded(stage=name, last_stage=last.name, task_id=task_id)
            return existing

        if last is not None and last.kind.rank > kind.rank:
            raise stage_superseded(stage=name, last_stage=last.name, task_id=task_id)

        return Stage(name=name, kind=kind)

    def commit(self, stage: Stage) -> bool:
        """Confirma um estágio novo no plano; devolve True se foi criado agora."""
        if any(s is stage for s in self._stages):
            return False
        self._stages.append(stage)
        return True

    def next_run_order(self, stage: Stage, concurrency: Optional[int]) -> int:
        return determine_run_order(len(stage), concurrency)
