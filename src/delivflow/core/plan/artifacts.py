# src/delivflow/core/plan/artifacts.py
"""
Construtor da cadeia de artefatos (Artifact Chain Builder).

Este módulo mantém o artefato primário "corrente" do plano enquanto as
tarefas são registradas, conectando a entrada de cada nova tarefa à
saída da tarefa anterior na cadeia primária.

Regras:
    - Entrada omitida → a tarefa consome o artefato primário corrente
    - Toda tarefa produz exatamente um artefato de saída, com nome
      determinístico derivado da sua identidade
    - O ponteiro corrente só avança para tarefas que avançam a cadeia
      (build, test e shell genérico por padrão); publish nunca avança
    - Publicadores em fan-out fixam a entrada explicitamente

Invariantes:
    - Existe exatamente um artefato corrente a qualquer momento
    - Nomes de artefato são únicos em todo o plano
    - Entradas declaradas precisam referenciar artefatos já produzidos
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from delivflow.core.config.hashing import short_identity_hash
from delivflow.core.errors import duplicate_artifact_name, invalid_configuration

from .types import Artifact


ArtifactRef = Union[Artifact, str]

_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


def artifact_name_for(*, pipeline: str, stage: str, task_id: str) -> str:
    """
    Nome determinístico do artefato de saída de uma tarefa.

    Formato: `Artifact_<Estágio><Tarefa><HASH8>`, onde o hash cobre
    (pipeline, estágio, tarefa). O mesmo plano reconstruído gera os
    mesmos nomes.
    """
    stem = _NON_ALNUM.sub("", f"{stage}{task_id}")
    suffix = short_identity_hash({"pipeline": pipeline, "stage": stage, "task": task_id})
    return f"Artifact_{stem}{suffix}"


@dataclass(frozen=True)
class ChainLink:
    """Resultado de um append: artefato consumido, produzido e se o ponteiro avançou."""
    input: Artifact
    output: Artifact
    advanced: bool


@dataclass
class ArtifactChain:
    """
    Rastreia o artefato primário corrente e o conjunto de artefatos do plano.

    O chamador (Pipeline) é o único mutador; o uso é síncrono.
    """

    initial: Artifact
    _artifacts: Dict[str, Artifact] = field(default_factory=dict, init=False, repr=False)
    _current: Artifact = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._artifacts[self.initial.name] = self.initial
        self._current = self.initial

    @property
    def current(self) -> Artifact:
        return self._current

    def has(self, name: str) -> bool:
        return name in self._artifacts

    def get(self, name: str) -> Artifact:
        return self._artifacts[name]

    def list(self) -> List[Artifact]:
        return list(self._artifacts.values())

    def resolve_input(self, declared: Optional[ArtifactRef] = None) -> Artifact:
        if declared is None:
            return self.current
        name = declared.name if isinstance(declared, Artifact) else declared
        if not isinstance(name, str) or name not in self._artifacts:
            raise invalid_configuration(
                field_name="input_artifact",
                value=declared,
                expected="an artifact already produced in this plan",
            )
        return self._artifacts[name]

    def ensure_available(self, name: str, *, producer: Optional[str] = None) -> None:
        if name in self._artifacts:
            raise duplicate_artifact_name(artifact=name, producer=producer)

    def append(
        self,
        *,
        producer: str,
        output_name: str,
        declared_input: Optional[ArtifactRef] = None,
        advance: bool = True,
    ) -> ChainLink:
        """
        Conecta uma nova tarefa à cadeia.

        Raises:
            InvalidConfiguration: se `declared_input` não for um artefato conhecido.
            DuplicateArtifactName: se `output_name` já existir no plano.
        """
        source = self.resolve_input(declared_input)
        self.ensure_available(output_name, producer=producer)

        output = Artifact(name=output_name, producer=producer)
        self._artifacts[output_name] = output
        if advance:
            self._current = output

        return ChainLink(input=source, output=output, advanced=advance)
