# src/delivflow/core/shell/shellable.py
"""
Wrapper seguro de execução (Secure Execution Wrapper).

Dada a especificação de uma tarefa (`ShellableOptions`), este módulo
produz uma `RunnableDefinition` completa: linha de comando de invocação
do script, ambiente, troca opcional de credenciais e alarme de saúde.

Fases emitidas (no formato de buildspec):
    - pre_build: troca de credenciais via assume role (quando presente)
    - build:     invocação do entrypoint pela família de shell da plataforma

Decisões arquiteturais:
    - Assume role em Windows é rejeitado na materialização, ou seja, no
      registro da tarefa, antes de qualquer backend ser chamado
    - Privileged mode é propagado sem lógica adicional
    - Nenhum retry é configurado nesta camada (responsabilidade do executor)
    - Overrides parciais de alarme preservam os defaults dos demais campos

Limites explícitos:
    - Não executa o script
    - Não chama o provedor de credenciais
    - Não cria recursos (ver `core.backend`)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from delivflow.core.errors import invalid_configuration, unsupported_platform
from delivflow.core.plan.types import (
    AlarmOptions,
    AssumeRole,
    AutoBuildTrigger,
    ShellPlatform,
    require_non_empty_str,
)

from .alarm import AlarmDefinition, alarm_for
from .credentials import assume_role_commands
from .platform import profile_for


SCRIPT_DIR_ENV = "SCRIPT_DIR"


@dataclass(frozen=True)
class ShellableOptions:
    """
    Especificação de uma tarefa executável por shell.

    Campos `None` são resolvidos a partir dos settings do pipeline
    (plataforma padrão, privileged padrão e defaults de alarme).
    """
    script_directory: str
    entrypoint: str
    platform: Optional[Union[ShellPlatform, str]] = None
    environment: Mapping[str, str] = field(default_factory=dict)
    privileged: Optional[bool] = None
    assume_role: Optional[AssumeRole] = None
    alarm_evaluation_periods: Optional[int] = None
    alarm_threshold: Optional[int] = None
    alarm_period_sec: Optional[int] = None
    build_image: Optional[str] = None


@dataclass(frozen=True)
class RunnableDefinition:
    """Definição executável entregue ao Resource Backend."""
    task_id: str
    platform: ShellPlatform
    image: str
    shell: str
    script_directory: str
    entrypoint: str
    environment: Dict[str, str]
    privileged: bool
    phases: Dict[str, List[str]]
    alarm: AlarmDefinition
    assume_role: Optional[AssumeRole] = None
    trigger: Optional[AutoBuildTrigger] = None
    build_spec: Optional[str] = None

    @property
    def commands(self) -> List[str]:
        out: List[str] = []
        for phase in ("pre_build", "build"):
            out.extend(self.phases.get(phase, []))
        return out

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "task_id": self.task_id,
            "platform": self.platform.value,
            "image": self.image,
            "shell": self.shell,
            "script_directory": self.script_directory,
            "entrypoint": self.entrypoint,
            "environment": dict(self.environment),
            "privileged": self.privileged,
            "phases": {k: list(v) for k, v in self.phases.items()},
            "alarm": self.alarm.to_dict(),
            "assume_role": None,
            "trigger": None,
            "build_spec": self.build_spec,
        }
        if self.assume_role is not None:
            data["assume_role"] = {
                "role_arn": self.assume_role.role_arn,
                "session_name": self.assume_role.session_name,
                "external_id": self.assume_role.external_id,
            }
        if self.trigger is not None:
            data["trigger"] = {
                "webhook": self.trigger.webhook,
                "filter_pattern": self.trigger.filter_pattern,
                "public_logs": self.trigger.public_logs,
            }
        return data


def _validate_environment(environment: Any) -> Dict[str, str]:
    if not isinstance(environment, Mapping):
        raise invalid_configuration(field_name="environment", value=environment, expected="a mapping of str to str")
    env: Dict[str, str] = {}
    for key, value in environment.items():
        if not isinstance(key, str) or not key or not isinstance(value, str):
            raise invalid_configuration(
                field_name=f"environment[{key!r}]",
                value=value,
                expected="non-empty str keys and str values",
            )
        if key == SCRIPT_DIR_ENV:
            raise invalid_configuration(
                field_name=f"environment[{key!r}]",
                value=value,
                expected="no override of the reserved SCRIPT_DIR variable (set script_directory instead)",
            )
        env[key] = value
    return env


def materialize_shellable(
    task_id: str,
    options: ShellableOptions,
    *,
    default_platform: ShellPlatform = ShellPlatform.LINUX_UBUNTU,
    default_privileged: bool = False,
    alarm_defaults: Optional[AlarmOptions] = None,
    trigger: Optional[AutoBuildTrigger] = None,
) -> RunnableDefinition:
    """
    Materializa uma tarefa em uma definição executável.

    Args:
        task_id: identificador da tarefa (usado no alarme e na métrica).
        options: especificação da tarefa.
        default_platform: plataforma quando `options.platform` é None.
        default_privileged: privileged mode quando `options.privileged` é None.
        alarm_defaults: defaults de alarme do pipeline (padrão 1/1/300).
        trigger: gatilho automático (apenas para o build primário).

    Returns:
        RunnableDefinition: definição completa, imutável.

    Raises:
        InvalidConfiguration: campos obrigatórios ausentes ou valores inválidos.
        UnsupportedPlatform: assume role solicitado em plataforma Windows.
    """
    if not isinstance(options, ShellableOptions):
        raise invalid_configuration(field_name="options", value=options, expected="ShellableOptions")

    require_non_empty_str("task_id", task_id)
    require_non_empty_str("script_directory", options.script_directory)
    require_non_empty_str("entrypoint", options.entrypoint)
    environment = _validate_environment(options.environment)

    platform = ShellPlatform.parse(options.platform if options.platform is not None else default_platform)
    profile = profile_for(platform)

    if options.assume_role is not None:
        if not isinstance(options.assume_role, AssumeRole):
            raise invalid_configuration(field_name="assume_role", value=options.assume_role, expected="AssumeRole")
        if not profile.supports_assume_role:
            raise unsupported_platform(feature="assume_role", platform="Windows", task_id=task_id)

    privileged = default_privileged if options.privileged is None else options.privileged
    if not isinstance(privileged, bool):
        raise invalid_configuration(field_name="privileged", value=privileged, expected="a boolean")

    alarm_options = (alarm_defaults or AlarmOptions()).with_overrides(
        evaluation_periods=options.alarm_evaluation_periods,
        threshold=options.alarm_threshold,
        period_sec=options.alarm_period_sec,
    )

    image = options.build_image if options.build_image is not None else profile.image
    require_non_empty_str("build_image", image)

    phases: Dict[str, List[str]] = {}
    if options.assume_role is not None:
        phases["pre_build"] = assume_role_commands(options.assume_role)
    phases["build"] = profile.run_commands(options.entrypoint)

    return RunnableDefinition(
        task_id=task_id,
        platform=platform,
        image=image,
        shell=profile.shell,
        script_directory=options.script_directory,
        entrypoint=options.entrypoint,
        environment={SCRIPT_DIR_ENV: options.script_directory, **environment},
        privileged=privileged,
        phases=phases,
        alarm=alarm_for(task_id, alarm_options),
        assume_role=options.assume_role,
        trigger=trigger,
        build_spec=trigger.build_spec if trigger is not None else None,
    )
