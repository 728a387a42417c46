# src/delivflow/core/config/settings.py
"""
Settings do pipeline resolvidos a partir da configuração.

Este módulo converte a configuração efetiva (dict) em `PipelineSettings`
validados. Os defaults embutidos (`DEFAULT_SETTINGS`) são sempre a base;
a configuração do usuário é aplicada por deep-merge.

Estrutura esperada (YAML):

    pipeline:
      name: my-pipeline
      concurrency: 4            # inteiro positivo, null ou "unlimited"
      auto_build: true
      auto_build_options:
        public_logs: false
        build_spec: buildspec.yaml
    shell:
      platform: linux_ubuntu
      privileged: false
      alarm:
        evaluation_periods: 1
        threshold: 1
        period_sec: 300

Valores semanticamente inválidos levantam `InvalidConfiguration` no
momento da resolução, nunca depois.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from delivflow.core.errors import invalid_configuration
from delivflow.core.plan.run_order import normalize_concurrency
from delivflow.core.plan.types import AlarmOptions, AutoBuildTrigger, ShellPlatform

from .hashing import compute_config_hash
from .loader import PathLike, find_config_files, load_config
from .merge import deep_merge


DEFAULT_SETTINGS: Dict[str, Any] = {
    "pipeline": {
        "auto_build": False,
        "auto_build_options": {
            "public_logs": False,
        },
    },
    "shell": {
        "platform": ShellPlatform.LINUX_UBUNTU.value,
        "privileged": False,
        "alarm": {
            "evaluation_periods": 1,
            "threshold": 1,
            "period_sec": 300,
        },
    },
}


@dataclass(frozen=True)
class PipelineSettings:
    """
    Settings validados de um pipeline.

    `concurrency=None` significa ilimitado (todas as tarefas de um estágio
    na onda 1). A validação ocorre na construção, inclusive quando a
    instância é criada diretamente em código.
    """
    name: Optional[str] = None
    concurrency: Optional[int] = None
    auto_build: bool = False
    public_logs: bool = False
    auto_build_spec: Optional[str] = None
    default_platform: ShellPlatform = ShellPlatform.LINUX_UBUNTU
    privileged: bool = False
    alarm: AlarmOptions = field(default_factory=AlarmOptions)
    config_hash: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "concurrency", normalize_concurrency(self.concurrency))
        object.__setattr__(self, "default_platform", ShellPlatform.parse(self.default_platform))
        if self.name is not None and (not isinstance(self.name, str) or not self.name.strip()):
            raise invalid_configuration(field_name="pipeline.name", value=self.name, expected="a non-empty string")
        for flag in ("auto_build", "public_logs", "privileged"):
            if not isinstance(getattr(self, flag), bool):
                raise invalid_configuration(field_name=flag, value=getattr(self, flag), expected="a boolean")
        if not isinstance(self.alarm, AlarmOptions):
            raise invalid_configuration(field_name="alarm", value=self.alarm, expected="AlarmOptions")

    @property
    def pipeline_name(self) -> str:
        return self.name or "Pipeline"

    def auto_build_trigger(self) -> Optional[AutoBuildTrigger]:
        if not self.auto_build:
            return None
        return AutoBuildTrigger(public_logs=self.public_logs, build_spec=self.auto_build_spec)


def _section(config: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = config.get(key) or {}
    if not isinstance(value, dict):
        raise invalid_configuration(field_name=key, value=value, expected="a mapping")
    return value


def resolve_settings(config: Optional[Dict[str, Any]] = None) -> PipelineSettings:
    """
    Resolve `PipelineSettings` a partir de um dict de configuração.

    Raises:
        ConfigTypeConflictError: conflito estrutural com os defaults.
        InvalidConfiguration: valores semanticamente inválidos.
    """
    effective = deep_merge(DEFAULT_SETTINGS, config or {})

    pipeline_cfg = _section(effective, "pipeline")
    shell_cfg = _section(effective, "shell")
    auto_cfg = _section(pipeline_cfg, "auto_build_options")
    alarm_cfg = _section(shell_cfg, "alarm")

    return PipelineSettings(
        name=pipeline_cfg.get("name"),
        concurrency=pipeline_cfg.get("concurrency"),
        auto_build=pipeline_cfg.get("auto_build", False),
        public_logs=auto_cfg.get("public_logs", False),
        auto_build_spec=auto_cfg.get("build_spec"),
        default_platform=shell_cfg.get("platform", ShellPlatform.LINUX_UBUNTU),
        privileged=shell_cfg.get("privileged", False),
        alarm=AlarmOptions(
            evaluation_periods=alarm_cfg.get("evaluation_periods", 1),
            threshold=alarm_cfg.get("threshold", 1),
            period_sec=alarm_cfg.get("period_sec", 300),
        ),
        config_hash=compute_config_hash(effective),
    )


def load_settings(
    *,
    defaults_path: PathLike,
    local_path: Optional[PathLike] = None,
) -> PipelineSettings:
    """Carrega arquivos de configuração (YAML/JSON) e resolve os settings."""
    return resolve_settings(load_config(defaults_path=defaults_path, local_path=local_path))


def load_settings_from_directory(directory: PathLike) -> PipelineSettings:
    """Resolve os settings a partir de `pipeline.defaults.*` e `pipeline.local.*` do diretório."""
    defaults_path, local_path = find_config_files(directory)
    return load_settings(defaults_path=defaults_path, local_path=local_path)
