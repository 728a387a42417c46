# src/delivflow/core/shell/platform.py
"""
Despacho de plataforma do wrapper de execução.

A plataforma escolhe a imagem de execução e a família de shell, o que
muda apenas a forma de invocar o entrypoint (bash vs PowerShell).
A semântica de agendamento é a mesma para todas as plataformas.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from delivflow.core.plan.types import ShellPlatform


@dataclass(frozen=True)
class PlatformProfile:
    platform: ShellPlatform
    image: str
    shell: str
    supports_assume_role: bool

    def run_commands(self, entrypoint: str) -> List[str]:
        if self.shell == "powershell":
            return [
                f'Write-Output "Running {entrypoint}"',
                f'Powershell.exe -File "$env:SCRIPT_DIR\\{entrypoint}"',
            ]
        return [
            f'echo "Running {entrypoint}"',
            f'/bin/bash "$SCRIPT_DIR/{entrypoint}"',
        ]


_PROFILES: Dict[ShellPlatform, PlatformProfile] = {
    ShellPlatform.LINUX_UBUNTU: PlatformProfile(
        platform=ShellPlatform.LINUX_UBUNTU,
        image="aws/codebuild/ubuntu-base:14.04",
        shell="bash",
        supports_assume_role=True,
    ),
    ShellPlatform.LINUX_AMAZON: PlatformProfile(
        platform=ShellPlatform.LINUX_AMAZON,
        image="aws/codebuild/amazonlinux2-x86_64-standard:1.0",
        shell="bash",
        supports_assume_role=True,
    ),
    ShellPlatform.WINDOWS: PlatformProfile(
        platform=ShellPlatform.WINDOWS,
        image="aws/codebuild/windows-base:1.0",
        shell="powershell",
        supports_assume_role=False,
    ),
}


def profile_for(platform: ShellPlatform) -> PlatformProfile:
    return _PROFILES[ShellPlatform.parse(platform)]
