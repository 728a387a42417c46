# src/delivflow/core/shell/credentials.py
"""
Contrato de troca de credenciais temporárias (assume role).

O core não chama o provedor de credenciais: apenas emite os comandos
que o executor roda antes do script do usuário. As credenciais de curta
duração são exportadas para o ambiente da tarefa.
"""

from __future__ import annotations

from typing import List

from delivflow.core.plan.types import AssumeRole


CREDS_FILE_COMMAND = "creds=$(mktemp -d)/creds.json"

_EXPORTED_CREDENTIALS = (
    ("AWS_ACCESS_KEY_ID", "AccessKeyId"),
    ("AWS_SECRET_ACCESS_KEY", "SecretAccessKey"),
    ("AWS_SESSION_TOKEN", "SessionToken"),
)


def assume_role_command(assume_role: AssumeRole) -> str:
    external_id = f'--external-id "{assume_role.external_id}"' if assume_role.external_id else ""
    return (
        f'aws sts assume-role --role-arn "{assume_role.role_arn}" '
        f'--role-session-name "{assume_role.session_name}" {external_id} > $creds'
    )


def assume_role_commands(assume_role: AssumeRole) -> List[str]:
    """Comandos de pre-build que trocam a identidade e exportam as credenciais."""
    commands = [CREDS_FILE_COMMAND, assume_role_command(assume_role)]
    for env_var, json_key in _EXPORTED_CREDENTIALS:
        commands.append(f'export {env_var}="$(cat $creds | grep "{json_key}" | cut -d\'"\' -f 4)"')
    return commands
