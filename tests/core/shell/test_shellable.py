# tests/core/shell/test_shellable.py
"""
Testes do wrapper seguro de execução (materialize_shellable).

Este módulo valida a materialização de uma tarefa de shell em uma
`RunnableDefinition` completa, cobrindo:
- comandos de assume role emitidos na fase pre_build (texto exato)
- rejeição de assume role em Windows no momento do registro
- defaults e overrides parciais de alarme
- propagação de privileged mode e de variáveis de ambiente
- despacho de plataforma (bash vs PowerShell, imagem)

Decisões arquiteturais:
    - O texto dos comandos faz parte do contrato com o executor
    - Overrides parciais de alarme preservam os demais defaults

Limites explícitos:
    - Não executa scripts
    - Não chama provedor de credenciais
"""

import pytest

try:
    from delivflow.core.exceptions import InvalidConfiguration, UnsupportedPlatform
    from delivflow.core.plan.types import AlarmOptions, AssumeRole, AutoBuildTrigger, ShellPlatform
    from delivflow.core.shell.shellable import SCRIPT_DIR_ENV, materialize_shellable
except Exception as e:  # noqa: BLE001
    materialize_shellable = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    """Falha explicitamente quando o wrapper de execução não pode ser importado."""
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing shell wrapper. Implement:\n"
            "- src/delivflow/core/shell/shellable.py (materialize_shellable)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_assume_role_commands_without_external_id(shell_options):
    """
    Verifica o texto exato dos comandos de troca de credenciais.

    Sem external id, o comando de assume role mantém dois espaços antes
    do redirecionamento para o arquivo de credenciais.
    """
    _require_imports()
    opts = shell_options(assume_role=AssumeRole(role_arn="arn:aws:iam::1:role/Deploy", session_name="deploy"))

    definition = materialize_shellable("Deploy", opts)
    pre = definition.phases["pre_build"]

    assert pre[0] == "creds=$(mktemp -d)/creds.json"
    assert pre[1] == (
        'aws sts assume-role --role-arn "arn:aws:iam::1:role/Deploy" '
        '--role-session-name "deploy"  > $creds'
    )
    assert pre[2] == 'export AWS_ACCESS_KEY_ID="$(cat $creds | grep "AccessKeyId" | cut -d\'"\' -f 4)"'
    assert pre[3] == 'export AWS_SECRET_ACCESS_KEY="$(cat $creds | grep "SecretAccessKey" | cut -d\'"\' -f 4)"'
    assert pre[4] == 'export AWS_SESSION_TOKEN="$(cat $creds | grep "SessionToken" | cut -d\'"\' -f 4)"'


def test_assume_role_with_external_id(shell_options):
    _require_imports()
    opts = shell_options(
        assume_role=AssumeRole(role_arn="arn:aws:iam::1:role/Deploy", session_name="deploy", external_id="ext-42")
    )

    definition = materialize_shellable("Deploy", opts)

    assert definition.phases["pre_build"][1] == (
        'aws sts assume-role --role-arn "arn:aws:iam::1:role/Deploy" '
        '--role-session-name "deploy" --external-id "ext-42" > $creds'
    )


def test_no_pre_build_phase_without_assume_role(shell_options):
    _require_imports()
    definition = materialize_shellable("Build", shell_options())

    assert "pre_build" not in definition.phases
    assert definition.commands == ['echo "Running run.sh"', '/bin/bash "$SCRIPT_DIR/run.sh"']


def test_windows_with_assume_role_is_rejected(shell_options):
    """
    Assume role em Windows é rejeitado durante a materialização.

    A mensagem faz parte do contrato observável pelo usuário.
    """
    _require_imports()
    opts = shell_options(
        platform=ShellPlatform.WINDOWS,
        assume_role=AssumeRole(role_arn="arn:aws:iam::1:role/Deploy", session_name="deploy"),
    )

    with pytest.raises(UnsupportedPlatform) as ei:
        materialize_shellable("Deploy", opts)

    assert str(ei.value) == "assume_role is not supported on Windows"
    assert ei.value.details["task_id"] == "Deploy"


def test_windows_dispatches_to_powershell(shell_options):
    _require_imports()
    definition = materialize_shellable("Build", shell_options(platform="windows", entrypoint="build.ps1"))

    assert definition.shell == "powershell"
    assert definition.image == "aws/codebuild/windows-base:1.0"
    assert definition.phases["build"][-1] == 'Powershell.exe -File "$env:SCRIPT_DIR\\build.ps1"'


def test_default_platform_comes_from_pipeline(shell_options):
    _require_imports()
    definition = materialize_shellable("Build", shell_options(), default_platform=ShellPlatform.LINUX_AMAZON)

    assert definition.platform is ShellPlatform.LINUX_AMAZON
    assert definition.image == "aws/codebuild/amazonlinux2-x86_64-standard:1.0"


def test_build_image_override(shell_options):
    _require_imports()
    definition = materialize_shellable("Build", shell_options(build_image="my/image:1"))
    assert definition.image == "my/image:1"


def test_alarm_defaults(shell_options):
    _require_imports()
    alarm = materialize_shellable("Unit", shell_options()).alarm

    assert alarm.alarm_id == "Unit-failures"
    assert (alarm.evaluation_periods, alarm.threshold, alarm.period_sec) == (1, 1, 300)


def test_alarm_partial_override_keeps_other_defaults(shell_options):
    _require_imports()
    alarm = materialize_shellable(
        "Unit",
        shell_options(alarm_threshold=5),
        alarm_defaults=AlarmOptions(evaluation_periods=2, threshold=1, period_sec=600),
    ).alarm

    assert (alarm.evaluation_periods, alarm.threshold, alarm.period_sec) == (2, 5, 600)


def test_alarm_rule_requires_consecutive_breaching_windows(shell_options):
    _require_imports()
    alarm = materialize_shellable(
        "Unit", shell_options(alarm_evaluation_periods=2, alarm_threshold=3)
    ).alarm

    assert alarm.breaches([3, 4]) is True
    assert alarm.breaches([5, 2]) is False
    assert alarm.breaches([9]) is False


@pytest.mark.parametrize("bad", [0, -3])
def test_invalid_alarm_values_are_rejected(shell_options, bad):
    _require_imports()
    with pytest.raises(InvalidConfiguration):
        materialize_shellable("Unit", shell_options(alarm_period_sec=bad))


def test_privileged_and_environment_are_propagated(shell_options):
    _require_imports()
    definition = materialize_shellable(
        "Docker",
        shell_options(privileged=True, environment={"STAGE": "prod"}),
    )

    assert definition.privileged is True
    assert definition.environment == {SCRIPT_DIR_ENV: "scripts", "STAGE": "prod"}


def test_missing_entrypoint_is_rejected(shell_options):
    _require_imports()
    with pytest.raises(InvalidConfiguration):
        materialize_shellable("Build", shell_options(entrypoint=""))


def test_trigger_carries_build_spec(shell_options):
    _require_imports()
    trigger = AutoBuildTrigger(public_logs=True, build_spec="buildspec.yaml")
    definition = materialize_shellable("Build", shell_options(), trigger=trigger)

    assert definition.build_spec == "buildspec.yaml"
    assert definition.to_dict()["trigger"] == {
        "webhook": True,
        "filter_pattern": "PUSH,PULL_REQUEST_CREATED,PULL_REQUEST_UPDATED",
        "public_logs": True,
    }


def test_environment_cannot_override_script_dir(shell_options):
    _require_imports()
    with pytest.raises(InvalidConfiguration):
        materialize_shellable("Unit", shell_options(environment={SCRIPT_DIR_ENV: "/elsewhere"}))
