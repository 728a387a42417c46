# tests/conftest.py
"""
Fixtures compartilhados para testes do DelivFlow.

Este módulo define fixtures reutilizáveis que fornecem:
- repositório de origem e opções de shell mínimas e determinísticas
- YAMLs de configuração semelhantes ao uso real do projeto
- backends falsos que registram as chamadas recebidas

O objetivo destas fixtures é permitir testes do core
(config, plan, shell, pipeline e traceability) sem depender de:
- provedor de nuvem real
- variáveis de ambiente
- execução de scripts

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Backends falsos utilizam duck typing em vez de herança
    - Imports do core são realizados de forma lazy para
      melhorar a clareza de erros durante falhas

Invariantes:
    - Nenhuma fixture executa pipeline real
    - Nenhuma fixture realiza I/O
    - Todas as fixtures são seguras para execução em paralelo

Limites explícitos:
    - Não substituir testes de integração com provedores reais
    - Não conter lógica de domínio
"""

import pytest


# =====================================================
# Config fixtures
# =====================================================

@pytest.fixture
def project_like_config_defaults_yaml() -> str:
    """
    YAML de configuração padrão (defaults) semelhante ao uso real do projeto.

    Representa o conteúdo típico de `config/pipeline.defaults.yaml`,
    base canônica sobre a qual a configuração local é aplicada via deep-merge.

    Returns:
        str: Conteúdo YAML de defaults.
    """
    return """\
pipeline:
  name: shop-delivery
  concurrency: unlimited
  auto_build: false
shell:
  platform: linux_ubuntu
  privileged: false
  alarm:
    evaluation_periods: 1
    threshold: 1
    period_sec: 300
"""


@pytest.fixture
def project_like_config_local_yaml() -> str:
    """
    YAML de configuração local (override) semelhante ao uso real do projeto.

    Contém apenas overrides: concorrência limitada, auto build ligado
    e um threshold de alarme diferente.

    Returns:
        str: Conteúdo YAML de overrides locais.
    """
    return """\
pipeline:
  concurrency: 2
  auto_build: true
  auto_build_options:
    public_logs: true
shell:
  alarm:
    threshold: 3
"""


# =====================================================
# Plan fixtures
# =====================================================

@pytest.fixture
def repo():
    """Repositório de origem determinístico."""
    from delivflow.core.plan.types import SourceRepository

    return SourceRepository(name="shop-service", branch="main")


@pytest.fixture
def shell_options():
    """
    Fixture factory de `ShellableOptions`.

    Retorna uma função (não uma instância) para que cada teste possa
    sobrescrever apenas os campos relevantes ao cenário.

    Invariantes:
        - Sem overrides, produz uma tarefa Linux válida, sem assume role
        - `script_directory` e `entrypoint` sempre preenchidos

    Returns:
        Callable[..., ShellableOptions]: construtor com defaults de teste.
    """
    from delivflow.core.shell.shellable import ShellableOptions

    def _make(**overrides):
        params = {"script_directory": "scripts", "entrypoint": "run.sh"}
        params.update(overrides)
        return ShellableOptions(**params)

    return _make


@pytest.fixture
def RecordingBackend():
    """
    Fixture factory de um Resource Backend falso.

    A classe retornada registra cada `RunnableDefinition` recebida e
    devolve um handle opaco previsível (`unit-<n>`).

    Decisões arquiteturais:
        - Implementa o protocolo por duck typing, sem herança
        - Não valida a definição recebida (o core já o fez)

    Usado por:
        - Testes de pipeline que verificam que backends só recebem
          definições válidas

    Returns:
        type: Classe _RecordingBackend.
    """

    class _RecordingBackend:
        def __init__(self):
            self.definitions = []

        def create_execution_unit(self, definition):
            self.definitions.append(definition)
            return f"unit-{len(self.definitions)}"

    return _RecordingBackend


@pytest.fixture
def RecordingAlarmBackend():
    """Fixture factory de um Alarm Backend falso que registra os alarmes recebidos."""

    class _RecordingAlarmBackend:
        def __init__(self):
            self.alarms = []

        def create_alarm(self, alarm):
            self.alarms.append(alarm)
            return f"alarm-{alarm.alarm_id}"

    return _RecordingAlarmBackend
