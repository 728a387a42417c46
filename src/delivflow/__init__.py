# src/delivflow/__init__.py
"""
DelivFlow — planejamento determinístico de pipelines de entrega contínua.

Este pacote raiz define o namespace público do DelivFlow, uma biblioteca
que constrói o *plano* de um pipeline de CD (Source → Build → Test → Publish)
a partir de tarefas registradas explicitamente.

Princípios centrais:
    - O plano é construído de forma síncrona e determinística
    - Cada tarefa recebe uma onda (run order) dentro do seu estágio
    - Artefatos são encadeados explicitamente entre tarefas
    - Erros de configuração são detectados no registro, nunca na execução

Arquitetura em alto nível:
    - core.config       → carregamento, merge, hashing e settings do pipeline
    - core.plan         → run order, cadeia de artefatos e composição de estágios
    - core.shell        → wrapper seguro de execução (credenciais, plataforma, alarme)
    - core.pipeline     → fachada `Pipeline` (add_build, add_test, add_publish, ...)
    - core.traceability → Manifest do plano e Event Log de registro

Limites explícitos:
    - Não executa tarefas (a execução é delegada a um executor externo)
    - Não gera descritores específicos de provedor de nuvem
    - Não faz polling de repositórios
"""

__version__ = "0.1.0"

from .core.pipeline import ActionHandle, Pipeline
from .core.plan.producers import BuildTask, GenericShellTask, PublishTask, TestTask
from .core.plan.types import AlarmOptions, Artifact, AssumeRole, ShellPlatform, SourceRepository
from .core.shell.shellable import ShellableOptions

__all__ = [
    "__version__",
    "ActionHandle",
    "AlarmOptions",
    "Artifact",
    "AssumeRole",
    "BuildTask",
    "GenericShellTask",
    "Pipeline",
    "PublishTask",
    "ShellPlatform",
    "ShellableOptions",
    "SourceRepository",
    "TestTask",
]
