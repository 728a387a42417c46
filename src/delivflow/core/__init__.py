"""
Core do DelivFlow.

Este pacote reúne a implementação canônica do planejamento de pipelines,
independente de provedores de nuvem, CLIs ou executores.

O core é projetado para ser:
    - determinístico
    - síncrono (nenhuma suspensão durante a construção do plano)
    - testável de forma isolada
    - orientado a erros explícitos no ponto de configuração

Componentes principais:
    - config       → resolução de configuração e settings do pipeline
    - plan         → run order, cadeia de artefatos, estágios e produtores de tarefa
    - shell        → materialização segura de tarefas executáveis
    - pipeline     → fachada de registro (Pipeline Assembler)
    - traceability → Manifest do plano e Event Log

Limites explícitos:
    - Não executa scripts nem chama provedores de credenciais
    - Não persiste nada implicitamente
    - Não depende de UI, CLI ou serviços externos
"""
