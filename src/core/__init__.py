"""
Core Domain Layer - O Hexágono.

Este pacote contém a lógica de negócio pura do bot de suporte,
sem dependências de frameworks:
- tickets: ciclo de vida do ticket e abertura via cartão
- roster: lista de especialistas de plantão
- messaging: roteamento de atividades e ports de entrega

Características:
- Zero dependências externas (Django, etc.)
- 100% testável sem banco de dados
- Agnóstico a infraestrutura
"""
