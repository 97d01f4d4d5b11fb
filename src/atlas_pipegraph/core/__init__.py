"""
Core do Atlas PipeGraph.

Este pacote reúne as responsabilidades independentes de formato:

    - config → resolução de configuração (merge, validação estrutural, hashing)
    - graph  → modelo canônico de grafo e store observável de status
    - engine → planejamento (Kahn) e simulação cancelável

Princípios fundamentais:
    - Nenhuma decisão silenciosa além das documentadas (arestas pendentes,
      nós em ciclo): todo comportamento é explícito e testado
    - Nenhuma condição deste core é fatal para o processo hospedeiro

Limites explícitos:
    - Não interpreta arquivos de pipeline (ver `atlas_pipegraph.parsers`)
    - Não renderiza grafos
"""
