# tests/test_smoke.py
"""
Testes de sanidade estrutural (smoke tests) do Atlas PipeGraph.

Estes testes garantem apenas que o ambiente de testes está funcional e que
o namespace público do pacote pode ser importado sem falhas estruturais.

Limites explícitos:
    - Não testar lógica de parsing ou simulação
    - Não acumular asserts funcionais
"""


def test_smoke():
    """Sentinela mínima: o pytest descobre e executa testes."""
    assert True


def test_public_namespace_imports():
    import atlas_pipegraph

    for name in atlas_pipegraph.__all__:
        assert hasattr(atlas_pipegraph, name)
