# conftest.py (na raiz do projeto)

import logging
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from promocoes.services.regras import CondicaoVenda, Promocao
from vendas.services.carrinho.carrinho_sessao import CarrinhoSessao
from vendas.services.carrinho.dto import EscopoComercial, LinhaCarrinho, ProdutoPreco


logger = logging.getLogger(__name__)

ACORDO_PADRAO = "acordo-001"


# =============================================================================
# FACTORIES - PRODUTOS, LINHAS, REGRAS E ESCOPO
# =============================================================================

@pytest.fixture
def produto_factory():
    """
    Retorna uma função que cria ProdutoPreco com valores padrão.

    Uso:
        produto = produto_factory("A", preco="1000")
        produto = produto_factory("B", preco="10", preco_volume="8", categoria="Vinhos")
    """

    def _build(id="A", preco="100", nome=None, categoria="Geral", preco_volume=None):
        return ProdutoPreco(
            id=id,
            nome=nome or f"Produto {id}",
            categoria=categoria,
            preco=Decimal(str(preco)),
            preco_volume=Decimal(str(preco_volume)) if preco_volume is not None else None,
        )

    return _build


@pytest.fixture
def linha_factory(produto_factory):
    def _build(id="A", quantidade=1, **kwargs):
        return LinhaCarrinho(produto=produto_factory(id, **kwargs), quantidade=quantidade)

    return _build


@pytest.fixture
def promocao_factory():
    """
    Cria Promocao a partir do JSON ``rules`` (mesmo formato do backend).

    Uso:
        promocao_factory({"type": "min_amount_discount", "min_amount": 5000, "percentage": 10})
    """
    contador = {"n": 0}

    def _build(rules, id=None, nome=None):
        contador["n"] += 1
        id = id or f"promo-{contador['n']}"
        return Promocao.de_payload(
            {"id": id, "name": nome or f"Promoção {id}", "description": None, "rules": rules}
        )

    return _build


@pytest.fixture
def condicao_factory():
    contador = {"n": 0}

    def _build(rules, id=None, nome=None):
        contador["n"] += 1
        id = id or f"cond-{contador['n']}"
        return CondicaoVenda.de_payload(
            {"id": id, "name": nome or f"Condição {id}", "description": None, "rules": rules}
        )

    return _build


@pytest.fixture
def escopo_factory():
    def _build(
        acordo_id=ACORDO_PADRAO,
        precos_incluem_iva=False,
        percentual_iva="21",
        promocoes=(),
        condicoes_venda=(),
    ):
        return EscopoComercial(
            acordo_id=acordo_id,
            precos_incluem_iva=precos_incluem_iva,
            percentual_iva=Decimal(str(percentual_iva)),
            promocoes=tuple(promocoes),
            condicoes_venda=tuple(condicoes_venda),
        )

    return _build


@pytest.fixture
def carrinho(escopo_factory):
    """
    Sessão de carrinho já com o acordo padrão ativo (IVA 21%, preços sem IVA).
    """
    sessao = CarrinhoSessao()
    sessao.definir_escopo(escopo_factory())
    return sessao


# =============================================================================
# API
# =============================================================================

@pytest.fixture
def api_client():
    return APIClient()
