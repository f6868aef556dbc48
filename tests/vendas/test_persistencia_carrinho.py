# tests/vendas/test_persistencia_carrinho.py

import json
import logging
from decimal import Decimal

import pytest
from django.core.cache import caches

from vendas.services.carrinho.carrinho_sessao import CarrinhoSessao
from vendas.services.carrinho.persistencia import (
    RepositorioCarrinhoCache,
    desserializar_registro,
    serializar_registro,
)

logger = logging.getLogger(__name__)


@pytest.fixture
def repositorio():
    backend = caches["default"]
    backend.clear()
    return RepositorioCarrinhoCache(backend=backend, timeout=60)


@pytest.fixture
def carrinho_com_regras(carrinho, produto_factory, escopo_factory, promocao_factory):
    carrinho.definir_escopo(
        escopo_factory(
            promocoes=[promocao_factory({"type": "buy_x_get_y_free", "buy": 2, "get": 1})]
        )
    )
    carrinho.adicionar_item(produto_factory("A", preco="12.50", categoria="Vinhos"), 4)
    carrinho.adicionar_item(produto_factory("B", preco="3", preco_volume="2.5"), 1)
    return carrinho


def test_registro_serializado_contem_apenas_dados_duraveis(carrinho_com_regras):
    conteudo = json.loads(serializar_registro(carrinho_com_regras.registro_duravel()))

    assert set(conteudo) == {"acordo_id", "precos_incluem_iva", "percentual_iva", "linhas"}
    assert conteudo["acordo_id"] == "acordo-001"
    assert conteudo["percentual_iva"] == "21"
    assert conteudo["linhas"][0] == {
        "produto": {
            "id": "A",
            "nome": "Produto A",
            "categoria": "Vinhos",
            "preco": "12.50",
            "preco_volume": None,
        },
        "quantidade": 4,
    }
    assert conteudo["linhas"][1]["produto"]["preco_volume"] == "2.5"


def test_desserializar_reconstroi_linhas(carrinho_com_regras):
    registro = desserializar_registro(
        serializar_registro(carrinho_com_regras.registro_duravel())
    )

    assert registro is not None
    assert registro.acordo_id == "acordo-001"
    assert registro.precos_incluem_iva is False
    assert registro.percentual_iva == Decimal("21")
    assert [(it.produto.id, it.quantidade) for it in registro.linhas] == [("A", 4), ("B", 1)]
    assert registro.linhas[0].produto.preco == Decimal("12.50")
    assert registro.linhas[1].produto.preco_volume == Decimal("2.5")


@pytest.mark.parametrize(
    "conteudo",
    [
        "{nao e json",
        b"\xff\xfe",
        "[1, 2, 3]",
        {"acordo_id": "x"},
        {
            "acordo_id": "x",
            "precos_incluem_iva": True,
            "percentual_iva": "21",
            "linhas": [{"produto": {"id": "A"}, "quantidade": 1}],
        },
    ],
)
def test_conteudo_corrompido_retorna_none(conteudo):
    assert desserializar_registro(conteudo) is None


def test_linhas_com_quantidade_nao_positiva_sao_descartadas():
    registro = desserializar_registro(
        {
            "acordo_id": "acordo-001",
            "precos_incluem_iva": True,
            "percentual_iva": "21",
            "linhas": [
                {"produto": {"id": "A", "nome": "A", "preco": "10"}, "quantidade": 0},
                {"produto": {"id": "B", "nome": "B", "preco": "10"}, "quantidade": 2},
            ],
        }
    )

    assert [it.produto.id for it in registro.linhas] == ["B"]


def test_repositorio_salva_carrega_e_remove(repositorio, carrinho_com_regras):
    repositorio.salvar("sessao-1", carrinho_com_regras.registro_duravel())

    registro = repositorio.carregar("sessao-1")
    assert registro is not None
    assert registro.acordo_id == "acordo-001"

    restaurada = CarrinhoSessao.restaurar(registro)
    assert restaurada.quantidade_item("A") == 4
    assert restaurada.quantidade_item("B") == 1
    # regras do acordo não são persistidas: nenhuma bonificação após restaurar
    assert restaurada.resultado.info_bonificacao == {}

    repositorio.remover("sessao-1")
    assert repositorio.carregar("sessao-1") is None


def test_repositorio_chave_inexistente(repositorio):
    assert repositorio.carregar("nao-existe") is None


def test_repositorio_com_conteudo_corrompido_no_cache(repositorio):
    repositorio.backend.set("carrinho:sessao-x", "{quebrado", 60)

    assert repositorio.carregar("sessao-x") is None
    assert CarrinhoSessao.restaurar(repositorio.carregar("sessao-x")).linhas == ()
