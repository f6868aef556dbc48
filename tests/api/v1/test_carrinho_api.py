# tests/api/v1/test_carrinho_api.py

import logging

import pytest
from django.urls import reverse
from rest_framework import status

logger = logging.getLogger(__name__)


def _linha(id="A", preco="1000", quantidade=10, **extra):
    produto = {"id": id, "nome": f"Produto {id}", "preco": preco}
    produto.update(extra)
    return {"produto": produto, "quantidade": quantidade}


def _escopo(promocoes=(), condicoes_venda=(), **extra):
    escopo = {
        "acordo_id": "acordo-001",
        "precos_incluem_iva": False,
        "percentual_iva": "21",
        "promocoes": list(promocoes),
        "condicoes_venda": list(condicoes_venda),
    }
    escopo.update(extra)
    return escopo


PROMO_LEVE_10_GANHE_2 = {
    "id": "p1",
    "name": "Leve 10 ganhe 2",
    "description": None,
    "rules": {"type": "buy_x_get_y_free", "buy": 10, "get": 2},
}

PROMO_DESCONTO_10 = {
    "id": "p2",
    "name": "10% acima de 5000",
    "rules": {"type": "min_amount_discount", "min_amount": 5000, "percentage": 10},
}


@pytest.fixture
def url_calcular():
    return reverse("carrinho:calcular")


@pytest.fixture
def url_resumo():
    return reverse("carrinho:resumo")


def test_calcular_carrinho_happy_path(api_client, url_calcular):
    """
    Cenário:
    - Produto A a 1000 x 10, leve 10 ganhe 2, 10% acima de 5000, IVA 21%.

    Esperado:
    - 200 com valores monetários em centavos (string) e bonificação de A.
    """
    payload = {
        "linhas": [_linha()],
        "escopo": _escopo(promocoes=[PROMO_LEVE_10_GANHE_2, PROMO_DESCONTO_10]),
    }

    resp = api_client.post(url_calcular, payload, format="json", HTTP_X_REQUEST_ID="req-123")

    assert resp.status_code == status.HTTP_200_OK, resp.data
    assert resp["X-Request-ID"] == "req-123"
    assert resp.data["request_id"] == "req-123"

    resultado = resp.data["resultado"]
    assert resultado["total_itens"] == 10
    assert resultado["subtotal"] == "10000.00"
    assert resultado["desconto_promocoes"] == "1000.00"
    assert resultado["subtotal_apos_descontos"] == "9000.00"
    assert resultado["valor_iva"] == "1890.00"
    assert resultado["total_preco"] == "10890.00"
    assert resultado["preco_volume_ativo"] is False
    assert resultado["info_bonificacao"]["A"] == {
        "nome_produto": "Produto A",
        "quantidade_bonificada": 2,
    }
    assert [p["id"] for p in resultado["promocoes_aplicadas"]] == ["p1", "p2"]
    assert resultado["promocoes_aplicadas"][0]["tipo"] == "buy_x_get_y_free"
    assert resultado["verificacao_pedido_minimo"] is None


def test_calcular_tolera_regras_desconhecidas(api_client, url_calcular):
    payload = {
        "linhas": [_linha(quantidade=1, preco="100")],
        "escopo": _escopo(
            promocoes=[{"id": "x", "name": "Nova regra", "rules": {"type": "cashback"}}],
            condicoes_venda=[{"id": "y", "name": "Sem regra", "rules": None}],
        ),
    }

    resp = api_client.post(url_calcular, payload, format="json")

    assert resp.status_code == status.HTTP_200_OK, resp.data
    assert resp.data["resultado"]["promocoes_aplicadas"] == []
    assert resp.data["resultado"]["total_preco"] == "121.00"


def test_calcular_junta_linhas_repetidas_e_descarta_quantidade_zero(api_client, url_calcular):
    payload = {
        "linhas": [
            _linha("A", preco="10", quantidade=2),
            _linha("A", preco="10", quantidade=3),
            _linha("B", preco="10", quantidade=0),
        ],
        "escopo": _escopo(),
    }

    resp = api_client.post(url_calcular, payload, format="json")

    assert resp.status_code == status.HTTP_200_OK, resp.data
    assert len(resp.data["linhas"]) == 1
    assert resp.data["linhas"][0]["quantidade"] == 5
    assert resp.data["resultado"]["subtotal"] == "50.00"


def test_calcular_payload_invalido_retorna_400(api_client, url_calcular):
    payload = {
        "linhas": [{"produto": {"id": "A", "nome": "A", "preco": "abc"}, "quantidade": 1}],
        "escopo": _escopo(),
    }

    resp = api_client.post(url_calcular, payload, format="json")

    assert resp.status_code == status.HTTP_400_BAD_REQUEST
    assert resp.data["code"] == "ERRO_VALIDACAO_CARRINHO"
    assert "linhas" in resp.data["detail"]


def test_resumo_pedido_happy_path(api_client, url_resumo):
    payload = {
        "linhas": [_linha()],
        "escopo": _escopo(promocoes=[PROMO_LEVE_10_GANHE_2, PROMO_DESCONTO_10]),
        "cliente_id": "cli-1",
        "cliente_nome": "Mercado Central",
    }

    resp = api_client.post(url_resumo, payload, format="json")

    assert resp.status_code == status.HTTP_200_OK, resp.data
    assert resp.data["total_preco"] == "10890.00"
    assert resp.data["bonificacoes"] == {"A": 2}
    assert resp.data["promocoes_aplicadas"] == ["p1", "p2"]
    assert resp.data["aviso_pedido_minimo"] is None
    assert "*Total a pagar: $10.890,00*" in resp.data["mensagem"]


def test_resumo_carrinho_vazio_retorna_422(api_client, url_resumo):
    resp = api_client.post(url_resumo, {"linhas": [], "escopo": _escopo()}, format="json")

    assert resp.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert resp.data["code"] == "CARRINHO_VAZIO"


def test_resumo_pedido_minimo_nao_atingido_retorna_422(api_client, url_resumo):
    payload = {
        "linhas": [_linha(preco="1500")],
        "escopo": _escopo(
            condicoes_venda=[
                {"id": "c1", "name": "Mínimo", "rules": {"type": "min_order_amount", "minimum": 20000}}
            ]
        ),
    }

    resp = api_client.post(url_resumo, payload, format="json")

    assert resp.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert resp.data["code"] == "PEDIDO_MINIMO_NAO_ATINGIDO"
    assert "$20.000,00" in resp.data["detail"]
