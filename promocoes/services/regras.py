# promocoes/services/regras.py

"""
Modelo de regras comerciais (promoções e condições de venda).

As regras chegam do backend como JSON achatado, por exemplo::

    {"type": "buy_x_get_y_free", "buy": 10, "get": 2}
    {"type": "discount", "percentage": 5}

Cada tipo conhecido vira uma dataclass imutável. Payloads com tipo
desconhecido ou campos obrigatórios ausentes/invalidos viram
``RegraPersonalizada``: continuam visíveis para o operador, mas os
avaliadores nunca os usam para calcular valores.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional, Union

from promocoes.serializers.regras_serializers import (
    RegraDescontoCondicaoSerializer,
    RegraDescontoValorMinimoSerializer,
    RegraFreteGratisSerializer,
    RegraLeveXGanheYSerializer,
    RegraPagamentoDivididoSerializer,
    RegraPagamentoNaEntregaSerializer,
    RegraParcelamentoSerializer,
    RegraPedidoMinimoSerializer,
    RegraPrazoDiasSerializer,
)

logger = logging.getLogger(__name__)


class TipoRegra:
    # promoções
    LEVE_X_GANHE_Y = "buy_x_get_y_free"
    FRETE_GRATIS = "free_shipping"
    DESCONTO_VALOR_MINIMO = "min_amount_discount"

    # condições de venda
    PRAZO_DIAS = "net_days"
    DESCONTO = "discount"
    PARCELAMENTO = "installments"
    PAGAMENTO_DIVIDIDO = "split_payment"
    PAGAMENTO_NA_ENTREGA = "cash_on_delivery"
    PEDIDO_MINIMO = "min_order_amount"


# ----------------------------------------------------------------------
# Regras de promoção
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class RegraLeveXGanheY:
    leve: int
    ganhe: int
    produto_ids: frozenset = field(default_factory=frozenset)
    categorias: frozenset = field(default_factory=frozenset)

    tipo = TipoRegra.LEVE_X_GANHE_Y

    @property
    def restrita(self) -> bool:
        return bool(self.produto_ids or self.categorias)

    def abrange(self, produto_id: str, categoria: Optional[str]) -> bool:
        """
        Sem restrição, vale para todo o carrinho. Com restrição, basta o
        produto estar listado OU a categoria do produto estar listada.
        """
        if not self.restrita:
            return True
        return produto_id in self.produto_ids or (
            categoria is not None and categoria in self.categorias
        )


@dataclass(frozen=True)
class RegraFreteGratis:
    unidades_minimas: int
    localidades: frozenset = field(default_factory=frozenset)

    tipo = TipoRegra.FRETE_GRATIS


@dataclass(frozen=True)
class RegraDescontoValorMinimo:
    valor_minimo: Decimal
    percentual: Decimal

    tipo = TipoRegra.DESCONTO_VALOR_MINIMO


# ----------------------------------------------------------------------
# Regras de condição de venda
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class RegraPrazoDias:
    dias: int

    tipo = TipoRegra.PRAZO_DIAS


@dataclass(frozen=True)
class RegraDescontoCondicao:
    percentual: Decimal

    tipo = TipoRegra.DESCONTO


@dataclass(frozen=True)
class RegraParcelamento:
    parcelas: int

    tipo = TipoRegra.PARCELAMENTO


@dataclass(frozen=True)
class RegraPagamentoDividido:
    percentual_inicial: Decimal
    dias_restante: int

    tipo = TipoRegra.PAGAMENTO_DIVIDIDO


@dataclass(frozen=True)
class RegraPagamentoNaEntrega:
    tipo = TipoRegra.PAGAMENTO_NA_ENTREGA


@dataclass(frozen=True)
class RegraPedidoMinimo:
    minimo: Decimal

    tipo = TipoRegra.PEDIDO_MINIMO


@dataclass(frozen=True)
class RegraPersonalizada:
    """
    Regra não reconhecida ou estruturalmente incompleta.
    Exibida como "regra personalizada", nunca afeta valores.
    """

    tipo: Optional[str]
    payload: Any = None
    erros: Any = None


RegraPromocao = Union[
    RegraLeveXGanheY,
    RegraFreteGratis,
    RegraDescontoValorMinimo,
    RegraPersonalizada,
]

RegraCondicao = Union[
    RegraPrazoDias,
    RegraDescontoCondicao,
    RegraParcelamento,
    RegraPagamentoDividido,
    RegraPagamentoNaEntrega,
    RegraPedidoMinimo,
    RegraPersonalizada,
]


# ----------------------------------------------------------------------
# Entidades
# ----------------------------------------------------------------------
def _id_entidade(dados: dict) -> Optional[str]:
    # sem id (ou id vazio) -> None; nunca é agrupada com outra entidade
    valor = dados.get("id")
    if valor is None or str(valor) == "":
        return None
    return str(valor)


@dataclass(frozen=True)
class Promocao:
    id: Optional[str]
    nome: str
    descricao: Optional[str]
    regra: RegraPromocao

    @classmethod
    def de_payload(cls, dados: dict) -> "Promocao":
        return cls(
            id=_id_entidade(dados),
            nome=dados.get("name") or dados.get("nome") or "",
            descricao=dados.get("description", dados.get("descricao")),
            regra=decodificar_regra_promocao(dados.get("rules")),
        )


@dataclass(frozen=True)
class CondicaoVenda:
    id: Optional[str]
    nome: str
    descricao: Optional[str]
    regra: RegraCondicao

    @classmethod
    def de_payload(cls, dados: dict) -> "CondicaoVenda":
        return cls(
            id=_id_entidade(dados),
            nome=dados.get("name") or dados.get("nome") or "",
            descricao=dados.get("description", dados.get("descricao")),
            regra=decodificar_regra_condicao(dados.get("rules")),
        )


# ----------------------------------------------------------------------
# Decodificação
# ----------------------------------------------------------------------
def _leve_x_ganhe_y(dados: dict) -> RegraLeveXGanheY:
    return RegraLeveXGanheY(
        leve=dados["buy"],
        ganhe=dados["get"],
        produto_ids=frozenset(str(p) for p in dados.get("product_ids") or []),
        categorias=frozenset(dados.get("category_names") or []),
    )


def _frete_gratis(dados: dict) -> RegraFreteGratis:
    return RegraFreteGratis(
        unidades_minimas=dados["min_units"],
        localidades=frozenset(dados.get("locations") or []),
    )


def _desconto_valor_minimo(dados: dict) -> RegraDescontoValorMinimo:
    return RegraDescontoValorMinimo(
        valor_minimo=dados["min_amount"],
        percentual=dados["percentage"],
    )


_DECODIFICADORES_PROMOCAO = {
    TipoRegra.LEVE_X_GANHE_Y: (RegraLeveXGanheYSerializer, _leve_x_ganhe_y),
    TipoRegra.FRETE_GRATIS: (RegraFreteGratisSerializer, _frete_gratis),
    TipoRegra.DESCONTO_VALOR_MINIMO: (
        RegraDescontoValorMinimoSerializer,
        _desconto_valor_minimo,
    ),
}

_DECODIFICADORES_CONDICAO = {
    TipoRegra.PRAZO_DIAS: (
        RegraPrazoDiasSerializer,
        lambda d: RegraPrazoDias(dias=d["days"]),
    ),
    TipoRegra.DESCONTO: (
        RegraDescontoCondicaoSerializer,
        lambda d: RegraDescontoCondicao(percentual=d["percentage"]),
    ),
    TipoRegra.PARCELAMENTO: (
        RegraParcelamentoSerializer,
        lambda d: RegraParcelamento(parcelas=d["installments"]),
    ),
    TipoRegra.PAGAMENTO_DIVIDIDO: (
        RegraPagamentoDivididoSerializer,
        lambda d: RegraPagamentoDividido(
            percentual_inicial=d["initial_percentage"],
            dias_restante=d["remaining_days"],
        ),
    ),
    TipoRegra.PAGAMENTO_NA_ENTREGA: (
        RegraPagamentoNaEntregaSerializer,
        lambda d: RegraPagamentoNaEntrega(),
    ),
    TipoRegra.PEDIDO_MINIMO: (
        RegraPedidoMinimoSerializer,
        lambda d: RegraPedidoMinimo(minimo=d["minimum"]),
    ),
}


def _decodificar(payload, decodificadores: dict):
    if not isinstance(payload, dict):
        logger.debug("Regra sem payload estruturado ignorada. payload=%r", payload)
        return RegraPersonalizada(tipo=None, payload=payload)

    tipo = payload.get("type")
    entrada = decodificadores.get(tipo)
    if entrada is None:
        logger.debug("Tipo de regra desconhecido. tipo=%s", tipo)
        return RegraPersonalizada(tipo=tipo, payload=payload)

    serializer_class, construir = entrada
    serializer = serializer_class(data=payload)
    if not serializer.is_valid():
        logger.info(
            "Regra incompleta tratada como personalizada. tipo=%s erros=%s",
            tipo,
            dict(serializer.errors),
        )
        return RegraPersonalizada(
            tipo=tipo, payload=payload, erros=dict(serializer.errors)
        )

    return construir(serializer.validated_data)


def decodificar_regra_promocao(payload) -> RegraPromocao:
    """
    Converte o JSON ``rules`` de uma promoção na regra tipada correspondente.
    Nunca lança exceção: entradas inválidas viram ``RegraPersonalizada``.
    """
    return _decodificar(payload, _DECODIFICADORES_PROMOCAO)


def decodificar_regra_condicao(payload) -> RegraCondicao:
    """
    Converte o JSON ``rules`` de uma condição de venda na regra tipada.
    Nunca lança exceção: entradas inválidas viram ``RegraPersonalizada``.
    """
    return _decodificar(payload, _DECODIFICADORES_CONDICAO)
