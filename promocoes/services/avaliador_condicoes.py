# promocoes/services/avaliador_condicoes.py

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable

from promocoes.services.dto import (
    CondicaoAplicada,
    ResultadoAvaliacaoCondicoes,
    VerificacaoPedidoMinimo,
)
from promocoes.services.regras import (
    CondicaoVenda,
    RegraDescontoCondicao,
    RegraPagamentoDividido,
    RegraPagamentoNaEntrega,
    RegraParcelamento,
    RegraPedidoMinimo,
    RegraPrazoDias,
)

logger = logging.getLogger(__name__)


def _fmt(valor: Decimal) -> str:
    # 5.00 -> "5", 7.50 -> "7.5"
    texto = format(valor.normalize(), "f")
    return texto


def descrever_termos(condicao: CondicaoVenda) -> str:
    """
    Texto curto dos termos de pagamento para exibição/mensagem do pedido.
    """
    regra = condicao.regra

    if isinstance(regra, RegraPrazoDias):
        return f"Pagamento em {regra.dias} dias"
    if isinstance(regra, RegraDescontoCondicao):
        return f"Desconto de {_fmt(regra.percentual)}%"
    if isinstance(regra, RegraParcelamento):
        return f"{regra.parcelas} parcelas"
    if isinstance(regra, RegraPagamentoDividido):
        return (
            f"{_fmt(regra.percentual_inicial)}% à vista, "
            f"restante em {regra.dias_restante} dias"
        )
    if isinstance(regra, RegraPagamentoNaEntrega):
        return "Pagamento na entrega"
    if isinstance(regra, RegraPedidoMinimo):
        return f"Pedido mínimo de {_fmt(regra.minimo)}"
    return condicao.nome or "Regra personalizada"


def avaliar_condicoes_venda(
    subtotal: Decimal,
    condicoes: Iterable[CondicaoVenda],
) -> ResultadoAvaliacaoCondicoes:
    """
    Avalia as condições de venda do acordo contra o subtotal (pré-promoção).

    - Desconto: único tipo que mexe em dinheiro. Vale o MAIOR valor
      (subtotal * percentual / 100) entre as condições de desconto.
    - Pedido mínimo: não altera preço; gera VerificacaoPedidoMinimo para
      o chamador decidir se bloqueia o checkout. Com mais de uma, vale o
      maior mínimo.
    - Prazo, parcelamento, pagamento dividido e pagamento na entrega:
      apenas termos, sem efeito numérico.

    Regras personalizadas/inválidas são ignoradas.
    """
    resultado = ResultadoAvaliacaoCondicoes()
    maior_minimo = None

    for condicao in condicoes:
        regra = condicao.regra

        if isinstance(regra, RegraDescontoCondicao):
            valor = subtotal * regra.percentual / Decimal("100")
            resultado.valor_desconto = max(resultado.valor_desconto, valor)
            resultado.aplicadas.append(
                CondicaoAplicada(
                    condicao=condicao,
                    descricao_termos=descrever_termos(condicao),
                    valor_desconto=valor,
                )
            )

        elif isinstance(regra, RegraPedidoMinimo):
            if maior_minimo is None or regra.minimo > maior_minimo:
                maior_minimo = regra.minimo
            resultado.aplicadas.append(
                CondicaoAplicada(
                    condicao=condicao,
                    descricao_termos=descrever_termos(condicao),
                )
            )

        elif isinstance(
            regra,
            (
                RegraPrazoDias,
                RegraParcelamento,
                RegraPagamentoDividido,
                RegraPagamentoNaEntrega,
            ),
        ):
            resultado.aplicadas.append(
                CondicaoAplicada(
                    condicao=condicao,
                    descricao_termos=descrever_termos(condicao),
                )
            )

        else:
            logger.debug(
                "Condição de venda ignorada (regra sem efeito). condicao_id=%s tipo=%s",
                condicao.id,
                getattr(regra, "tipo", None),
            )

    if maior_minimo is not None:
        resultado.verificacao_pedido_minimo = VerificacaoPedidoMinimo(
            valido=subtotal >= maior_minimo,
            minimo=maior_minimo,
            atual=subtotal,
        )

    logger.debug(
        "Condições de venda avaliadas. aplicadas=%s valor_desconto=%s pedido_minimo=%s",
        [c.condicao.id for c in resultado.aplicadas],
        resultado.valor_desconto,
        resultado.verificacao_pedido_minimo,
    )
    return resultado
