# vendas/services/carrinho/precificacao_service.py

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional, Sequence

from django.conf import settings

from promocoes.services.avaliador_condicoes import avaliar_condicoes_venda
from promocoes.services.avaliador_promocoes import avaliar_promocoes
from vendas.services.carrinho.dto import (
    EscopoComercial,
    LinhaCarrinho,
    ProdutoPreco,
    ResultadoPrecificacao,
)

logger = logging.getLogger(__name__)

LIMITE_PRECO_VOLUME = 150

ZERO = Decimal("0")


def obter_limite_preco_volume() -> int:
    """
    Limite configurado em settings. Lido por quem chama o pipeline (sessão,
    views), nunca dentro de precificar_carrinho.
    """
    return int(getattr(settings, "CARRINHO_LIMITE_PRECO_VOLUME", LIMITE_PRECO_VOLUME))


def preco_unitario(produto: ProdutoPreco, preco_volume_ativo: bool) -> Decimal:
    """
    Preço de volume só vale com o volume ativo, se existir e se for menor
    que o preço base.
    """
    if (
        preco_volume_ativo
        and produto.preco_volume is not None
        and produto.preco_volume < produto.preco
    ):
        return produto.preco_volume
    return produto.preco


def precificar_carrinho(
    linhas: Sequence[LinhaCarrinho],
    escopo: EscopoComercial,
    *,
    limite_preco_volume: Optional[int] = None,
) -> ResultadoPrecificacao:
    """
    Ponto único de cálculo do carrinho (subtotal, descontos, IVA e total).

    Ordem (não alterar, muda o total exibido ao cliente):
    1) total_itens = soma das quantidades.
    2) preço por volume ativo se total_itens >= limite (carrinho inteiro).
    3) preço unitário de cada linha (base ou volume).
    4) se os preços incluem IVA, o unitário é dividido por (1 + taxa)
       antes de multiplicar pela quantidade; o motor trabalha sem IVA.
    5) subtotal = soma das linhas.
    6) desconto de promoções = subtotal * percentual vencedor.
    7) desconto de condições calculado sobre o subtotal ORIGINAL e
       subtraído do subtotal já com desconto de promoções.
    8) IVA sobre o subtotal após descontos.
    9) total = subtotal após descontos + IVA.

    Função pura: não grava nada e não lê settings; sem limite informado
    usa LIMITE_PRECO_VOLUME.
    """
    if limite_preco_volume is None:
        limite_preco_volume = LIMITE_PRECO_VOLUME

    total_itens = sum(linha.quantidade for linha in linhas)
    preco_volume_ativo = total_itens >= limite_preco_volume
    taxa_iva = escopo.taxa_iva

    subtotal = ZERO
    for linha in linhas:
        unitario = preco_unitario(linha.produto, preco_volume_ativo)
        if escopo.precos_incluem_iva:
            unitario = unitario / (1 + taxa_iva)
        subtotal += unitario * linha.quantidade

    promocoes = avaliar_promocoes(linhas, subtotal, escopo.promocoes)
    desconto_promocoes = subtotal * promocoes.percentual_desconto / Decimal("100")
    subtotal_apos_promocoes = subtotal - desconto_promocoes

    condicoes = avaliar_condicoes_venda(subtotal, escopo.condicoes_venda)
    desconto_condicoes = condicoes.valor_desconto
    subtotal_apos_descontos = max(subtotal_apos_promocoes - desconto_condicoes, ZERO)

    valor_iva = subtotal_apos_descontos * taxa_iva
    total_preco = subtotal_apos_descontos + valor_iva

    logger.debug(
        "Carrinho precificado. acordo_id=%s itens=%s volume=%s subtotal=%s "
        "desc_promo=%s desc_cond=%s iva=%s total=%s",
        escopo.acordo_id,
        total_itens,
        preco_volume_ativo,
        subtotal,
        desconto_promocoes,
        desconto_condicoes,
        valor_iva,
        total_preco,
    )

    return ResultadoPrecificacao(
        total_itens=total_itens,
        subtotal=subtotal,
        percentual_desconto_promocoes=promocoes.percentual_desconto,
        desconto_promocoes=desconto_promocoes,
        subtotal_apos_promocoes=subtotal_apos_promocoes,
        desconto_condicoes=desconto_condicoes,
        subtotal_apos_descontos=subtotal_apos_descontos,
        valor_iva=valor_iva,
        total_preco=total_preco,
        preco_volume_ativo=preco_volume_ativo,
        promocoes_aplicadas=promocoes.aplicadas,
        condicoes_aplicadas=condicoes.aplicadas,
        info_bonificacao=promocoes.info_bonificacao,
        verificacao_pedido_minimo=condicoes.verificacao_pedido_minimo,
    )
