# vendas/services/carrinho/resumo_pedido_service.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Tuple

from django.conf import settings

from promocoes.services.regras import (
    RegraDescontoValorMinimo,
    RegraFreteGratis,
)
from vendas.services.carrinho.dto import InstantaneoCarrinho, LinhaCarrinho
from vendas.services.exceptions import CarrinhoVazioError, PedidoMinimoNaoAtingidoError

logger = logging.getLogger(__name__)

CENTAVOS = Decimal("0.01")


def quantizar(valor: Decimal) -> Decimal:
    return valor.quantize(CENTAVOS, rounding=ROUND_HALF_UP)


def formatar_moeda(valor: Decimal) -> str:
    """
    1234.5 -> "$1.234,50" (separador de milhar ".", decimal ",").
    """
    simbolo = getattr(settings, "CARRINHO_SIMBOLO_MOEDA", "$")
    texto = f"{quantizar(valor):,.2f}"
    texto = texto.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{simbolo}{texto}"


@dataclass(frozen=True)
class ResumoPedido:
    """
    Payload entregue ao colaborador de submissão de pedidos.
    Valores em centavos e consistentes entre si:
    total_preco == subtotal_apos_descontos + valor_iva.
    """

    acordo_id: Optional[str]
    cliente_id: Optional[str]
    cliente_nome: str
    observacoes: str
    linhas: Tuple[LinhaCarrinho, ...]
    total_itens: int
    subtotal: Decimal
    desconto_promocoes: Decimal
    desconto_condicoes: Decimal
    subtotal_apos_descontos: Decimal
    valor_iva: Decimal
    total_preco: Decimal
    bonificacoes: Dict[str, int]
    promocoes_aplicadas: List[str]
    condicoes_aplicadas: List[str]
    aviso_pedido_minimo: Optional[str]
    mensagem: str


def _montar_mensagem(
    instantaneo: InstantaneoCarrinho,
    *,
    cliente_nome: str,
    observacoes: str,
    subtotal: Decimal,
    desconto_total: Decimal,
    subtotal_apos_descontos: Decimal,
    valor_iva: Decimal,
    total_preco: Decimal,
    pedido_id: Optional[str] = None,
) -> str:
    resultado = instantaneo.resultado

    titulo = "NOVO PEDIDO"
    if pedido_id:
        titulo = f"NOVO PEDIDO #{str(pedido_id)[-4:]}"

    partes = [f"*{titulo}*\n", f"*Cliente:*\n{cliente_nome}\n"]

    if observacoes:
        partes.append(f"*Observações do cliente:*\n{observacoes}\n")

    itens = "\n".join(
        f"- {linha.quantidade}x {linha.produto.nome}" for linha in instantaneo.linhas
    )
    partes.append(f"*Produtos:* ({resultado.total_itens} unidades)\n{itens}\n")

    if resultado.promocoes_aplicadas:
        texto_promocoes = ""

        if any(
            isinstance(p.regra, RegraDescontoValorMinimo)
            for p in resultado.promocoes_aplicadas
        ):
            texto_promocoes += (
                f"*Desconto aplicado ({resultado.percentual_desconto_promocoes.normalize():f}%):*\n"
                f"-{formatar_moeda(resultado.desconto_promocoes)}\n"
            )

        bonificacoes = "\n".join(
            f"+{info.quantidade_bonificada} un. de {info.nome_produto}"
            for info in resultado.info_bonificacao.values()
        )
        if bonificacoes:
            texto_promocoes += f"\n*Bonificações:*\n{bonificacoes}\n"

        if any(isinstance(p.regra, RegraFreteGratis) for p in resultado.promocoes_aplicadas):
            texto_promocoes += "\nFrete grátis.\n"

        if texto_promocoes:
            partes.append(texto_promocoes)

    if resultado.condicoes_aplicadas:
        termos = "\n".join(f"- {c.descricao_termos}" for c in resultado.condicoes_aplicadas)
        partes.append(f"*Condições de venda:*\n{termos}\n")

    partes.append(f"*Resumo de pagamento:*\nSubtotal: {formatar_moeda(subtotal)}\n")

    if desconto_total > 0:
        partes.append(f"Desconto: -{formatar_moeda(desconto_total)}\n")
        partes.append(
            f"Subtotal c/ desconto: {formatar_moeda(subtotal_apos_descontos)}\n"
        )

    partes.append(
        f"IVA: {formatar_moeda(valor_iva)}\n"
        f"*Total a pagar: {formatar_moeda(total_preco)}*"
    )

    return "\n".join(partes).strip()


def montar_resumo_pedido(
    instantaneo: InstantaneoCarrinho,
    *,
    cliente_id: Optional[str] = None,
    cliente_nome: str = "",
    observacoes: str = "",
    pedido_id: Optional[str] = None,
    bloquear_pedido_minimo: Optional[bool] = None,
) -> ResumoPedido:
    """
    Monta o payload de checkout a partir de um instantâneo do carrinho.

    - Carrinho vazio -> CarrinhoVazioError.
    - Pedido mínimo não atingido:
        * política de bloqueio ativa (padrão) -> PedidoMinimoNaoAtingidoError;
        * política desativada -> resumo com aviso_pedido_minimo preenchido.
    """
    if bloquear_pedido_minimo is None:
        bloquear_pedido_minimo = getattr(settings, "CARRINHO_BLOQUEAR_PEDIDO_MINIMO", True)

    if not instantaneo.linhas:
        raise CarrinhoVazioError()

    resultado = instantaneo.resultado
    cliente_nome = cliente_nome or "Cliente"

    aviso_pedido_minimo = None
    verificacao = resultado.verificacao_pedido_minimo
    if verificacao is not None and not verificacao.valido:
        mensagem = (
            f"Pedido mínimo de {formatar_moeda(verificacao.minimo)} não atingido "
            f"(atual: {formatar_moeda(verificacao.atual)})."
        )
        if bloquear_pedido_minimo:
            logger.warning(
                "Checkout bloqueado por pedido mínimo. acordo_id=%s minimo=%s atual=%s",
                instantaneo.escopo.acordo_id,
                verificacao.minimo,
                verificacao.atual,
            )
            raise PedidoMinimoNaoAtingidoError(
                mensagem, minimo=verificacao.minimo, atual=verificacao.atual
            )
        aviso_pedido_minimo = mensagem

    subtotal = quantizar(resultado.subtotal)
    desconto_promocoes = quantizar(resultado.desconto_promocoes)
    desconto_condicoes = quantizar(resultado.desconto_condicoes)
    subtotal_apos_descontos = quantizar(resultado.subtotal_apos_descontos)
    valor_iva = quantizar(resultado.valor_iva)
    # recomposto a partir dos valores já quantizados
    total_preco = subtotal_apos_descontos + valor_iva

    mensagem = _montar_mensagem(
        instantaneo,
        cliente_nome=cliente_nome,
        observacoes=observacoes,
        subtotal=subtotal,
        desconto_total=desconto_promocoes + desconto_condicoes,
        subtotal_apos_descontos=subtotal_apos_descontos,
        valor_iva=valor_iva,
        total_preco=total_preco,
        pedido_id=pedido_id,
    )

    resumo = ResumoPedido(
        acordo_id=instantaneo.escopo.acordo_id,
        cliente_id=cliente_id,
        cliente_nome=cliente_nome,
        observacoes=observacoes,
        linhas=instantaneo.linhas,
        total_itens=resultado.total_itens,
        subtotal=subtotal,
        desconto_promocoes=desconto_promocoes,
        desconto_condicoes=desconto_condicoes,
        subtotal_apos_descontos=subtotal_apos_descontos,
        valor_iva=valor_iva,
        total_preco=total_preco,
        bonificacoes={
            produto_id: info.quantidade_bonificada
            for produto_id, info in resultado.info_bonificacao.items()
        },
        promocoes_aplicadas=[p.id for p in resultado.promocoes_aplicadas],
        condicoes_aplicadas=[c.condicao.id for c in resultado.condicoes_aplicadas],
        aviso_pedido_minimo=aviso_pedido_minimo,
        mensagem=mensagem,
    )

    logger.info(
        "Resumo de pedido gerado. acordo_id=%s cliente_id=%s itens=%s total=%s",
        resumo.acordo_id,
        resumo.cliente_id,
        resumo.total_itens,
        resumo.total_preco,
    )
    return resumo
