# promocoes/services/avaliador_promocoes.py

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, Sequence

from promocoes.services.dto import InfoBonificacao, ResultadoAvaliacaoPromocoes
from promocoes.services.regras import (
    Promocao,
    RegraDescontoValorMinimo,
    RegraFreteGratis,
    RegraLeveXGanheY,
)

logger = logging.getLogger(__name__)


def _marcar_aplicada(resultado: ResultadoAvaliacaoPromocoes, promocao: Promocao) -> None:
    # promoção sem id só é deduplicada contra ela mesma
    for aplicada in resultado.aplicadas:
        if aplicada is promocao or (promocao.id is not None and aplicada.id == promocao.id):
            return
    resultado.aplicadas.append(promocao)


def _avaliar_leve_x_ganhe_y(
    resultado: ResultadoAvaliacaoPromocoes,
    promocao: Promocao,
    regra: RegraLeveXGanheY,
    linhas: Sequence,
) -> None:
    for linha in linhas:
        produto = linha.produto
        if not regra.abrange(produto.id, produto.categoria):
            continue

        vezes = linha.quantidade // regra.leve
        if vezes < 1:
            continue

        # indexado por produto: a última promoção que tocar o produto prevalece
        resultado.info_bonificacao[produto.id] = InfoBonificacao(
            nome_produto=produto.nome,
            quantidade_bonificada=vezes * regra.ganhe,
        )
        _marcar_aplicada(resultado, promocao)


def avaliar_promocoes(
    linhas: Sequence,
    subtotal: Decimal,
    promocoes: Iterable[Promocao],
) -> ResultadoAvaliacaoPromocoes:
    """
    Decide quais promoções disparam para o carrinho.

    Cada promoção é avaliada isoladamente contra as linhas e o subtotal
    originais (sem interação entre promoções):

    - Leve X ganhe Y: bonificação por produto = floor(qtd / X) * Y.
    - Frete grátis: aplicada se o total de unidades >= mínimo. Só sinaliza.
    - Desconto por valor mínimo: aplicada se subtotal >= mínimo; vale apenas
      o MAIOR percentual entre as qualificadas (não acumulam).

    Retorna o percentual (não o valor) para que o pipeline aplique sobre o
    próprio subtotal.
    """
    resultado = ResultadoAvaliacaoPromocoes()
    total_unidades = sum(linha.quantidade for linha in linhas)

    for promocao in promocoes:
        regra = promocao.regra

        if isinstance(regra, RegraLeveXGanheY):
            _avaliar_leve_x_ganhe_y(resultado, promocao, regra, linhas)

        elif isinstance(regra, RegraFreteGratis):
            if total_unidades >= regra.unidades_minimas:
                _marcar_aplicada(resultado, promocao)

        elif isinstance(regra, RegraDescontoValorMinimo):
            if subtotal >= regra.valor_minimo:
                resultado.percentual_desconto = max(
                    resultado.percentual_desconto, regra.percentual
                )
                _marcar_aplicada(resultado, promocao)

        else:
            logger.debug(
                "Promoção ignorada na avaliação (regra sem efeito). promocao_id=%s tipo=%s",
                promocao.id,
                getattr(regra, "tipo", None),
            )

    logger.debug(
        "Promoções avaliadas. aplicadas=%s percentual_desconto=%s bonificados=%s",
        [p.id for p in resultado.aplicadas],
        resultado.percentual_desconto,
        list(resultado.info_bonificacao),
    )
    return resultado
