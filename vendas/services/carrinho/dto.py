# vendas/services/carrinho/dto.py

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from promocoes.services.dto import (
    CondicaoAplicada,
    InfoBonificacao,
    VerificacaoPedidoMinimo,
)
from promocoes.services.regras import CondicaoVenda, Promocao


def para_decimal(valor) -> Decimal:
    if isinstance(valor, Decimal):
        return valor
    return Decimal(str(valor))


@dataclass(frozen=True)
class ProdutoPreco:
    """
    Visão de preço do produto dentro da lista de preços do acordo.

    preco_volume só entra em vigor quando o carrinho inteiro atinge o
    limite de preço por volume e é menor que o preço base.
    """

    id: str
    nome: str
    preco: Decimal
    categoria: Optional[str] = None
    preco_volume: Optional[Decimal] = None

    def __post_init__(self):
        # int/float/str -> Decimal(str(valor)); 10.5 vira Decimal("10.5")
        object.__setattr__(self, "preco", para_decimal(self.preco))
        if self.preco_volume is not None:
            object.__setattr__(self, "preco_volume", para_decimal(self.preco_volume))


@dataclass(frozen=True)
class LinhaCarrinho:
    produto: ProdutoPreco
    quantidade: int

    def com_quantidade(self, quantidade: int) -> "LinhaCarrinho":
        return replace(self, quantidade=quantidade)


@dataclass(frozen=True)
class EscopoComercial:
    """
    Contexto comercial de um acordo/lista de preços.
    Trocar o acordo_id é sinal de reset do carrinho.
    """

    acordo_id: Optional[str]
    precos_incluem_iva: bool = True
    percentual_iva: Decimal = Decimal("21")
    promocoes: Tuple[Promocao, ...] = ()
    condicoes_venda: Tuple[CondicaoVenda, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "percentual_iva", para_decimal(self.percentual_iva))
        object.__setattr__(self, "promocoes", tuple(self.promocoes))
        object.__setattr__(self, "condicoes_venda", tuple(self.condicoes_venda))

    @property
    def taxa_iva(self) -> Decimal:
        return self.percentual_iva / Decimal("100")

    def sem_regras(self) -> "EscopoComercial":
        return replace(self, promocoes=(), condicoes_venda=())


@dataclass(frozen=True)
class ResultadoPrecificacao:
    """
    Projeção derivada de (linhas, escopo). Nunca é alterada diretamente,
    apenas recalculada.
    """

    total_itens: int = 0
    subtotal: Decimal = Decimal("0")
    percentual_desconto_promocoes: Decimal = Decimal("0")
    desconto_promocoes: Decimal = Decimal("0")
    subtotal_apos_promocoes: Decimal = Decimal("0")
    desconto_condicoes: Decimal = Decimal("0")
    subtotal_apos_descontos: Decimal = Decimal("0")
    valor_iva: Decimal = Decimal("0")
    total_preco: Decimal = Decimal("0")
    preco_volume_ativo: bool = False
    promocoes_aplicadas: List[Promocao] = field(default_factory=list)
    condicoes_aplicadas: List[CondicaoAplicada] = field(default_factory=list)
    info_bonificacao: Dict[str, InfoBonificacao] = field(default_factory=dict)
    verificacao_pedido_minimo: Optional[VerificacaoPedidoMinimo] = None

    @classmethod
    def vazio(cls) -> "ResultadoPrecificacao":
        return cls()


@dataclass(frozen=True)
class RegistroDuravelCarrinho:
    """
    Parte do carrinho que pode ser persistida entre recargas.
    Promoções, condições e valores derivados nunca fazem parte dele.
    """

    acordo_id: Optional[str]
    precos_incluem_iva: bool
    percentual_iva: Decimal
    linhas: Tuple[LinhaCarrinho, ...] = ()


@dataclass(frozen=True)
class InstantaneoCarrinho:
    """
    Leitura consistente do carrinho: linhas, escopo e resultado do mesmo ciclo.
    """

    linhas: Tuple[LinhaCarrinho, ...]
    escopo: EscopoComercial
    resultado: ResultadoPrecificacao
