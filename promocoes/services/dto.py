# promocoes/services/dto.py

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional

from promocoes.services.regras import CondicaoVenda, Promocao


@dataclass(frozen=True)
class InfoBonificacao:
    nome_produto: str
    quantidade_bonificada: int


@dataclass
class ResultadoAvaliacaoPromocoes:
    aplicadas: List[Promocao] = field(default_factory=list)
    info_bonificacao: Dict[str, InfoBonificacao] = field(default_factory=dict)
    percentual_desconto: Decimal = Decimal("0")


@dataclass(frozen=True)
class CondicaoAplicada:
    condicao: CondicaoVenda
    descricao_termos: str
    valor_desconto: Decimal = Decimal("0")


@dataclass(frozen=True)
class VerificacaoPedidoMinimo:
    valido: bool
    minimo: Decimal
    atual: Decimal


@dataclass
class ResultadoAvaliacaoCondicoes:
    aplicadas: List[CondicaoAplicada] = field(default_factory=list)
    valor_desconto: Decimal = Decimal("0")
    verificacao_pedido_minimo: Optional[VerificacaoPedidoMinimo] = None
