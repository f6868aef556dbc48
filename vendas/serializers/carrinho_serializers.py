# vendas/serializers/carrinho_serializers.py

from decimal import ROUND_HALF_UP, Decimal

from rest_framework import serializers

from promocoes.services.regras import CondicaoVenda, Promocao
from vendas.services.carrinho.dto import (
    EscopoComercial,
    LinhaCarrinho,
    ProdutoPreco,
    RegistroDuravelCarrinho,
)


def _decimal_field(**kwargs):
    kwargs.setdefault("max_digits", None)
    kwargs.setdefault("decimal_places", None)
    return serializers.DecimalField(**kwargs)


def _moeda_field(**kwargs):
    # saída sempre em centavos
    return serializers.DecimalField(
        max_digits=None, decimal_places=2, rounding=ROUND_HALF_UP, **kwargs
    )


# ----------------------------------------------------------------------
# Entrada: produtos, linhas, escopo
# ----------------------------------------------------------------------
class ProdutoPrecoSerializer(serializers.Serializer):
    id = serializers.CharField()
    nome = serializers.CharField(allow_blank=True)
    categoria = serializers.CharField(allow_null=True, allow_blank=True, default=None)
    preco = _decimal_field(min_value=Decimal("0"))
    preco_volume = _decimal_field(min_value=Decimal("0"), allow_null=True, default=None)

    def to_representation(self, instance):
        return {
            "id": instance.id,
            "nome": instance.nome,
            "categoria": instance.categoria,
            "preco": str(instance.preco),
            "preco_volume": (
                str(instance.preco_volume) if instance.preco_volume is not None else None
            ),
        }


class LinhaCarrinhoSerializer(serializers.Serializer):
    produto = ProdutoPrecoSerializer()
    quantidade = serializers.IntegerField()

    def to_representation(self, instance):
        return {
            "produto": ProdutoPrecoSerializer(instance.produto).data,
            "quantidade": instance.quantidade,
        }


class RegraEntidadeSerializer(serializers.Serializer):
    """
    Promoção ou condição de venda como entregue pelo backend de regras.
    O conteúdo de ``rules`` é livre; a decodificação tolera qualquer formato.
    """

    id = serializers.CharField()
    name = serializers.CharField(allow_blank=True, default="")
    description = serializers.CharField(allow_null=True, allow_blank=True, default=None)
    rules = serializers.JSONField(allow_null=True, default=None)


class EscopoComercialSerializer(serializers.Serializer):
    acordo_id = serializers.CharField(allow_null=True)
    precos_incluem_iva = serializers.BooleanField(default=True)
    percentual_iva = _decimal_field(min_value=Decimal("0"), default=Decimal("21"))
    promocoes = RegraEntidadeSerializer(many=True, default=list)
    condicoes_venda = RegraEntidadeSerializer(many=True, default=list)


class RegistroDuravelSerializer(serializers.Serializer):
    """
    Formato persistido do carrinho: somente linhas, identidade do acordo e
    flags de IVA.
    """

    acordo_id = serializers.CharField(allow_null=True)
    precos_incluem_iva = serializers.BooleanField()
    percentual_iva = _decimal_field(min_value=Decimal("0"))
    linhas = LinhaCarrinhoSerializer(many=True)

    def to_representation(self, instance):
        return {
            "acordo_id": instance.acordo_id,
            "precos_incluem_iva": instance.precos_incluem_iva,
            "percentual_iva": str(instance.percentual_iva),
            "linhas": [LinhaCarrinhoSerializer(linha).data for linha in instance.linhas],
        }


class CalcularCarrinhoInputSerializer(serializers.Serializer):
    linhas = LinhaCarrinhoSerializer(many=True)
    escopo = EscopoComercialSerializer()


class ResumoPedidoInputSerializer(CalcularCarrinhoInputSerializer):
    cliente_id = serializers.CharField(allow_null=True, allow_blank=True, default=None)
    cliente_nome = serializers.CharField(allow_blank=True, default="")
    observacoes = serializers.CharField(allow_blank=True, default="")


# ----------------------------------------------------------------------
# Saída
# ----------------------------------------------------------------------
class InfoBonificacaoOutputSerializer(serializers.Serializer):
    nome_produto = serializers.CharField()
    quantidade_bonificada = serializers.IntegerField()


class PromocaoAplicadaOutputSerializer(serializers.Serializer):
    id = serializers.CharField()
    nome = serializers.CharField()
    descricao = serializers.CharField(allow_null=True)
    tipo = serializers.CharField(source="regra.tipo", allow_null=True)


class CondicaoAplicadaOutputSerializer(serializers.Serializer):
    id = serializers.CharField(source="condicao.id")
    nome = serializers.CharField(source="condicao.nome")
    tipo = serializers.CharField(source="condicao.regra.tipo", allow_null=True)
    descricao_termos = serializers.CharField()
    valor_desconto = _moeda_field()


class VerificacaoPedidoMinimoOutputSerializer(serializers.Serializer):
    valido = serializers.BooleanField()
    minimo = _moeda_field()
    atual = _moeda_field()


class ResultadoPrecificacaoOutputSerializer(serializers.Serializer):
    total_itens = serializers.IntegerField()
    subtotal = _moeda_field()
    percentual_desconto_promocoes = _decimal_field()
    desconto_promocoes = _moeda_field()
    desconto_condicoes = _moeda_field()
    subtotal_apos_descontos = _moeda_field()
    valor_iva = _moeda_field()
    total_preco = _moeda_field()
    preco_volume_ativo = serializers.BooleanField()
    promocoes_aplicadas = PromocaoAplicadaOutputSerializer(many=True)
    condicoes_aplicadas = CondicaoAplicadaOutputSerializer(many=True)
    info_bonificacao = serializers.DictField(child=InfoBonificacaoOutputSerializer())
    verificacao_pedido_minimo = VerificacaoPedidoMinimoOutputSerializer(allow_null=True)


# ----------------------------------------------------------------------
# Conversão validated_data -> DTOs
# ----------------------------------------------------------------------
def construir_produto(dados: dict) -> ProdutoPreco:
    return ProdutoPreco(
        id=str(dados["id"]),
        nome=dados.get("nome", ""),
        categoria=dados.get("categoria"),
        preco=dados["preco"],
        preco_volume=dados.get("preco_volume"),
    )


def construir_linhas(dados_linhas) -> tuple:
    """
    Normaliza as linhas: descarta quantidade <= 0 e junta linhas repetidas
    do mesmo produto (o carrinho nunca tem duas linhas para o mesmo id).
    """
    linhas = {}
    for dados in dados_linhas:
        quantidade = dados["quantidade"]
        if quantidade <= 0:
            continue
        produto = construir_produto(dados["produto"])
        existente = linhas.get(produto.id)
        if existente is not None:
            linhas[produto.id] = existente.com_quantidade(existente.quantidade + quantidade)
        else:
            linhas[produto.id] = LinhaCarrinho(produto=produto, quantidade=quantidade)
    return tuple(linhas.values())


def construir_escopo(dados: dict) -> EscopoComercial:
    return EscopoComercial(
        acordo_id=dados.get("acordo_id"),
        precos_incluem_iva=dados.get("precos_incluem_iva", True),
        percentual_iva=dados.get("percentual_iva", Decimal("21")),
        promocoes=tuple(
            Promocao.de_payload(p) for p in dados.get("promocoes", [])
        ),
        condicoes_venda=tuple(
            CondicaoVenda.de_payload(c) for c in dados.get("condicoes_venda", [])
        ),
    )


def construir_registro_duravel(dados: dict) -> RegistroDuravelCarrinho:
    return RegistroDuravelCarrinho(
        acordo_id=dados.get("acordo_id"),
        precos_incluem_iva=dados["precos_incluem_iva"],
        percentual_iva=dados["percentual_iva"],
        linhas=construir_linhas(dados["linhas"]),
    )
