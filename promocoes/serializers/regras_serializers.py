# promocoes/serializers/regras_serializers.py

from decimal import Decimal

from rest_framework import serializers


def _lista_de_texto(valor):
    """
    Aceita lista ou string separada por vírgulas (formato do formulário de
    promoções) e devolve uma lista de strings sem vazios.
    """
    if valor is None:
        return []
    if isinstance(valor, str):
        return [parte.strip() for parte in valor.split(",") if parte.strip()]
    return valor


class ListaTextoField(serializers.ListField):
    child = serializers.CharField()

    def to_internal_value(self, data):
        return super().to_internal_value(_lista_de_texto(data))


class PercentualField(serializers.DecimalField):
    """
    Percentual no intervalo (0, 100].
    """

    def __init__(self, **kwargs):
        kwargs.setdefault("max_digits", None)
        kwargs.setdefault("decimal_places", None)
        kwargs.setdefault("max_value", Decimal("100"))
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        valor = super().to_internal_value(data)
        if valor <= 0:
            raise serializers.ValidationError("Percentual deve ser maior que zero.")
        return valor


class ValorMonetarioField(serializers.DecimalField):
    def __init__(self, **kwargs):
        kwargs.setdefault("max_digits", None)
        kwargs.setdefault("decimal_places", None)
        super().__init__(**kwargs)


# ----------------------------------------------------------------------
# Regras de promoção
# ----------------------------------------------------------------------
class RegraLeveXGanheYSerializer(serializers.Serializer):
    buy = serializers.IntegerField(min_value=1)
    get = serializers.IntegerField(min_value=1)
    product_ids = ListaTextoField(required=False, allow_empty=True, allow_null=True)
    category_names = ListaTextoField(required=False, allow_empty=True, allow_null=True)


class RegraFreteGratisSerializer(serializers.Serializer):
    min_units = serializers.IntegerField(min_value=1)
    locations = ListaTextoField(required=False, allow_empty=True, allow_null=True)


class RegraDescontoValorMinimoSerializer(serializers.Serializer):
    min_amount = ValorMonetarioField()
    percentage = PercentualField()

    def validate_min_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Valor mínimo deve ser maior que zero.")
        return value


# ----------------------------------------------------------------------
# Regras de condição de venda
# ----------------------------------------------------------------------
class RegraPrazoDiasSerializer(serializers.Serializer):
    days = serializers.IntegerField(min_value=1)


class RegraDescontoCondicaoSerializer(serializers.Serializer):
    percentage = PercentualField()


class RegraParcelamentoSerializer(serializers.Serializer):
    installments = serializers.IntegerField(min_value=1)


class RegraPagamentoDivididoSerializer(serializers.Serializer):
    initial_percentage = PercentualField(max_value=Decimal("99"))
    remaining_days = serializers.IntegerField(min_value=1)


class RegraPagamentoNaEntregaSerializer(serializers.Serializer):
    pass


class RegraPedidoMinimoSerializer(serializers.Serializer):
    minimum = ValorMonetarioField(min_value=Decimal("0"))
