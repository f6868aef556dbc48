# tests/promocoes/test_avaliador_condicoes.py

from decimal import Decimal

from promocoes.services.avaliador_condicoes import avaliar_condicoes_venda, descrever_termos


def test_condicoes_somente_termos_nao_alteram_valores(condicao_factory):
    condicoes = [
        condicao_factory({"type": "net_days", "days": 30}),
        condicao_factory({"type": "installments", "installments": 3}),
        condicao_factory({"type": "split_payment", "initial_percentage": 50, "remaining_days": 30}),
        condicao_factory({"type": "cash_on_delivery"}),
    ]

    resultado = avaliar_condicoes_venda(Decimal("10000"), condicoes)

    assert resultado.valor_desconto == Decimal("0")
    assert resultado.verificacao_pedido_minimo is None
    assert [c.condicao.id for c in resultado.aplicadas] == [c.id for c in condicoes]
    assert [c.descricao_termos for c in resultado.aplicadas] == [
        "Pagamento em 30 dias",
        "3 parcelas",
        "50% à vista, restante em 30 dias",
        "Pagamento na entrega",
    ]


def test_desconto_de_condicao_vale_o_maior(condicao_factory):
    cinco = condicao_factory({"type": "discount", "percentage": 5})
    oito = condicao_factory({"type": "discount", "percentage": 8})

    resultado = avaliar_condicoes_venda(Decimal("10000"), [oito, cinco])

    assert resultado.valor_desconto == Decimal("800")
    assert len(resultado.aplicadas) == 2
    assert resultado.aplicadas[0].valor_desconto == Decimal("800")
    assert resultado.aplicadas[1].valor_desconto == Decimal("500")


def test_pedido_minimo_nao_altera_preco_e_gera_verificacao(condicao_factory):
    minimo = condicao_factory({"type": "min_order_amount", "minimum": 20000})

    resultado = avaliar_condicoes_venda(Decimal("15000"), [minimo])

    assert resultado.valor_desconto == Decimal("0")
    verificacao = resultado.verificacao_pedido_minimo
    assert verificacao.valido is False
    assert verificacao.minimo == Decimal("20000")
    assert verificacao.atual == Decimal("15000")


def test_pedido_minimo_atingido_e_maior_minimo_prevalece(condicao_factory):
    condicoes = [
        condicao_factory({"type": "min_order_amount", "minimum": 1000}),
        condicao_factory({"type": "min_order_amount", "minimum": 5000}),
    ]

    resultado = avaliar_condicoes_venda(Decimal("5000"), condicoes)

    assert resultado.verificacao_pedido_minimo.valido is True
    assert resultado.verificacao_pedido_minimo.minimo == Decimal("5000")


def test_condicao_invalida_e_ignorada(condicao_factory):
    condicoes = [
        condicao_factory({"type": "discount"}),
        condicao_factory({"type": "barter", "percentage": 40}),
        condicao_factory(None),
    ]

    resultado = avaliar_condicoes_venda(Decimal("10000"), condicoes)

    assert resultado.aplicadas == []
    assert resultado.valor_desconto == Decimal("0")


def test_descricao_de_regra_personalizada_usa_nome(condicao_factory):
    condicao = condicao_factory({"type": "barter"}, nome="Permuta")

    assert descrever_termos(condicao) == "Permuta"
