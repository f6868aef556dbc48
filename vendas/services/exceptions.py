# vendas/services/exceptions.py

class CarrinhoError(Exception):
    """
    Erro genérico de checkout do carrinho.
    Base para erros específicos.
    """

    code = "ERRO_CARRINHO"

    def __init__(self, mensagem: str):
        self.mensagem = mensagem
        super().__init__(mensagem)


class CarrinhoVazioError(CarrinhoError):
    """
    Não há itens no carrinho para enviar o pedido.
    """

    code = "CARRINHO_VAZIO"

    def __init__(self, mensagem: str = "O carrinho está vazio."):
        super().__init__(mensagem)


class PedidoMinimoNaoAtingidoError(CarrinhoError):
    """
    Subtotal abaixo do pedido mínimo exigido pela condição de venda do acordo.
    Só é lançado quando a política de bloqueio está ativa.
    """

    code = "PEDIDO_MINIMO_NAO_ATINGIDO"

    def __init__(self, mensagem: str, minimo=None, atual=None):
        self.minimo = minimo
        self.atual = atual
        super().__init__(mensagem)
