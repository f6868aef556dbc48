# vendas/api/v1/views.py

import logging
from uuid import uuid4

from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from vendas.serializers.carrinho_serializers import (
    CalcularCarrinhoInputSerializer,
    LinhaCarrinhoSerializer,
    ResultadoPrecificacaoOutputSerializer,
    ResumoPedidoInputSerializer,
    construir_escopo,
    construir_linhas,
)
from vendas.services.carrinho.dto import InstantaneoCarrinho
from vendas.services.carrinho.precificacao_service import (
    obter_limite_preco_volume,
    precificar_carrinho,
)
from vendas.services.carrinho.resumo_pedido_service import montar_resumo_pedido
from vendas.services.exceptions import CarrinhoError

logger = logging.getLogger(__name__)


def _request_id(request) -> str:
    return getattr(request, "request_id", None) or request.headers.get(
        "X-Request-ID"
    ) or str(uuid4())


def _erro_validacao(serializer, request_id: str) -> Response:
    return Response(
        {
            "code": "ERRO_VALIDACAO_CARRINHO",
            "detail": serializer.errors,
            "request_id": request_id,
        },
        status=status.HTTP_400_BAD_REQUEST,
    )


class CalcularCarrinhoView(APIView):
    """
    Calcula o carrinho (subtotal, descontos, IVA, bonificações e total)
    para as linhas e o escopo comercial informados.

    Stateless: não grava nada. O cliente envia as linhas atuais e o escopo
    (promoções/condições do acordo) e recebe o ResultadoPrecificacao.

    Códigos de resposta:
    - 200 OK: cálculo realizado.
    - 400 BAD REQUEST: payload de linhas/escopo inválido.
    """

    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        request_id = _request_id(request)

        serializer = CalcularCarrinhoInputSerializer(data=request.data)
        if not serializer.is_valid():
            logger.warning(
                "HTTP carrinho: payload inválido para cálculo. erros=%s request_id=%s",
                serializer.errors,
                request_id,
            )
            return _erro_validacao(serializer, request_id)

        linhas = construir_linhas(serializer.validated_data["linhas"])
        escopo = construir_escopo(serializer.validated_data["escopo"])

        resultado = precificar_carrinho(
            linhas, escopo, limite_preco_volume=obter_limite_preco_volume()
        )

        logger.info(
            "HTTP carrinho: cálculo realizado. acordo_id=%s itens=%s total=%s request_id=%s",
            escopo.acordo_id,
            resultado.total_itens,
            resultado.total_preco,
            request_id,
        )

        return Response(
            {
                "linhas": [LinhaCarrinhoSerializer(linha).data for linha in linhas],
                "resultado": ResultadoPrecificacaoOutputSerializer(resultado).data,
                "request_id": request_id,
            },
            status=status.HTTP_200_OK,
        )


class ResumoPedidoView(APIView):
    """
    Gera o payload de checkout (valores em centavos + mensagem do pedido)
    que o cliente envia ao serviço de pedidos.

    Códigos de resposta:
    - 200 OK: resumo gerado (pode conter aviso de pedido mínimo).
    - 400 BAD REQUEST: payload inválido.
    - 422 UNPROCESSABLE ENTITY: carrinho vazio ou pedido mínimo não atingido
      (com a política de bloqueio ativa).
    """

    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        request_id = _request_id(request)

        serializer = ResumoPedidoInputSerializer(data=request.data)
        if not serializer.is_valid():
            return _erro_validacao(serializer, request_id)

        dados = serializer.validated_data
        linhas = construir_linhas(dados["linhas"])
        escopo = construir_escopo(dados["escopo"])

        instantaneo = InstantaneoCarrinho(
            linhas=linhas,
            escopo=escopo,
            resultado=precificar_carrinho(
                linhas, escopo, limite_preco_volume=obter_limite_preco_volume()
            ),
        )

        try:
            resumo = montar_resumo_pedido(
                instantaneo,
                cliente_id=dados.get("cliente_id"),
                cliente_nome=dados.get("cliente_nome", ""),
                observacoes=dados.get("observacoes", ""),
            )
        except CarrinhoError as exc:
            logger.warning(
                "HTTP carrinho: checkout recusado. code=%s detail=%s request_id=%s",
                exc.code,
                exc.mensagem,
                request_id,
            )
            return Response(
                {"code": exc.code, "detail": exc.mensagem, "request_id": request_id},
                status=status.HTTP_422_UNPROCESSABLE_ENTITY,
            )

        return Response(
            {
                "acordo_id": resumo.acordo_id,
                "cliente_id": resumo.cliente_id,
                "cliente_nome": resumo.cliente_nome,
                "observacoes": resumo.observacoes,
                "linhas": [LinhaCarrinhoSerializer(linha).data for linha in resumo.linhas],
                "total_itens": resumo.total_itens,
                "subtotal": str(resumo.subtotal),
                "desconto_promocoes": str(resumo.desconto_promocoes),
                "desconto_condicoes": str(resumo.desconto_condicoes),
                "subtotal_apos_descontos": str(resumo.subtotal_apos_descontos),
                "valor_iva": str(resumo.valor_iva),
                "total_preco": str(resumo.total_preco),
                "bonificacoes": resumo.bonificacoes,
                "promocoes_aplicadas": resumo.promocoes_aplicadas,
                "condicoes_aplicadas": resumo.condicoes_aplicadas,
                "aviso_pedido_minimo": resumo.aviso_pedido_minimo,
                "mensagem": resumo.mensagem,
                "request_id": request_id,
            },
            status=status.HTTP_200_OK,
        )
