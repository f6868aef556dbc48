# vendas/services/carrinho/carrinho_sessao.py

from __future__ import annotations

import logging
import threading
from decimal import Decimal
from typing import Callable, List, Optional

from django.conf import settings

from vendas.services.carrinho.dto import (
    EscopoComercial,
    InstantaneoCarrinho,
    LinhaCarrinho,
    ProdutoPreco,
    RegistroDuravelCarrinho,
    ResultadoPrecificacao,
)
from vendas.services.carrinho.persistencia import desserializar_registro
from vendas.services.carrinho.precificacao_service import (
    obter_limite_preco_volume,
    precificar_carrinho,
)

logger = logging.getLogger(__name__)

Assinante = Callable[[InstantaneoCarrinho], None]


def escopo_padrao() -> EscopoComercial:
    return EscopoComercial(
        acordo_id=None,
        precos_incluem_iva=getattr(settings, "CARRINHO_PRECOS_INCLUEM_IVA_PADRAO", True),
        percentual_iva=Decimal(
            str(getattr(settings, "CARRINHO_PERCENTUAL_IVA_PADRAO", "21"))
        ),
    )


class CarrinhoSessao:
    """
    Estado do carrinho de UMA sessão de checkout.

    - É dono exclusivo das linhas e do escopo comercial ativo.
    - O ResultadoPrecificacao é uma projeção: toda mutação executa o ciclo
      mutar -> recalcular -> publicar sob o mesmo lock, então linhas e
      resultado nunca divergem.
    - Troca de acordo zera o carrinho; mesmo acordo só recalcula.
    - Só o registro durável (linhas, acordo, flags de IVA) é persistido;
      promoções e condições voltam via definir_escopo após a restauração.
    """

    def __init__(
        self,
        escopo: Optional[EscopoComercial] = None,
        limite_preco_volume: Optional[int] = None,
    ):
        self._lock = threading.RLock()
        self._linhas: List[LinhaCarrinho] = []
        self._escopo = escopo if escopo is not None else escopo_padrao()
        self._resultado = ResultadoPrecificacao.vazio()
        self._assinantes: List[Assinante] = []
        # resolvido uma vez por sessão
        self._limite_preco_volume = (
            limite_preco_volume
            if limite_preco_volume is not None
            else obter_limite_preco_volume()
        )

    # ------------------------------------------------------------------
    # Leitura
    # ------------------------------------------------------------------
    @property
    def linhas(self) -> tuple:
        with self._lock:
            return tuple(self._linhas)

    @property
    def escopo(self) -> EscopoComercial:
        with self._lock:
            return self._escopo

    @property
    def resultado(self) -> ResultadoPrecificacao:
        with self._lock:
            return self._resultado

    def instantaneo(self) -> InstantaneoCarrinho:
        with self._lock:
            return InstantaneoCarrinho(
                linhas=tuple(self._linhas),
                escopo=self._escopo,
                resultado=self._resultado,
            )

    def quantidade_item(self, produto_id: str) -> int:
        with self._lock:
            linha = self._buscar(produto_id)
            return linha.quantidade if linha is not None else 0

    def assinar(self, callback: Assinante) -> Callable[[], None]:
        """
        Registra um observador chamado após cada publicação.
        Retorna a função para cancelar a assinatura.
        """
        with self._lock:
            self._assinantes.append(callback)

        def cancelar() -> None:
            with self._lock:
                if callback in self._assinantes:
                    self._assinantes.remove(callback)

        return cancelar

    # ------------------------------------------------------------------
    # Escopo comercial
    # ------------------------------------------------------------------
    def definir_escopo(self, novo_escopo: EscopoComercial) -> None:
        with self._lock:
            acordo_anterior = self._escopo.acordo_id
            self._escopo = novo_escopo

            if novo_escopo.acordo_id != acordo_anterior:
                self._linhas = []
                self._resultado = ResultadoPrecificacao.vazio()
                logger.info(
                    "carrinho_reset_acordo",
                    extra={
                        "event": "carrinho_reset_acordo",
                        "acordo_anterior": acordo_anterior,
                        "acordo_novo": novo_escopo.acordo_id,
                    },
                )
                self._publicar()
                return

            logger.info(
                "Escopo comercial atualizado sem troca de acordo. acordo_id=%s "
                "iva=%s promocoes=%s condicoes=%s",
                novo_escopo.acordo_id,
                novo_escopo.percentual_iva,
                len(novo_escopo.promocoes),
                len(novo_escopo.condicoes_venda),
            )
            self._recalcular_e_publicar()

    # ------------------------------------------------------------------
    # Mutações de linhas
    # ------------------------------------------------------------------
    def adicionar_item(self, produto: ProdutoPreco, quantidade: int = 1) -> None:
        """
        Soma a quantidade à linha do produto (ou cria a linha).
        Se o resultado for <= 0, a linha é removida.
        """
        with self._lock:
            linha = self._buscar(produto.id)
            if linha is None:
                novas = self._linhas + [LinhaCarrinho(produto=produto, quantidade=quantidade)]
            else:
                novas = [
                    it.com_quantidade(max(0, it.quantidade + quantidade))
                    if it.produto.id == produto.id
                    else it
                    for it in self._linhas
                ]

            self._linhas = [it for it in novas if it.quantidade > 0]
            logger.info(
                "Item adicionado ao carrinho. produto_id=%s qtd=%s qtd_final=%s",
                produto.id,
                quantidade,
                self.quantidade_item(produto.id),
            )
            self._recalcular_e_publicar()

    def remover_item(self, produto_id: str) -> None:
        """
        Decrementa uma unidade; remove a linha quando chega a zero.
        Produto fora do carrinho: nada acontece.
        """
        with self._lock:
            linha = self._buscar(produto_id)
            if linha is None:
                logger.debug("Remoção ignorada, produto fora do carrinho. produto_id=%s", produto_id)
                return

            if linha.quantidade > 1:
                self._linhas = [
                    it.com_quantidade(it.quantidade - 1) if it.produto.id == produto_id else it
                    for it in self._linhas
                ]
            else:
                self._linhas = [it for it in self._linhas if it.produto.id != produto_id]

            logger.info(
                "Item removido do carrinho. produto_id=%s qtd_final=%s",
                produto_id,
                self.quantidade_item(produto_id),
            )
            self._recalcular_e_publicar()

    def alterar_quantidade(self, produto_id: str, quantidade: int) -> None:
        """
        Define a quantidade absoluta. Quantidade <= 0 remove a linha.
        """
        with self._lock:
            if quantidade <= 0:
                self._linhas = [it for it in self._linhas if it.produto.id != produto_id]
            else:
                self._linhas = [
                    it.com_quantidade(quantidade) if it.produto.id == produto_id else it
                    for it in self._linhas
                ]

            logger.info(
                "Quantidade alterada no carrinho. produto_id=%s nova_qtd=%s",
                produto_id,
                quantidade,
            )
            self._recalcular_e_publicar()

    def limpar(self) -> None:
        with self._lock:
            self._linhas = []
            self._resultado = ResultadoPrecificacao.vazio()
            logger.info("Carrinho limpo. acordo_id=%s", self._escopo.acordo_id)
            self._publicar()

    # ------------------------------------------------------------------
    # Persistência
    # ------------------------------------------------------------------
    def registro_duravel(self) -> RegistroDuravelCarrinho:
        with self._lock:
            return RegistroDuravelCarrinho(
                acordo_id=self._escopo.acordo_id,
                precos_incluem_iva=self._escopo.precos_incluem_iva,
                percentual_iva=self._escopo.percentual_iva,
                linhas=tuple(self._linhas),
            )

    @classmethod
    def restaurar(cls, registro) -> "CarrinhoSessao":
        """
        Reconstrói a sessão a partir do registro persistido.

        Aceita RegistroDuravelCarrinho, dict ou JSON. Promoções e condições
        NÃO são restauradas (podem ter mudado no servidor): o resultado é
        recalculado sem regras até o próximo definir_escopo. Conteúdo
        corrompido resulta em carrinho vazio.
        """
        if not isinstance(registro, RegistroDuravelCarrinho):
            registro = desserializar_registro(registro)

        if registro is None:
            logger.warning("Restauração de carrinho falhou; iniciando carrinho vazio.")
            return cls()

        sessao = cls(
            EscopoComercial(
                acordo_id=registro.acordo_id,
                precos_incluem_iva=registro.precos_incluem_iva,
                percentual_iva=registro.percentual_iva,
            )
        )
        with sessao._lock:
            sessao._linhas = [it for it in registro.linhas if it.quantidade > 0]
            sessao._recalcular_e_publicar()

        logger.info(
            "Carrinho restaurado. acordo_id=%s linhas=%s",
            registro.acordo_id,
            len(sessao._linhas),
        )
        return sessao

    # ------------------------------------------------------------------
    # Internos
    # ------------------------------------------------------------------
    def _buscar(self, produto_id: str) -> Optional[LinhaCarrinho]:
        for linha in self._linhas:
            if linha.produto.id == produto_id:
                return linha
        return None

    def _recalcular_e_publicar(self) -> None:
        self._resultado = precificar_carrinho(
            self._linhas, self._escopo, limite_preco_volume=self._limite_preco_volume
        )
        self._publicar()

    def _publicar(self) -> None:
        instantaneo = self.instantaneo()
        for callback in list(self._assinantes):
            callback(instantaneo)
