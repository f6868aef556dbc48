# vendas/services/carrinho/persistencia.py

from __future__ import annotations

import json
import logging
from typing import Optional

from django.conf import settings
from django.core.cache import cache
from django.core.cache.backends.base import DEFAULT_TIMEOUT

from vendas.serializers.carrinho_serializers import (
    RegistroDuravelSerializer,
    construir_registro_duravel,
)
from vendas.services.carrinho.dto import RegistroDuravelCarrinho

logger = logging.getLogger(__name__)

PREFIXO_CHAVE = "carrinho"


def serializar_registro(registro: RegistroDuravelCarrinho) -> str:
    return json.dumps(RegistroDuravelSerializer(registro).data, ensure_ascii=False)


def desserializar_registro(conteudo) -> Optional[RegistroDuravelCarrinho]:
    """
    Converte o conteúdo persistido (str JSON ou dict) no registro durável.

    Retorna None quando o conteúdo está corrompido ou incompleto; o chamador
    deve cair para um carrinho vazio.
    """
    if conteudo is None:
        return None

    if isinstance(conteudo, (str, bytes)):
        try:
            conteudo = json.loads(conteudo)
        except ValueError as exc:
            logger.warning("Registro de carrinho com JSON inválido descartado. erro=%s", exc)
            return None

    if not isinstance(conteudo, dict):
        logger.warning(
            "Registro de carrinho com formato inesperado descartado. tipo=%s",
            type(conteudo).__name__,
        )
        return None

    serializer = RegistroDuravelSerializer(data=conteudo)
    if not serializer.is_valid():
        logger.warning(
            "Registro de carrinho incompleto descartado. erros=%s",
            dict(serializer.errors),
        )
        return None

    return construir_registro_duravel(serializer.validated_data)


class RepositorioCarrinhoCache:
    """
    Guarda o registro durável do carrinho no cache do Django, por chave de
    sessão. Nunca guarda regras nem valores derivados.
    """

    def __init__(self, backend=None, timeout: Optional[int] = None):
        self.backend = backend if backend is not None else cache
        self.timeout = (
            timeout
            if timeout is not None
            else getattr(settings, "CARRINHO_CACHE_TIMEOUT", DEFAULT_TIMEOUT)
        )

    @staticmethod
    def _chave(chave_sessao: str) -> str:
        return f"{PREFIXO_CHAVE}:{chave_sessao}"

    def salvar(self, chave_sessao: str, registro: RegistroDuravelCarrinho) -> None:
        self.backend.set(
            self._chave(chave_sessao), serializar_registro(registro), self.timeout
        )
        logger.info(
            "Carrinho persistido. chave=%s acordo_id=%s linhas=%s",
            chave_sessao,
            registro.acordo_id,
            len(registro.linhas),
        )

    def carregar(self, chave_sessao: str) -> Optional[RegistroDuravelCarrinho]:
        conteudo = self.backend.get(self._chave(chave_sessao))
        if conteudo is None:
            return None
        return desserializar_registro(conteudo)

    def remover(self, chave_sessao: str) -> None:
        self.backend.delete(self._chave(chave_sessao))
