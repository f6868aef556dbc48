# commons/views/commons_views.py

import logging
from datetime import datetime, timezone

from django.core.cache import cache
from django.http import JsonResponse

logger = logging.getLogger(__name__)

CHAVE_READINESS = "commons:readiness"


def liveness(request):
    return JsonResponse({"ok": True})


def readiness(request):
    """
    O único recurso externo do serviço é o cache onde ficam os carrinhos
    persistidos; se ele não responde, o serviço não está pronto.
    """
    agora = datetime.now(timezone.utc).isoformat()
    cache.set(CHAVE_READINESS, agora, 10)
    if cache.get(CHAVE_READINESS) != agora:
        logger.error("Readiness falhou: cache de carrinhos indisponível.")
        return JsonResponse({"ok": False, "cache": False}, status=503)
    return JsonResponse({"ok": True, "cache": True})


def time_now(request):
    now = datetime.now(timezone.utc).astimezone()
    return JsonResponse({"now": now.isoformat()})
