# vendas/api/v1/urls.py

from django.urls import path

from vendas.api.v1.views import CalcularCarrinhoView, ResumoPedidoView

urlpatterns = [
    path("calcular/", CalcularCarrinhoView.as_view(), name="calcular"),
    path("resumo/", ResumoPedidoView.as_view(), name="resumo"),
]
