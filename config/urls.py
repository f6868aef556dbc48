# config/urls.py
from django.urls import path, include

from drf_spectacular.views import SpectacularAPIView

urlpatterns = [
    path("api/v1/commons/", include("commons.urls")),
    path(
        "api/v1/carrinho/",
        include(("vendas.api.v1.urls", "carrinho"), namespace="carrinho"),
    ),
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
]
