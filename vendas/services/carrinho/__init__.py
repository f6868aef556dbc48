# vendas/services/carrinho/__init__.py
