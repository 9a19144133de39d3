from storefront.api.routes import client_router, discount_router, order_router, product_router

__all__ = ["client_router", "discount_router", "order_router", "product_router"]
