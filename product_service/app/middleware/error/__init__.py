from .error_handler import ProductServiceErrorHandler, setup_product_error_handling

__all__ = ["ProductServiceErrorHandler", "setup_product_error_handling"]
