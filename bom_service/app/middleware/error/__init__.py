"""
Error handling middleware package for BOM Service.
"""

from .error_handler import BomServiceErrorHandler, setup_bom_error_handling

__all__ = ["BomServiceErrorHandler", "setup_bom_error_handling"]
