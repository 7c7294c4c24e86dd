from .credentials import ExchangeCredentials
from .direction import Direction
from .order_result import OrderResult, OrderSide

__all__ = ["Direction", "ExchangeCredentials", "OrderResult", "OrderSide"]
