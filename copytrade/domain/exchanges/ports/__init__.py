from .exchange_port import ExchangePort

__all__ = ["ExchangePort"]
