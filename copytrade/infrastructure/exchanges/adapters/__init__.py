from .bitget_adapter import BitgetAdapter, to_venue_symbol

__all__ = ["BitgetAdapter", "to_venue_symbol"]
