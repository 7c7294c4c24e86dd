from .position_sizer import PositionSizer
from .risk_gate import (
    DAILY_LOSS_LIMIT_REACHED,
    PAIR_NOT_ALLOWED,
    SETTINGS_INACTIVE,
    RiskGate,
)

__all__ = [
    "PositionSizer",
    "RiskGate",
    "SETTINGS_INACTIVE",
    "PAIR_NOT_ALLOWED",
    "DAILY_LOSS_LIMIT_REACHED",
]
