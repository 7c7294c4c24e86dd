"""RiskDecision value object - результат Risk Gate."""

from dataclasses import dataclass

from copytrade.domain.shared import ValueObject


@dataclass(frozen=True)
class RiskDecision(ValueObject):
    """Allowed або blocked з причиною."""

    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> "RiskDecision":
        return cls(allowed=True)

    @classmethod
    def block(cls, reason: str) -> "RiskDecision":
        return cls(allowed=False, reason=reason)
