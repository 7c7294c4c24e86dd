"""SQLAlchemy Base model."""

from sqlalchemy import BigInteger, Integer, Numeric
from sqlalchemy.orm import DeclarativeBase

# SQLite автоінкрементить тільки INTEGER PRIMARY KEY
BigIntPK = BigInteger().with_variant(Integer, "sqlite")

# Гроші і кількості: Decimal, ніколи float
Money = Numeric(precision=28, scale=10, asdecimal=True)


class Base(DeclarativeBase):
    """Base class для всіх ORM models."""

    pass
