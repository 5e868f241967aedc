# app/models.py

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import BigInteger, Column, Integer, String, Numeric, DateTime, ForeignKey
from sqlalchemy.types import TypeDecorator
from .database import Base

CENT = Decimal("0.01")


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_user_id():
    return uuid.uuid4().hex


class Money(TypeDecorator):
    """NUMERIC(18, 2) money column.

    SQLite has no exact decimal storage (NUMERIC ends up as REAL), so there
    the amount is kept as integer cents.
    """

    impl = Numeric(18, 2, asdecimal=True)
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "sqlite":
            return dialect.type_descriptor(BigInteger())
        return dialect.type_descriptor(self.impl)

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = Decimal(value).quantize(CENT)
        if dialect.name == "sqlite":
            return int(value.scaleb(2))
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if dialect.name == "sqlite":
            return Decimal(value).scaleb(-2)
        return Decimal(value).quantize(CENT)


class User(Base):
    __tablename__ = "users"

    # opaque id handed out to the rest of the app
    id = Column(String(32), primary_key=True, default=new_user_id)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    password = Column(String, nullable=False)


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(32), ForeignKey("users.id"), nullable=False, index=True)
    description = Column(String, nullable=False)
    amount = Column(Money(), nullable=False)
    category = Column(String, nullable=False)
    date = Column(DateTime, nullable=False, default=utcnow)
    version_id = Column(Integer, nullable=False)

    # AUTOINCREMENT keeps SQLite from handing out a deleted id again
    __table_args__ = {"sqlite_autoincrement": True}
    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self):
        return f"<Expense id={self.id} user_id={self.user_id}>"
