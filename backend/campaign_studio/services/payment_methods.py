"""
Payment method provider interface.

The wizard reads the list once when the brand reaches the payment step and
preselects the default card. Swap the implementation to connect a real
billing backend.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from campaign_studio.db import AsyncSessionLocal
from campaign_studio.models import PaymentMethod


@dataclass(frozen=True)
class PaymentMethodInfo:
    id: str
    brand: str
    last4: str
    expiry: str
    is_default: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "brand": self.brand,
            "last4": self.last4,
            "expiry": self.expiry,
            "is_default": self.is_default,
        }


DEMO_PAYMENT_METHODS: tuple[PaymentMethodInfo, ...] = (
    PaymentMethodInfo(id="pm_1", brand="visa", last4="4242", expiry="12/25", is_default=True),
    PaymentMethodInfo(id="pm_2", brand="mastercard", last4="5555", expiry="10/26", is_default=False),
)


def default_payment_method_id(methods: list[PaymentMethodInfo]) -> str | None:
    for method in methods:
        if method.is_default:
            return method.id
    return None


class PaymentMethodProvider(ABC):
    """Abstract source of the brand's saved payment methods."""

    @abstractmethod
    async def list_payment_methods(self) -> list[PaymentMethodInfo]:
        ...


class StaticPaymentMethodProvider(PaymentMethodProvider):
    """Fixed list of demo cards."""

    def __init__(self, methods: tuple[PaymentMethodInfo, ...] | list[PaymentMethodInfo] = DEMO_PAYMENT_METHODS):
        self._methods = list(methods)

    async def list_payment_methods(self) -> list[PaymentMethodInfo]:
        return list(self._methods)


class SqlPaymentMethodProvider(PaymentMethodProvider):
    """Reads payment methods from the `payment_methods` table."""

    def __init__(self, session_factory: Callable[[], AsyncSession] = AsyncSessionLocal):
        self._session_factory = session_factory

    async def list_payment_methods(self) -> list[PaymentMethodInfo]:
        async with self._session_factory() as session:
            res = await session.execute(
                select(PaymentMethod).order_by(PaymentMethod.position, PaymentMethod.id)
            )
            return [
                PaymentMethodInfo(
                    id=row.id,
                    brand=row.brand,
                    last4=row.last4,
                    expiry=row.expiry,
                    is_default=row.is_default,
                )
                for row in res.scalars().all()
            ]
