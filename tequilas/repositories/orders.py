"""
Order and user repositories.
"""

from datetime import datetime
from enum import Flag, auto
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from tequilas.models import Order, Role, User
from tequilas.repositories.base import Repository


class OrderInclude(Flag):
    NONE = 0
    ITEMS = auto()


class UserInclude(Flag):
    NONE = 0


class OrderRepository(Repository[Order, OrderInclude]):
    model = Order
    include_type = OrderInclude

    def _loader_options(self, includes: OrderInclude) -> list[Any]:
        options = []
        if OrderInclude.ITEMS in includes:
            options.append(selectinload(Order.items))
        return options

    async def list_for_user(self, user_id: int) -> list[Order]:
        """All orders of one user with their items, newest first."""
        query = (
            self._select(OrderInclude.ITEMS)
            .where(Order.user_id == user_id)
            .order_by(Order.order_date.desc(), Order.id.desc())
        )
        result = await self.db.execute(query)
        return list(result.scalars().unique().all())

    async def list_between(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Order]:
        """
        Orders with their items, newest first.

        Args:
            start: Inclusive lower bound on order_date
            end: Exclusive upper bound on order_date
        """
        query = self._select(OrderInclude.ITEMS)
        if start is not None:
            query = query.where(Order.order_date >= start)
        if end is not None:
            query = query.where(Order.order_date < end)
        query = query.order_by(Order.order_date.desc(), Order.id.desc())
        result = await self.db.execute(query)
        return list(result.scalars().unique().all())


class UserRepository(Repository[User, UserInclude]):
    model = User
    include_type = UserInclude

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalars().first()

    async def find_by_user_name(self, user_name: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(func.lower(User.user_name) == user_name.strip().lower())
        )
        return result.scalars().first()

    async def get_or_create_role(self, name: str) -> Role:
        result = await self.db.execute(select(Role).where(Role.name == name))
        role = result.scalars().first()
        if role is None:
            role = Role(name=name)
            self.db.add(role)
            await self.db.flush()
        return role
