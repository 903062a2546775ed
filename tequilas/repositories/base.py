"""
Generic Repository

Narrow data-access interface parameterized per entity type. Repositories
never commit and carry no business rules; services own the transaction and
decide what a missing row means.

Eager loading is requested with a per-entity Flag enum (e.g.
ProductInclude.CATEGORY | ProductInclude.INGREDIENTS) that each subclass
translates into loader options.

Version: 1.0.0
"""

from enum import Flag
from typing import Any, Generic, Iterable, Optional, Sequence, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from tequilas.database import Base

ModelT = TypeVar("ModelT", bound=Base)
IncludeT = TypeVar("IncludeT", bound=Flag)


class Repository(Generic[ModelT, IncludeT]):
    """
    CRUD accessor for one mapped class.

    Subclasses set `model`, `include_type` and override `_loader_options`.

    Example:
        >>> repo = ProductRepository(db)
        >>> product = await repo.get_by_id(1, ProductInclude.CATEGORY)
    """

    model: type[ModelT]
    include_type: type[IncludeT]

    def __init__(self, db: AsyncSession):
        self.db = db

    def _loader_options(self, includes: IncludeT) -> list[Any]:
        """Translate include flags into SQLAlchemy loader options."""
        return []

    def _select(self, includes: Optional[IncludeT] = None) -> Select:
        query = select(self.model)
        if includes:
            query = query.options(*self._loader_options(includes))
        return query

    async def get_all(
        self,
        includes: Optional[IncludeT] = None,
        order_by: Optional[Sequence[Any]] = None,
    ) -> list[ModelT]:
        query = self._select(includes)
        query = query.order_by(*(order_by or [self.model.id]))
        result = await self.db.execute(query)
        return list(result.scalars().unique().all())

    async def get_by_id(
        self,
        entity_id: int,
        includes: Optional[IncludeT] = None,
        reload: bool = False,
    ) -> Optional[ModelT]:
        """
        Fetch one row by primary key.

        Args:
            entity_id: Primary key
            includes: Relations to load eagerly
            reload: Overwrite an instance already in the session (use after a commit)
        """
        query = self._select(includes).where(self.model.id == entity_id)
        if reload:
            query = query.execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalars().unique().one_or_none()

    async def get_many(
        self,
        ids: Iterable[int],
        includes: Optional[IncludeT] = None,
    ) -> list[ModelT]:
        """Fetch every row whose id is in `ids` in a single query."""
        id_list = list(set(ids))
        if not id_list:
            return []
        query = self._select(includes).where(self.model.id.in_(id_list)).order_by(self.model.id)
        result = await self.db.execute(query)
        return list(result.scalars().unique().all())

    async def add(self, entity: ModelT) -> ModelT:
        """Stage a new row and flush so its primary key is assigned."""
        self.db.add(entity)
        await self.db.flush()
        return entity

    async def delete(self, entity: ModelT) -> None:
        await self.db.delete(entity)
        await self.db.flush()
