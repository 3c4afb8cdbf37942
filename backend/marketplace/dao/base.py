"""
Generic data access layer.

Each table is reached through the same small set of filter-driven
operations so services never build SQL themselves: insert, find one or
many by equality filters, update by filter, delete by filter, count.
"""

from typing import Any, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseDAO(Generic[ModelType]):
    """
    Filter-driven CRUD over one mapped model.

    Subclasses bind ``model`` and add table-specific queries.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    def _conditions(self, filters: dict) -> list:
        """
        Turn keyword filters into equality clauses.

        Raises:
            AttributeError: A filter names a column the model lacks. Unknown
                filters are never dropped, since a missing owner filter
                would match every row.
        """
        conditions = []
        for field_name, value in filters.items():
            if not hasattr(self.model, field_name):
                raise AttributeError(f"{self.model.__name__} has no field '{field_name}'")
            conditions.append(getattr(self.model, field_name) == value)
        return conditions

    async def create(self, **kwargs: Any) -> ModelType:
        """
        Add a row and flush it so server defaults (id, timestamps) are loaded.

        Raises:
            IntegrityError: On unique or foreign key violations
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def get_by_id(self, id: int) -> Optional[ModelType]:
        result = await self.session.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def find_one(self, **filters: Any) -> Optional[ModelType]:
        """First row matching every filter, or None."""
        query = select(self.model).where(*self._conditions(filters)).limit(1)
        result = await self.session.execute(query)
        return result.scalars().first()

    async def find_many(
        self,
        skip: int = 0,
        limit: Optional[int] = 100,
        order_by: Optional[Sequence[Any]] = None,
        **filters: Any,
    ) -> List[ModelType]:
        """
        Rows matching every filter.

        Args:
            skip: Offset into the ordered result
            limit: Page size; None returns everything after ``skip``
            order_by: Column expressions, applied in order
            **filters: Column equality filters
        """
        query = select(self.model).where(*self._conditions(filters))

        if order_by:
            query = query.order_by(*order_by)

        query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def update(self, id: int, **kwargs: Any) -> Optional[ModelType]:
        """Set ``kwargs`` on the row with this id; None when it doesn't exist."""
        return await self.update_by_filter(kwargs, id=id)

    async def update_by_filter(self, values: dict, **filters: Any) -> Optional[ModelType]:
        """
        Write ``values`` to the row matching every filter, in one UPDATE.

        Guards such as owner or expected status belong in ``filters``: when
        the guard no longer holds nothing is written and None comes back.
        """
        result = await self.session.execute(
            update(self.model)
            .where(*self._conditions(filters))
            .values(**values)
            .returning(self.model)
        )
        instance = result.scalars().first()
        if instance is not None:
            await self.session.refresh(instance)
        return instance

    async def delete(self, id: int) -> bool:
        return await self.delete_by_filter(id=id)

    async def delete_by_filter(self, **filters: Any) -> bool:
        """Delete rows matching every filter; False when none matched."""
        result = await self.session.execute(
            delete(self.model).where(*self._conditions(filters))
        )
        return result.rowcount > 0

    async def count(self, **filters: Any) -> int:
        query = select(func.count()).select_from(self.model).where(*self._conditions(filters))
        result = await self.session.execute(query)
        return int(result.scalar_one())
