"""
CRUD 基类模块

各实体的 CRUD 类继承 CRUDBase，并在模块末尾导出单例（如 job_crud）。
所有写操作只 flush 不 commit，事务由 get_db 依赖统一提交或回滚。
"""
from typing import Generic, TypeVar, Type, Optional, List, Any, Dict, Union
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from app.models.base import utc_now

ModelType = TypeVar("ModelType", bound=SQLModel)

ObjIn = Union[SQLModel, Dict[str, Any]]


class CRUDBase(Generic[ModelType]):
    """通用 CRUD 操作"""

    def __init__(self, model: Type[ModelType]):
        self.model = model

    async def get(self, db: AsyncSession, id: str) -> Optional[ModelType]:
        result = await db.execute(select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def get_by(self, db: AsyncSession, **filters) -> Optional[ModelType]:
        """按字段等值查询单条记录，如 get_by(db, token=...)"""
        result = await db.execute(select(self.model).filter_by(**filters))
        return result.scalars().first()

    async def get_multi(
        self,
        db: AsyncSession,
        *criteria,
        skip: int = 0,
        limit: int = 100,
        order_by: Any = None
    ) -> List[ModelType]:
        """条件查询，默认按创建时间倒序"""
        query = select(self.model).where(*criteria)
        query = query.order_by(self.model.created_at.desc() if order_by is None else order_by)
        result = await db.execute(query.offset(skip).limit(limit))
        return list(result.scalars().all())

    async def count(self, db: AsyncSession, *criteria) -> int:
        result = await db.execute(
            select(func.count()).select_from(self.model).where(*criteria)
        )
        return result.scalar() or 0

    async def create(self, db: AsyncSession, *, obj_in: ObjIn) -> ModelType:
        data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
        db_obj = self.model(**data)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def save(self, db: AsyncSession, db_obj: ModelType) -> ModelType:
        """写回已修改的对象并刷新 updated_at"""
        if hasattr(db_obj, "updated_at"):
            db_obj.updated_at = utc_now()
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def update(self, db: AsyncSession, *, db_obj: ModelType, obj_in: ObjIn) -> ModelType:
        """
        部分更新

        Schema 只取显式传入的字段；值为 None 的字段不覆盖原值，需要置空时直接赋值后调用 save()
        """
        data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        for field, value in data.items():
            if value is not None:
                setattr(db_obj, field, value)
        return await self.save(db, db_obj)

    async def delete(self, db: AsyncSession, *, id: str) -> bool:
        obj = await self.get(db, id)
        if obj is None:
            return False
        await db.delete(obj)
        await db.flush()
        return True
