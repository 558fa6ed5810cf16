"""
组织设置 CRUD 操作
"""
import os
from typing import Optional, List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.setting import OrganizationSetting, SettingUpsert
from .base import CRUDBase


class CRUDSetting(CRUDBase[OrganizationSetting]):
    """组织设置 CRUD 操作类"""

    async def get_by_key(self, db: AsyncSession, key: str) -> Optional[OrganizationSetting]:
        return await self.get_by(db, key=key)

    async def get_all(self, db: AsyncSession) -> List[OrganizationSetting]:
        result = await db.execute(select(self.model).order_by(self.model.key.asc()))
        return list(result.scalars().all())

    async def upsert(self, db: AsyncSession, *, obj_in: SettingUpsert) -> OrganizationSetting:
        """存在则更新，不存在则新建"""
        existing = await self.get_by_key(db, obj_in.key)
        if existing:
            existing.value = obj_in.value
            if obj_in.description is not None:
                existing.description = obj_in.description
            return await self.save(db, existing)
        return await self.create(db, obj_in=obj_in.model_dump())

    async def get_value(
        self,
        db: AsyncSession,
        key: str,
        fallback: str = ""
    ) -> str:
        """
        读取配置值

        优先级: 组织设置 > 同名环境变量 > fallback
        """
        setting = await self.get_by_key(db, key)
        if setting and setting.value:
            return setting.value
        return os.environ.get(key) or fallback


setting_crud = CRUDSetting(OrganizationSetting)
