"""
组织设置 API 路由
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.core.database import get_db
from app.core.response import success_response, ResponseModel, MessageResponse
from app.core.exceptions import NotFoundException
from app.crud import setting_crud
from app.models.setting import (
    OrganizationSetting,
    SettingUpsert,
    SettingResponse,
    SECRET_KEY_MARKERS,
    mask_value,
)

router = APIRouter()


def _to_response(setting: OrganizationSetting) -> dict:
    response = SettingResponse.model_validate(setting)
    response.is_secret = any(m in setting.key.upper() for m in SECRET_KEY_MARKERS)
    response.value = mask_value(setting.key, setting.value)
    return response.model_dump()


@router.get("", summary="获取组织设置", response_model=ResponseModel[List[SettingResponse]])
async def get_settings(db: AsyncSession = Depends(get_db)):
    """敏感配置（键名含 KEY/SECRET/PASSWORD/TOKEN）只返回末四位"""
    settings = await setting_crud.get_all(db)
    return success_response(data=[_to_response(s) for s in settings])


@router.post("", summary="新增或更新设置", response_model=ResponseModel[SettingResponse])
async def upsert_setting(
    data: SettingUpsert,
    db: AsyncSession = Depends(get_db),
):
    setting = await setting_crud.upsert(db, obj_in=data)
    logger.info("组织设置已保存: key={}", setting.key)
    return success_response(data=_to_response(setting), message="设置已保存")


@router.delete("/{key}", summary="删除设置", response_model=MessageResponse)
async def delete_setting(
    key: str,
    db: AsyncSession = Depends(get_db),
):
    setting = await setting_crud.get_by_key(db, key)
    if not setting:
        raise NotFoundException(f"设置不存在: {key}")
    await setting_crud.delete(db, id=setting.id)
    return success_response(message="设置已删除")
