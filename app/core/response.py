"""
统一响应格式

所有 JSON 接口返回 {"success", "code", "message", "data"}。
路由函数用 success_response / paged_response 构造字典，
response_model 使用下面的泛型模型以生成 OpenAPI 文档。
"""
import math
from typing import Any, Dict, Generic, List, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class ResponseModel(BaseModel, Generic[T]):
    success: bool = True
    code: int = 200
    message: str = "操作成功"
    data: Optional[T] = None


class PagedData(BaseModel, Generic[T]):
    """分页数据，pages 为总页数"""
    items: List[T]
    total: int
    page: int
    page_size: int
    pages: int


class PagedResponseModel(ResponseModel[PagedData[T]], Generic[T]):
    pass


class MessageResponse(ResponseModel[Any]):
    """删除等只关心提示信息的接口"""
    pass


class DictResponse(ResponseModel[Dict[str, Any]]):
    pass


def _envelope(success: bool, code: int, message: str, data: Any) -> dict:
    return {"success": success, "code": code, "message": message, "data": data}


def success_response(data: Any = None, message: str = "操作成功", code: int = 200) -> dict:
    return _envelope(True, code, message, data)


def error_response(message: str = "操作失败", code: int = 400, data: Any = None) -> dict:
    return _envelope(False, code, message, data)


def page_count(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if page_size > 0 else 0


def paged_response(
    items: list,
    total: int,
    page: int,
    page_size: int,
    message: str = "查询成功"
) -> dict:
    data = {
        "items": items,
        "total": total,
        "page": page,
        "page_size": page_size,
        "pages": page_count(total, page_size),
    }
    return success_response(data=data, message=message)
