"""
OpenAI 兼容接口的 LLM 客户端

JD 生成、面试题生成和回答评估共用；未配置 api_key 时由调用方走模板或启发式兜底。
简历匹配使用 Claude，见 resume_matcher.py。
"""
import asyncio
import json
import re
import time
from functools import lru_cache
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from openai import AsyncOpenAI, OpenAIError

from app.core.config import settings


CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")
PLACEHOLDER_KEYS = ("", "your-api-key-here")


class LLMResponseError(ValueError):
    """模型输出无法使用"""


def parse_json_content(content: str) -> Dict[str, Any]:
    """从模型输出中取出 JSON 对象，容忍 markdown 代码块和前后说明文字"""
    text = CODE_FENCE.sub("", content.strip())
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end <= start:
        logger.error("模型输出中没有 JSON 对象: {}", text[:500])
        raise LLMResponseError("模型输出不是有效的 JSON")
    try:
        return json.loads(text[start:end + 1])
    except json.JSONDecodeError as exc:
        logger.error("JSON 解析失败: {} | 原始内容: {}", exc, text[:500])
        raise LLMResponseError(f"模型输出不是有效的 JSON: {exc}") from exc


class RequestThrottle:
    """
    请求节流：每分钟请求数 + 最大并发数

    按固定间隔发放请求时段，超出并发上限的请求排队等待。
    """

    def __init__(self, per_minute: int, max_concurrency: int):
        self.interval = 60.0 / per_minute if per_minute > 0 else 0.0
        self.max_concurrency = max_concurrency
        self._next_slot = 0.0
        self._semaphore: Optional[asyncio.Semaphore] = None

    async def __aenter__(self) -> "RequestThrottle":
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.max_concurrency)
        await self._semaphore.acquire()

        now = time.monotonic()
        wait = self._next_slot - now
        self._next_slot = max(now, self._next_slot) + self.interval
        if wait > 0:
            await asyncio.sleep(wait)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self._semaphore.release()


class LLMClient:
    """带节流的 OpenAI 兼容客户端，模型与密钥在每次调用时从配置读取"""

    def __init__(self):
        self._client: Optional[AsyncOpenAI] = None
        self._client_options: Optional[Tuple[str, str, int]] = None
        self._throttle = RequestThrottle(settings.llm_rate_limit, settings.llm_max_concurrency)

    def is_configured(self) -> bool:
        return settings.llm_api_key.strip() not in PLACEHOLDER_KEYS

    @property
    def client(self) -> AsyncOpenAI:
        # 配置变更后重建底层客户端
        options = (settings.llm_api_key, settings.llm_base_url, settings.llm_timeout)
        if self._client is None or self._client_options != options:
            api_key, base_url, timeout = options
            self._client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
            self._client_options = options
        return self._client

    async def chat(
        self,
        messages: List[Dict[str, str]],
        *,
        temperature: Optional[float] = None,
        json_mode: bool = False,
        max_tokens: Optional[int] = None,
    ) -> str:
        kwargs: Dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        if max_tokens:
            kwargs["max_tokens"] = max_tokens

        async with self._throttle:
            try:
                response = await self.client.chat.completions.create(
                    model=settings.llm_model,
                    messages=messages,
                    temperature=settings.llm_temperature if temperature is None else temperature,
                    **kwargs,
                )
            except OpenAIError as exc:
                logger.error("LLM 调用失败: model={}, error={}", settings.llm_model, exc)
                raise

        if not response.choices or response.choices[0].message.content is None:
            raise LLMResponseError("LLM 返回内容为空")
        return response.choices[0].message.content.strip()

    async def complete_json(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> Dict[str, Any]:
        """system + user 两段消息，返回解析后的 JSON 对象"""
        content = await self.chat(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            json_mode=True,
            max_tokens=max_tokens,
        )
        return parse_json_content(content)


@lru_cache
def get_llm_client() -> LLMClient:
    return LLMClient()
