"""缓存句柄。"""

from __future__ import annotations

from datetime import datetime, timedelta

from ..adapter.base import BaseTransport
from ..core.error import BuildError
from .types import CachedContent, format_timestamp, format_ttl


class CachedContentHandle:
    """远端缓存的句柄。

    可直接传给 ``ContentBuilder.with_cached_content()``。
    """

    def __init__(self, name: str, transport: BaseTransport) -> None:
        self._name = name
        self._transport = transport

    @property
    def name(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"CachedContentHandle(name={self._name!r})"

    async def get(self) -> CachedContent:
        data = await self._transport.request("GET", self._name)
        return CachedContent.from_dict(data)

    async def update(
        self,
        *,
        ttl: timedelta | float | None = None,
        expire_time: datetime | None = None,
    ) -> CachedContent:
        """更新过期时间(ttl 与 expire_time 二选一)。

        Raises:
            BuildError: 两者都未指定或同时指定。
        """
        if (ttl is None) == (expire_time is None):
            raise BuildError("Exactly one of ttl or expire_time must be given")

        if ttl is not None:
            body, mask = {"ttl": format_ttl(ttl)}, "ttl"
        else:
            body, mask = {"expireTime": format_timestamp(expire_time)}, "expireTime"

        data = await self._transport.request(
            "PATCH", self._name, body=body, params={"updateMask": mask},
        )
        return CachedContent.from_dict(data)

    async def delete(self) -> None:
        await self._transport.request("DELETE", self._name)


__all__ = ["CachedContentHandle"]
