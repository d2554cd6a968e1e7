"""流式解码 - 把分块到达的响应体还原为逐个 GenerateResponse。

支持两种分帧方式:
- SSE: 以空行分隔事件, 同一事件内的多行 ``data:`` 以换行拼接。
- JSON_ARRAY: 顶层 JSON 数组, 每个元素是一个响应片段。

解码器只缓存尚未构成完整单元的字节, 已产出的单元立即从缓冲区移除。
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Iterable, Iterator
from enum import Enum
from typing import Any

from loguru import logger

from ..adapter.base import error_from_payload
from .error import DecodeError, TruncatedStreamError
from .response import GenerateResponse

_SSE_SEPARATORS = (b"\r\n\r\n", b"\n\n", b"\r\r")
_WHITESPACE = b" \t\r\n"

_OPEN_BRACE = ord("{")
_CLOSE_BRACE = ord("}")
_OPEN_BRACKET = ord("[")
_CLOSE_BRACKET = ord("]")
_QUOTE = ord('"')
_BACKSLASH = ord("\\")
_COMMA = ord(",")


class StreamFraming(str, Enum):
    """流的分帧方式。"""

    SSE = "sse"
    JSON_ARRAY = "json_array"


class StreamDecoder:
    """增量解码器。

    Example:
        >>> decoder = StreamDecoder()
        >>> decoder.push(b'data: {"candidates": []}\\n\\n')
        >>> unit = decoder.next_unit()
        >>> response = decoder.decode(unit)
        >>> decoder.finish()
    """

    def __init__(self, framing: StreamFraming = StreamFraming.SSE) -> None:
        self.framing = framing
        self._buffer = bytearray()

        # JSON_ARRAY 扫描状态
        self._pos = 0
        self._start: int | None = None
        self._depth = 0
        self._in_string = False
        self._escape = False
        self._array_opened = False
        self._array_closed = False

    @property
    def buffered(self) -> int:
        """当前缓存的字节数。"""
        return len(self._buffer)

    def push(self, chunk: bytes | str) -> None:
        """追加一块原始数据。"""
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")
        self._buffer.extend(chunk)

    def next_unit(self) -> str | None:
        """取出下一个完整单元的文本, 不足一个单元时返回 None。"""
        if self.framing is StreamFraming.SSE:
            return self._next_sse_unit()
        return self._next_array_unit()

    def drain(self) -> Iterator[str]:
        """依次取出缓冲区内所有完整单元。"""
        while True:
            unit = self.next_unit()
            if unit is None:
                return
            yield unit

    def decode(self, unit: str) -> GenerateResponse:
        """把一个单元解析为响应片段。

        Raises:
            DecodeError: 不是合法 JSON 或结构不符。
            ApiError: 单元是 ``{"error": ...}`` 错误信封。
        """
        try:
            data: Any = json.loads(unit)
        except json.JSONDecodeError as e:
            raise DecodeError(f"Invalid JSON in stream unit: {e}", fragment=unit) from e

        if isinstance(data, dict) and isinstance(data.get("error"), dict):
            raise error_from_payload(data, status_code=data["error"].get("code"))

        return GenerateResponse.from_dict(data)

    def finish(self) -> None:
        """确认流已完整结束。

        Raises:
            TruncatedStreamError: 缓冲区中残留未完成的单元。
        """
        if self.framing is StreamFraming.SSE:
            leftover = bytes(self._buffer).strip(_WHITESPACE)
            if leftover:
                raise TruncatedStreamError(
                    f"Stream ended with {len(leftover)} bytes of an incomplete event",
                    fragment=leftover.decode("utf-8", errors="replace"),
                )
            return

        if self._start is not None or (self._array_opened and not self._array_closed):
            raise TruncatedStreamError(
                "Stream ended before the JSON array was closed",
                fragment=bytes(self._buffer).decode("utf-8", errors="replace"),
            )
        trailing = bytes(self._buffer[self._pos:]).strip(_WHITESPACE)
        if trailing:
            raise DecodeError(
                "Unexpected data after the JSON array",
                fragment=trailing.decode("utf-8", errors="replace"),
            )

    def reset(self) -> None:
        """丢弃所有缓存。"""
        self._buffer.clear()
        self._pos = 0
        self._start = None
        self._depth = 0
        self._in_string = False
        self._escape = False
        self._array_opened = False
        self._array_closed = False

    # ============ SSE ============

    def _next_sse_unit(self) -> str | None:
        while True:
            end, sep_len = self._find_sse_separator()
            if end < 0:
                return None

            block = bytes(self._buffer[:end])
            del self._buffer[:end + sep_len]

            data = _parse_sse_event(_utf8(block))
            if data is None or data.strip() == "[DONE]":
                continue
            return data

    def _find_sse_separator(self) -> tuple[int, int]:
        best, best_len = -1, 0
        for sep in _SSE_SEPARATORS:
            idx = self._buffer.find(sep)
            if idx >= 0 and (best < 0 or idx < best):
                best, best_len = idx, len(sep)
        return best, best_len

    # ============ JSON 数组 ============

    def _next_array_unit(self) -> str | None:
        buf = self._buffer
        i = self._pos
        n = len(buf)

        while i < n:
            byte = buf[i]

            if not self._array_opened:
                if byte in _WHITESPACE:
                    i += 1
                    continue
                if byte != _OPEN_BRACKET:
                    raise DecodeError(
                        "Expected '[' at start of JSON array stream",
                        fragment=bytes(buf[i:i + 64]).decode("utf-8", errors="replace"),
                    )
                self._array_opened = True
                i += 1
                continue

            if self._array_closed:
                break

            if self._start is None:
                if byte in _WHITESPACE or byte == _COMMA:
                    i += 1
                    continue
                if byte == _CLOSE_BRACKET:
                    self._array_closed = True
                    i += 1
                    continue
                if byte not in (_OPEN_BRACE, _OPEN_BRACKET):
                    raise DecodeError(
                        "Expected JSON object in array stream",
                        fragment=bytes(buf[i:i + 64]).decode("utf-8", errors="replace"),
                    )
                self._start = i

            if self._in_string:
                if self._escape:
                    self._escape = False
                elif byte == _BACKSLASH:
                    self._escape = True
                elif byte == _QUOTE:
                    self._in_string = False
            elif byte == _QUOTE:
                self._in_string = True
            elif byte in (_OPEN_BRACE, _OPEN_BRACKET):
                self._depth += 1
            elif byte in (_CLOSE_BRACE, _CLOSE_BRACKET):
                self._depth -= 1
                if self._depth == 0:
                    unit = _utf8(bytes(buf[self._start:i + 1]))
                    del buf[:i + 1]
                    self._pos = 0
                    self._start = None
                    return unit
            i += 1

        # 已扫描的前导字节可以丢弃
        if self._start is None:
            del buf[:i]
            self._pos = 0
        else:
            self._pos = i
        return None


def _utf8(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(
            f"Invalid UTF-8 in stream unit: {e.reason}",
            fragment=data.decode("utf-8", errors="replace"),
        ) from e


def _parse_sse_event(block: str) -> str | None:
    """提取一个 SSE 事件的 data 内容, 没有 data 字段时返回 None。"""
    data_lines: list[str] = []
    for line in block.splitlines():
        if not line or line.startswith(":"):
            continue
        name, _, value = line.partition(":")
        if name != "data":
            continue
        if value.startswith(" "):
            value = value[1:]
        data_lines.append(value)

    if not data_lines:
        return None
    return "\n".join(data_lines)


async def decode_stream(
    source: AsyncIterator[bytes],
    framing: StreamFraming = StreamFraming.SSE,
) -> AsyncIterator[GenerateResponse]:
    """把异步字节流解码为响应片段序列。

    单次遍历, 不可重启。提前关闭时丢弃缓冲区并关闭数据源。

    Args:
        source: 字节块的异步迭代器。
        framing: 分帧方式。

    Yields:
        GenerateResponse: 每个完整单元对应一个响应片段。

    Raises:
        TruncatedStreamError: 数据源在单元中途结束。
    """
    decoder = StreamDecoder(framing)
    count = 0
    try:
        async for chunk in source:
            decoder.push(chunk)
            for unit in decoder.drain():
                count += 1
                yield decoder.decode(unit)
        decoder.finish()
        logger.debug(f"Stream finished after {count} units")
    finally:
        decoder.reset()
        aclose = getattr(source, "aclose", None)
        if aclose is not None:
            await aclose()


def iter_decode(
    source: Iterable[bytes],
    framing: StreamFraming = StreamFraming.SSE,
) -> Iterator[GenerateResponse]:
    """``decode_stream`` 的同步版本。"""
    decoder = StreamDecoder(framing)
    try:
        for chunk in source:
            decoder.push(chunk)
            for unit in decoder.drain():
                yield decoder.decode(unit)
        decoder.finish()
    finally:
        decoder.reset()
        close = getattr(source, "close", None)
        if close is not None:
            close()


__all__ = [
    "StreamDecoder",
    "StreamFraming",
    "decode_stream",
    "iter_decode",
]
