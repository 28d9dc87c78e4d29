"""
Async variants of the GBLN file operations.

Each one runs its synchronous counterpart in a worker thread; there is no
extra ordering, timeout or cancellation behaviour.
"""

from __future__ import annotations
import asyncio
from typing import Any, Optional

from .config import GblnConfig
from .container import Header, PathLike, read_io, write_io
from .parse import parse_file
from .types import GValue


async def parse_file_async(path: PathLike) -> GValue:
    return await asyncio.to_thread(parse_file, path)


async def read_io_async(path: PathLike) -> GValue:
    return await asyncio.to_thread(read_io, path)


async def write_io_async(
    value: Any,
    path: PathLike,
    config: Optional[GblnConfig] = None,
    header: Header = None,
) -> None:
    await asyncio.to_thread(write_io, value, path, config, header)
