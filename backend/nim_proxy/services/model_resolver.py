"""
Model Resolution Module

Maps caller-facing model names onto NIM model names: static aliases first,
then previously computed fallbacks, then name heuristics.
"""

import asyncio
import logging
from collections import OrderedDict
from types import MappingProxyType
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

MODEL_MAPPING: Mapping[str, str] = MappingProxyType({
    "gpt-3.5-turbo": "nvidia/llama-3.1-nemotron-ultra-253b-v1",
    "gpt-4": "qwen/qwen3-coder-480b-a35b-instruct",
    "gpt-4-turbo": "moonshotai/kimi-k2-instruct-0905",
    "gpt-4o": "deepseek-ai/deepseek-v3.1",
    "claude-3-opus": "openai/gpt-oss-120b",
    "claude-3-sonnet": "openai/gpt-oss-20b",
    "gemini-pro": "qwen/qwen3-next-80b-a3b-thinking",
})

GENERAL_MODEL = "deepseek-ai/deepseek-v3.1"
LARGE_MODEL = "meta/llama-3.1-405b-instruct"
MEDIUM_MODEL = "meta/llama-3.1-70b-instruct"

# Checked in order, first match wins
FALLBACK_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("deepseek",), GENERAL_MODEL),
    (("gpt-4", "claude-opus", "405b"), LARGE_MODEL),
    (("claude", "gemini", "70b"), MEDIUM_MODEL),
)


def classify_model(requested_model: str) -> str:
    """
    Pick a backend model for an unknown caller model name.

    Args:
        requested_model: Caller-facing model name

    Returns:
        str: Backend model name
    """
    name = requested_model.lower()
    for needles, backend_model in FALLBACK_RULES:
        if any(needle in name for needle in needles):
            return backend_model
    return GENERAL_MODEL


class FallbackCache:
    """
    Bounded insertion-ordered map

    When full, the oldest inserted key is evicted before a new key is added.
    Reads never change the eviction order.
    """

    def __init__(self, max_size: int = 100):
        self._max_size = max(1, int(max_size))
        self._data: OrderedDict[str, str] = OrderedDict()

    @property
    def max_size(self) -> int:
        return self._max_size

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def evict_oldest(self) -> Optional[str]:
        """Remove the oldest entry and return its key"""
        if not self._data:
            return None
        key, _ = self._data.popitem(last=False)
        return key

    def put(self, key: str, value: str) -> None:
        if key in self._data:
            self._data[key] = value
            return
        if len(self._data) >= self._max_size:
            self.evict_oldest()
        self._data[key] = value

    def to_dict(self) -> dict[str, str]:
        return dict(self._data)


class ModelResolver:
    """
    Model Resolver

    One instance is created at startup and shared by all requests; the
    fallback cache it owns is the only cross-request mutable state.
    """

    def __init__(
        self,
        cache: Optional[FallbackCache] = None,
        aliases: Mapping[str, str] = MODEL_MAPPING,
    ):
        self.cache = cache if cache is not None else FallbackCache()
        self.aliases = aliases
        self._lock: Optional[asyncio.Lock] = None

    @property
    def lock(self) -> asyncio.Lock:
        """Get lock (lazy loading)"""
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    @property
    def cache_size(self) -> int:
        return len(self.cache)

    async def resolve(self, requested_model: str) -> str:
        """
        Resolve a caller model name to a backend model name.

        Never fails: unknown names fall back to a heuristic choice that is
        remembered for later requests.
        """
        if requested_model in self.aliases:
            return self.aliases[requested_model]

        async with self.lock:
            cached = self.cache.get(requested_model)
            if cached is not None:
                return cached

            fallback_model = classify_model(requested_model)
            self.cache.put(requested_model, fallback_model)

        logger.debug("Fallback model selected: %s -> %s", requested_model, fallback_model)
        return fallback_model
