"""Outbound proxy providers for browser sessions.

A provider hands out one proxy URL per session launch. Having no provider, or
a provider with nothing to offer, means a direct connection.
"""

import itertools
import threading
from typing import Iterable, Optional

from pjud_scraper.lib.config import Config


class ProxyProvider:
    def next_proxy(self) -> Optional[str]:
        raise NotImplementedError


class NoProxyProvider(ProxyProvider):
    def next_proxy(self) -> Optional[str]:
        return None


class RotatingProxyProvider(ProxyProvider):
    """Round-robin over a fixed list of proxy URLs. Safe to share between threads."""

    def __init__(self, proxies: Iterable[str]):
        self.proxies = [p for p in proxies if p]
        self._cycle = itertools.cycle(self.proxies) if self.proxies else None
        self._lock = threading.Lock()

    def next_proxy(self) -> Optional[str]:
        if self._cycle is None:
            return None
        with self._lock:
            return next(self._cycle)


def provider_from_config() -> ProxyProvider:
    proxies = Config.get_proxies()
    if not proxies:
        return NoProxyProvider()
    return RotatingProxyProvider(proxies)
