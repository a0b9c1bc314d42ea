"""
Обнаружение wildcard DNS.

Домен проверяется заведомо несуществующими поддоменами. Все адреса, которые
на них ответили, считаются адресами wildcard-записи и отфильтровываются из
последующих результатов.
"""

import logging
import os
import threading
import time
from typing import Iterable, List, Set

from config import Config
from resolver import ResolutionError, ResolverPool


def probe_labels() -> List[str]:
    """Метки для проверки: случайная (время + pid) и две фиксированные."""
    return [f"rand{int(time.time())}-{os.getpid()}", *Config.WILDCARD_DECOY_LABELS]


class WildcardDetector:
    """
    Общий набор wildcard IP.

    Набор только растет. Запись (probe) и чтение (is_wildcard_response)
    идут под одним мьютексом, поэтому детектор можно использовать из
    параллельных воркеров.
    """

    def __init__(self, pool: ResolverPool, verbose: bool = False):
        self.pool = pool
        self.verbose = verbose
        self._ips: Set[str] = set()
        self._lock = threading.Lock()

    @property
    def wildcard_ips(self) -> Set[str]:
        with self._lock:
            return set(self._ips)

    async def probe(self, domain: str) -> None:
        """
        Проверка домена на wildcard.

        Ошибки резолва игнорируются: не ответил, значит не wildcard.

        Args:
            domain: Базовый домен
        """
        for label in probe_labels():
            test_domain = f"{label}.{domain}"
            try:
                ips = await self.pool.lookup(test_domain)
            except ResolutionError:
                continue

            if ips:
                with self._lock:
                    self._ips.update(ips)

        if self.verbose:
            detected = self.wildcard_ips
            if detected:
                logging.warning(
                    f"[!] Wildcard DNS detected. These IPs will be filtered: {sorted(detected)}"
                )

    def is_wildcard_response(self, ips: Iterable[str]) -> bool:
        with self._lock:
            if not self._ips:
                return False
            return any(ip in self._ips for ip in ips)
