"""
Конфигурация для dns-tool.

Содержит настройки по умолчанию для DNS-резолверов, ограничения скорости,
параметры wildcard-проверки и неизменяемую конфигурацию запуска.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple


class ConfigError(ValueError):
    """Фатальная ошибка конфигурации (до начала резолва)."""


class Config:
    """Настройки по умолчанию для dns-tool."""

    VERSION: str = "1.0.0"

    # DNS резолверы по умолчанию
    DEFAULT_RESOLVERS: List[str] = [
        '8.8.8.8:53',       # Google Primary
        '1.1.1.1:53',       # Cloudflare Primary
    ]
    DEFAULT_PORT: int = 53

    # Параметры производительности
    DEFAULT_RATE: int = 10          # запросов в секунду
    DEFAULT_TIMEOUT: float = 2.0

    # Размер очереди результатов (backpressure для воркеров)
    RESULT_QUEUE_SIZE: int = 100

    # Метки, которые заведомо не существуют
    WILDCARD_DECOY_LABELS: Tuple[str, ...] = (
        'probably-does-not-exist-123',
        'test-subdomain-wildcard-456',
    )

    USAGE: str = """DNS Tool - Fast DNS resolution and subdomain enumeration
Usage: dns-tool -d example.com -w wordlist.txt -r resolvers.txt
       subfinder -d example.com | dns-tool -r resolvers.txt
       cat domains.txt | dns-tool -r resolvers.txt
"""


@dataclass(frozen=True)
class EnumeratorConfig:
    """
    Конфигурация запуска. Не меняется после старта.

    Attributes:
        resolvers: Резолверы в порядке приоритета (host:port)
        rate: Максимум новых запросов в секунду
        timeout: Таймаут одного запроса в секундах
        wildcard_check: Включена ли фильтрация wildcard
        verbose: Подробный вывод
        output_file: Файл для дозаписи результатов
        max_concurrent: Необязательный лимит одновременных воркеров
    """

    resolvers: Tuple[str, ...] = tuple(Config.DEFAULT_RESOLVERS)
    rate: int = Config.DEFAULT_RATE
    timeout: float = Config.DEFAULT_TIMEOUT
    wildcard_check: bool = True
    verbose: bool = False
    output_file: Optional[str] = None
    max_concurrent: Optional[int] = None

    def validate(self) -> 'EnumeratorConfig':
        if not self.resolvers:
            raise ConfigError("No DNS resolvers specified")
        if self.rate < 1:
            raise ConfigError("--rate must be at least 1")
        if self.timeout <= 0:
            raise ConfigError("-t must be greater than 0")
        if self.max_concurrent is not None and self.max_concurrent < 1:
            raise ConfigError("--concurrent must be greater than 0")
        return self
