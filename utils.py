"""
Вспомогательные функции: загрузка резолверов и словарей, форматирование.
"""

import asyncio
import ipaddress
import re
import socket
from typing import AsyncIterator, Iterable, List, TextIO, Tuple

from config import Config, ConfigError


def validate_domain(domain: str) -> bool:
    """
    Валидация имени домена.

    Args:
        domain: Имя домена для проверки

    Returns:
        True если домен валидный
    """
    if not domain or len(domain) > 253:  # RFC 1035 максимальная длина
        return False

    # Должен содержать хотя бы одну точку
    if '.' not in domain:
        return False

    # Двойные точки подряд
    if '..' in domain:
        return False

    if not re.match(r'^[a-z0-9._-]+$', domain, re.IGNORECASE):
        return False

    if domain.startswith('.') or domain.endswith('.'):
        return False
    if domain.startswith('-') or domain.endswith('-'):
        return False

    tld = domain.split('.')[-1]
    if len(tld) < 2 or not tld.isalpha():
        return False

    return True


def split_host_port(entry: str) -> Tuple[str, int]:
    """
    Разбор строки резолвера на хост и порт.

    Понимает ``host``, ``host:port``, ``[v6]``, ``[v6]:port`` и голый IPv6.
    Без порта используется 53.

    Raises:
        ConfigError: если строка пустая или порт некорректен
    """
    entry = entry.strip()
    if not entry:
        raise ConfigError("Empty resolver entry")

    port_text = None
    if entry.startswith('['):
        host, sep, rest = entry[1:].partition(']')
        if not sep or (rest and not rest.startswith(':')):
            raise ConfigError(f"Malformed resolver: {entry}")
        port_text = rest[1:] if rest else None
    elif entry.count(':') == 1:
        host, port_text = entry.split(':')
    else:
        # Голый хост или IPv6 без скобок
        host = entry

    if not host:
        raise ConfigError(f"Malformed resolver: {entry}")

    if port_text is None:
        return host, Config.DEFAULT_PORT

    try:
        port = int(port_text)
    except ValueError:
        raise ConfigError(f"Invalid port in resolver: {entry}") from None
    if not 0 < port < 65536:
        raise ConfigError(f"Invalid port in resolver: {entry}")
    return host, port


def join_host_port(host: str, port: int) -> str:
    if ':' in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def normalize_resolver(entry: str) -> str:
    """Приводит резолвер к виду host:port (порт 53 по умолчанию)."""
    return join_host_port(*split_host_port(entry))


def resolve_resolver_host(entry: str) -> str:
    """
    Резолвер в виде host:port с IP-адресом вместо имени хоста.

    Имя хоста разрешается один раз, системным резолвером, при старте.

    Raises:
        ConfigError: если имя хоста не разрешается
    """
    host, port = split_host_port(entry)
    try:
        ipaddress.ip_address(host)
        return join_host_port(host, port)
    except ValueError:
        pass

    try:
        infos = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)
    except OSError as e:
        raise ConfigError(f"Cannot resolve resolver host {host}: {e}") from e
    if not infos:
        raise ConfigError(f"Cannot resolve resolver host {host}")
    return join_host_port(infos[0][4][0], port)


def parse_resolver_list(value: str) -> List[str]:
    """
    Разбор списка резолверов через запятую.

    Пустые элементы пропускаются.
    """
    return [normalize_resolver(item) for item in value.split(',') if item.strip()]


def parse_resolver_lines(lines: Iterable[str]) -> List[str]:
    """Резолверы по одному на строку; пустые строки и комментарии пропускаются."""
    resolvers = []
    for line in lines:
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        resolvers.append(normalize_resolver(line))
    return resolvers


def load_resolvers_from_file(filepath: str) -> List[str]:
    """
    Загрузка резолверов из файла.

    Raises:
        ConfigError: если файл не читается
    """
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            return parse_resolver_lines(f)
    except OSError as e:
        raise ConfigError(f"Error loading resolvers from file: {e}") from e


def open_wordlist(filepath: str) -> TextIO:
    try:
        return open(filepath, 'r', encoding='utf-8', errors='ignore')
    except OSError as e:
        raise ConfigError(f"Error opening wordlist: {e}") from e


async def aiter_lines(stream: TextIO) -> AsyncIterator[str]:
    """
    Асинхронное чтение непустых строк из потока.

    Чтение идет в отдельном потоке, чтобы медленный pipe не блокировал
    воркеры в event loop.
    """
    while True:
        line = await asyncio.to_thread(stream.readline)
        if not line:
            break
        line = line.strip()
        if line:
            yield line


def base_domain(name: str) -> str:
    """
    Последние две метки имени: ``a.b.example.com`` -> ``example.com``.

    Для имени из одной метки или с пустой меткой в суффиксе
    возвращает пустую строку.
    """
    parts = name.rstrip('.').split('.')
    if len(parts) < 2 or not all(parts[-2:]):
        return ''
    return '.'.join(parts[-2:])


def format_result(name: str, ips: List[str]) -> str:
    return f"{name} [{', '.join(ips)}]"


def format_time(seconds: float) -> str:
    """
    Форматирование времени

    Args:
        seconds: Время в секундах

    Returns:
        Отформатированная строка
    """
    if seconds < 60:
        return f"{seconds:.2f}s"
    elif seconds < 3600:
        minutes = int(seconds // 60)
        secs = seconds % 60
        return f"{minutes}m {secs:.0f}s"
    else:
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        return f"{hours}h {minutes}m"
