"""
Пул DNS-резолверов с последовательным failover.

Каждый вызов ``lookup`` проходит список резолверов один раз, по порядку.
Транспортная ошибка (таймаут, отказ соединения, битый ответ) переводит
запрос на следующий резолвер. Ответ с rcode, отличным от NOERROR, считается
окончательным для этого имени.
"""

import ipaddress
import logging
from dataclasses import dataclass
from typing import Iterable, List

import dns.asyncquery
import dns.exception
import dns.message
import dns.rcode
import dns.rdatatype

from config import ConfigError
from utils import join_host_port, split_host_port


class ResolutionError(Exception):
    """Имя не удалось разрешить."""


class ResponseCodeError(ResolutionError):
    """Резолвер ответил, но rcode не NOERROR (NXDOMAIN, SERVFAIL, ...)."""

    def __init__(self, name: str, rcode: int, resolver: str):
        self.name = name
        self.rcode = rcode
        self.resolver = resolver
        super().__init__(f"DNS error: {dns.rcode.to_text(rcode)}")


class ResolversExhaustedError(ResolutionError):
    """Все резолверы упали на транспортном уровне."""

    def __init__(self, name: str):
        self.name = name
        super().__init__("all resolvers failed")


class InvalidNameError(ResolutionError):
    """Имя нельзя закодировать в DNS-запрос (пустая или слишком длинная метка, IDNA)."""

    def __init__(self, name: str, error: Exception):
        self.name = name
        super().__init__(f"invalid name: {error}")


# Ошибки, после которых пробуем следующий резолвер
TRANSPORT_ERRORS = (dns.exception.DNSException, OSError)


@dataclass(frozen=True)
class ResolverEndpoint:
    host: str
    port: int = 53

    @classmethod
    def parse(cls, value: str) -> 'ResolverEndpoint':
        host, port = split_host_port(value)
        try:
            ipaddress.ip_address(host)
        except ValueError:
            raise ConfigError(f"Resolver host must be an IP address: {value}") from None
        return cls(host, port)

    def __str__(self) -> str:
        return join_host_port(self.host, self.port)


class ResolverPool:
    """Упорядоченный список резолверов. После создания не меняется."""

    def __init__(self, resolvers: Iterable[str], timeout: float = 2.0, verbose: bool = False):
        """
        Args:
            resolvers: Резолверы host:port в порядке приоритета
            timeout: Таймаут одного запроса в секундах
            verbose: Логировать отказы резолверов
        """
        self.endpoints = tuple(ResolverEndpoint.parse(r) for r in resolvers)
        self.timeout = timeout
        self.verbose = verbose

    def __len__(self) -> int:
        return len(self.endpoints)

    async def lookup(self, name: str) -> List[str]:
        """
        A-запрос для имени с failover по резолверам.

        Args:
            name: Полное имя домена

        Returns:
            Список IP-адресов (может быть пустым при NOERROR без A-записей)

        Raises:
            ResponseCodeError: первый ответивший резолвер вернул не NOERROR
            ResolversExhaustedError: ни один резолвер не ответил
            InvalidNameError: имя не кодируется в запрос
        """
        try:
            query = dns.message.make_query(name, dns.rdatatype.A)
        except (dns.exception.DNSException, UnicodeError) as e:
            raise InvalidNameError(name, e) from e

        for endpoint in self.endpoints:
            try:
                response = await dns.asyncquery.udp(
                    query, endpoint.host, timeout=self.timeout, port=endpoint.port
                )
            except TRANSPORT_ERRORS as e:
                if self.verbose:
                    logging.warning(f"Resolver {endpoint} failed: {e!r}")
                continue

            rcode = response.rcode()
            if rcode != dns.rcode.NOERROR:
                raise ResponseCodeError(name, rcode, str(endpoint))

            return [
                rdata.address
                for rrset in response.answer
                if rrset.rdtype == dns.rdatatype.A
                for rdata in rrset
            ]

        raise ResolversExhaustedError(name)
