"""Test configuration and fixtures for dns-tool."""

import asyncio
from typing import Dict, List, Set, Tuple, Union

import dns.asyncquery
import dns.exception
import dns.message
import dns.rcode
import dns.rrset
import pytest


class FakeDNS:
    """In-memory stand-in for the upstream resolvers.

    Unknown names answer NXDOMAIN unless they fall under a wildcard domain.
    Hosts listed in ``down`` time out. ``delay`` simulates network latency
    and ``peak`` records the most queries in flight at once.
    """

    def __init__(self):
        self.records: Dict[str, Union[List[str], int]] = {}
        self.wildcards: Dict[str, List[str]] = {}
        self.down: Set[str] = set()
        self.calls: List[Tuple[str, str]] = []
        self.delay = 0.0
        self.in_flight = 0
        self.peak = 0

    def add(self, name: str, *ips: str) -> None:
        self.records[name] = list(ips)

    def fail(self, name: str, rcode: int = dns.rcode.NXDOMAIN) -> None:
        self.records[name] = rcode

    def queried(self, name: str) -> List[str]:
        return [endpoint for endpoint, qname in self.calls if qname == name]

    def _answer(self, qname: str) -> Union[List[str], int]:
        if qname in self.records:
            return self.records[qname]
        for domain, ips in self.wildcards.items():
            if qname.endswith('.' + domain):
                return ips
        return dns.rcode.NXDOMAIN

    async def udp(self, query, where, timeout=None, port=53, **kwargs):
        qname = query.question[0].name.to_text(omit_final_dot=True)
        self.calls.append((f"{where}:{port}", qname))
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1
        if where in self.down:
            raise dns.exception.Timeout

        response = dns.message.make_response(query)
        answer = self._answer(qname)
        if isinstance(answer, int):
            response.set_rcode(answer)
        elif answer:
            response.answer.append(
                dns.rrset.from_text_list(qname + '.', 60, 'IN', 'A', answer)
            )
        return response


@pytest.fixture
def fake_dns(monkeypatch) -> FakeDNS:
    """Route every UDP query through a FakeDNS instance."""
    fake = FakeDNS()
    monkeypatch.setattr(dns.asyncquery, "udp", fake.udp)
    return fake
