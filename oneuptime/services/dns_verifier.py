import logging

import dns.exception
import dns.resolver

logger = logging.getLogger(__name__)


class TxtRecordVerifier:
    """Looks up TXT records with dnspython.

    Lookup failures are reported as "no records" so an unreachable domain
    simply fails verification.
    """

    def __init__(
        self,
        timeout: float = 5.0,
        resolver: dns.resolver.Resolver | None = None,
    ) -> None:
        self.timeout = timeout
        self.resolver = resolver or dns.resolver.Resolver()

    def get_txt_records(self, domain: str) -> list[str]:
        try:
            answer = self.resolver.resolve(domain, "TXT", lifetime=self.timeout)
        except dns.exception.DNSException as exc:
            # NXDOMAIN, no answer, timeouts and malformed names alike
            logger.info("TXT lookup for %s failed: %s", domain, exc)
            return []

        # long TXT values arrive split into 255-byte chunks
        return [
            b"".join(record.strings).decode("utf-8", errors="replace")
            for record in answer
        ]

    def verify_txt_record(self, domain: str, verification_text: str) -> bool:
        expected = verification_text.strip()
        return any(record.strip() == expected for record in self.get_txt_records(domain))
