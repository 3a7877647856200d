"""
Ticket id generation.

Ids look like TKT482913: a fixed prefix and six random digits. The space is
small, so collisions are expected over the life of the system; they are caught
by the issued_tickets primary key and the booking service retries with a new
id. The issuer itself never remembers what it handed out.
"""

import re
import secrets
from random import Random
from typing import Optional

from rail_reservation.core.config import get_settings

TICKET_DIGITS = 6


class TicketIssuer:
    def __init__(self, prefix: Optional[str] = None, rng: Optional[Random] = None):
        self.prefix = prefix if prefix is not None else get_settings().TICKET_PREFIX
        self._rng = rng or secrets.SystemRandom()
        self._pattern = re.compile(rf"{re.escape(self.prefix)}(\d{{{TICKET_DIGITS}}})")
        self._loose_pattern = re.compile(self._pattern.pattern, re.IGNORECASE)

    def issue(self) -> str:
        low = 10 ** (TICKET_DIGITS - 1)
        high = 10 ** TICKET_DIGITS - 1
        return f"{self.prefix}{self._rng.randint(low, high)}"

    def is_well_formed(self, ticket_id: str) -> bool:
        return isinstance(ticket_id, str) and self._pattern.fullmatch(ticket_id) is not None

    def normalize(self, ticket_id) -> Optional[str]:
        """
        Canonical form of a ticket id typed by a customer: surrounding whitespace
        dropped and the prefix matched case-insensitively, then spelled exactly as
        issued. Returns None if it is not a ticket id at all.
        """
        if not isinstance(ticket_id, str):
            return None
        match = self._loose_pattern.fullmatch(ticket_id.strip())
        if match is None:
            return None
        return f"{self.prefix}{match.group(1)}"
