"""StaticKeyStore: validates bearer tokens against tokens fixed at startup."""

import hmac
import logging
from typing import Iterable

from ports.key_store import KeyStorePort

logger = logging.getLogger(__name__)


class StaticKeyStore(KeyStorePort):
    def __init__(self, tokens: Iterable[str]):
        self._tokens = [t for t in (tok.strip() for tok in tokens) if t]
        if not self._tokens:
            logger.warning("No gateway tokens configured; every request will fail authentication")

    def validate(self, token: str) -> bool:
        if not token:
            return False
        # Check every token so timing does not reveal which one matched
        matched = False
        for candidate in self._tokens:
            if hmac.compare_digest(candidate.encode(), token.encode()):
                matched = True
        return matched
