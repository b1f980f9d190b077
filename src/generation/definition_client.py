import logging
import time
from typing import Any, Dict, Mapping, Optional, Set

import requests
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from .models import DefinitionClientConfig


logger = logging.getLogger(__name__)


class ClientStats(BaseModel):
    requests: int = 0
    cache_hits: int = 0
    found: int = 0
    not_found: int = 0
    failures: int = 0


def parse_datamuse(data: Any) -> Optional[str]:
    """First definition from a Datamuse `md=d` response; defs look like 'n\\ttext'."""
    if not isinstance(data, list) or not data or not isinstance(data[0], dict):
        return None
    defs = data[0].get("defs") or []
    if not defs or not isinstance(defs[0], str):
        return None
    text = defs[0].split("\t", 1)[-1].strip()
    return text or None


def parse_free_dictionary(data: Any) -> Optional[str]:
    """First definition of the first meaning from a Free Dictionary API response."""
    try:
        text = data[0]["meanings"][0]["definitions"][0]["definition"]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(text, str) or not text.strip():
        return None
    return text.strip()


class DefinitionClient(BaseModel):
    """
    Looks up word definitions over HTTP.

    Datamuse is queried first and the Free Dictionary API is the fallback.
    Requests are spaced by at least `1 / rate_limit_per_second` seconds and
    retried on transport errors and non-404 failures. Found and missing
    words are cached, so each word is fetched at most once per client.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    datamuse_url: str = "https://api.datamuse.com/words"
    free_dictionary_url: str = "https://api.dictionaryapi.dev/api/v2/entries/en"
    use_fallback: bool = True
    rate_limit_per_second: float = 5.0
    timeout: float = 10.0
    retry_attempts: int = 2
    retry_delay: float = 1.0
    definitions: Dict[str, str] = Field(default_factory=dict)
    missing: Set[str] = Field(default_factory=set)
    stats: ClientStats = Field(default_factory=ClientStats)
    stopped: bool = False

    _last_request: float = PrivateAttr(default=0.0)

    @classmethod
    def create(
        cls,
        config: Optional[DefinitionClientConfig] = None,
        definitions: Optional[Mapping[str, str]] = None,
    ) -> "DefinitionClient":
        """
        Build a client from config, seeded with already known definitions.

        Seeded words are answered from the cache without a request.
        """
        config = config or DefinitionClientConfig()
        seeded = {word.upper(): text for word, text in (definitions or {}).items() if text}
        return cls(**config.model_dump(), definitions=seeded)

    @property
    def min_interval(self) -> float:
        if self.rate_limit_per_second <= 0:
            return 0.0
        return 1.0 / self.rate_limit_per_second

    def stop(self) -> None:
        """Stop network access; later lookups only consult the cache."""
        self.stopped = True

    def resolve(self, word: str) -> Optional[str]:
        word = word.strip().upper()
        if word in self.definitions:
            self.stats.cache_hits += 1
            return self.definitions[word]
        if word in self.missing:
            self.stats.cache_hits += 1
            return None
        if self.stopped:
            return None

        text = self.fetch_datamuse(word)
        if text is None and self.use_fallback:
            text = self.fetch_free_dictionary(word)

        if text:
            self.definitions[word] = text
            self.stats.found += 1
        else:
            self.missing.add(word)
            self.stats.not_found += 1
        return text

    def fetch_datamuse(self, word: str) -> Optional[str]:
        data = self._get_json(self.datamuse_url, {"sp": word.lower(), "md": "d", "max": 1})
        return parse_datamuse(data)

    def fetch_free_dictionary(self, word: str) -> Optional[str]:
        data = self._get_json(f"{self.free_dictionary_url}/{word.lower()}")
        return parse_free_dictionary(data)

    def _wait_for_slot(self) -> None:
        elapsed = time.monotonic() - self._last_request
        if elapsed < self.min_interval:
            time.sleep(self.min_interval - elapsed)
        self._last_request = time.monotonic()

    def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET `url` and decode JSON; None on 404, exhausted retries or a malformed body."""
        for attempt in range(self.retry_attempts + 1):
            if attempt:
                time.sleep(self.retry_delay)
            self._wait_for_slot()
            self.stats.requests += 1

            try:
                response = requests.get(url, params=params, timeout=self.timeout)
            except requests.RequestException as e:
                logger.warning("Request to %s failed: %s", url, e)
                continue

            if response.status_code == 404:
                return None
            if response.status_code != 200:
                logger.warning("Request to %s returned HTTP %d", url, response.status_code)
                continue

            try:
                return response.json()
            except ValueError as e:
                logger.warning("Invalid JSON from %s: %s", url, e)
                return None

        self.stats.failures += 1
        return None
