"""Definition sources used by word cleaning and the validator."""

import logging
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Union, runtime_checkable

from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


@runtime_checkable
class DefinitionResolver(Protocol):
    """Anything that can look up a human-readable definition for a word."""

    def resolve(self, word: str) -> Optional[str]:
        ...


class DefinitionQualityPolicy(Protocol):
    """Scores a definition; rule sets live outside the core pipeline."""

    def score(self, word: str, text: str) -> float:
        ...


class DefinitionEntry(BaseModel):
    """A stored definition with provenance and a quality flag."""
    definition: str
    source: str = "static"
    flagged: bool = False


DefinitionValue = Union[str, DefinitionEntry, Mapping]


def definition_text(value: Optional[DefinitionValue]) -> Optional[str]:
    """Extract the definition string from any supported stored form."""
    if value is None:
        return None
    if isinstance(value, DefinitionEntry):
        text = value.definition
    elif isinstance(value, Mapping):
        text = value.get("definition")
    else:
        text = value
    if not isinstance(text, str) or not text.strip():
        return None
    return text.strip()


def is_flagged(value: Optional[DefinitionValue]) -> bool:
    """True if a stored definition carries a failed quality check."""
    if isinstance(value, DefinitionEntry):
        return value.flagged
    if isinstance(value, Mapping):
        if value.get("flagged"):
            return True
        validation = value.get("validationResult")
        return isinstance(validation, Mapping) and validation.get("valid") is False
    return False


class StaticDefinitionResolver:
    """Resolves definitions from an in-memory mapping."""

    def __init__(self, definitions: Mapping[str, DefinitionValue]):
        self.definitions: Dict[str, DefinitionValue] = {
            word.upper(): value for word, value in definitions.items()
        }

    def resolve(self, word: str) -> Optional[str]:
        return definition_text(self.definitions.get(word.upper()))


class ChainedDefinitionResolver:
    """Tries each resolver in turn and returns the first definition found."""

    def __init__(self, resolvers: Sequence[DefinitionResolver]):
        self.resolvers = list(resolvers)

    def resolve(self, word: str) -> Optional[str]:
        for resolver in self.resolvers:
            text = resolver.resolve(word)
            if text:
                return text
        return None


class PolicyFilteredResolver:
    """Drops definitions that score below `threshold` under a quality policy."""

    def __init__(self, resolver: DefinitionResolver, policy: DefinitionQualityPolicy, threshold: float = 0.0):
        self.resolver = resolver
        self.policy = policy
        self.threshold = threshold

    def resolve(self, word: str) -> Optional[str]:
        text = self.resolver.resolve(word)
        if text is None:
            return None
        if self.policy.score(word, text) < self.threshold:
            logger.debug("Definition for %s rejected by quality policy", word)
            return None
        return text


class DefinitionBatch(BaseModel):
    """Definitions found for a batch of words, and the words left undefined."""
    found: Dict[str, str] = Field(default_factory=dict)
    missing: List[str] = Field(default_factory=list)


def resolve_definitions(
    words: Iterable[str],
    resolver: DefinitionResolver,
    progress: Optional[Callable[[int, int, int], None]] = None,
) -> DefinitionBatch:
    """
    Look up a definition for every word.

    A lookup that raises is logged and treated as "no definition"; the batch
    always completes. `progress` receives (processed, total, found).
    """
    batch = DefinitionBatch()
    word_list = [w.upper() for w in words]
    total = len(word_list)

    for processed, word in enumerate(word_list, start=1):
        try:
            text = resolver.resolve(word)
        except Exception as e:
            logger.warning("Definition lookup failed for %s: %s", word, e)
            text = None

        if text:
            batch.found[word] = text
        else:
            batch.missing.append(word)

        if progress:
            progress(processed, total, len(batch.found))

    return batch
