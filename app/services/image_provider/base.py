from __future__ import annotations

import random
from typing import Optional, Protocol, Sequence

from app.schemas import GenerateRequest, GenerateSuccessResponse

# Exclusive upper bound for randomised seeds (2**31 - 1).
MAX_SEED = 2147483647


def resolve_seed(seed: Optional[int]) -> int:
    """Return the caller's seed, or a fresh pseudo-random one in ``[0, MAX_SEED)``."""

    if seed is not None:
        return seed
    return random.randrange(0, MAX_SEED)


class ImageProvider(Protocol):
    id: str
    name: str

    @property
    def models(self) -> Sequence[str]:
        ...

    def generate(self, request: GenerateRequest) -> GenerateSuccessResponse:
        ...
