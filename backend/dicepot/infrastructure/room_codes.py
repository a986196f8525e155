from __future__ import annotations
import string
from typing import Container

from dicepot.domain.types import RandomSource


def generate_room_code(
    taken: Container[str],
    rng: RandomSource,
    length: int = 4,
    alphabet: str = string.ascii_uppercase,
) -> str:
    """Random code not present in ``taken``.

    Retries without a cap; 26**4 codes is far above any realistic room count.
    """
    while True:
        code = "".join(rng.choice(alphabet) for _ in range(length))
        if code not in taken:
            return code
