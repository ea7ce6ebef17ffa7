"""Short link code generation."""

from __future__ import annotations

import secrets
import string
from collections.abc import Iterable

from keepalive.errors import CodeSpaceExhausted

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 6
MAX_CODE_LENGTH = 12


def generate_code(length: int = CODE_LENGTH) -> str:
    """Return a random code of *length* characters drawn uniformly from [A-Z0-9]."""
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def generate_unique_code(
    existing: Iterable[str],
    length: int = CODE_LENGTH,
    max_attempts: int = 100,
) -> str:
    """Generate a code not present in *existing* (compared case-insensitively).

    After *max_attempts* collisions the code grows by two characters, up to
    MAX_CODE_LENGTH, so the search always terminates.
    """
    taken = {code.upper() for code in existing}
    while length <= MAX_CODE_LENGTH:
        for _ in range(max_attempts):
            code = generate_code(length)
            if code not in taken:
                return code
        length += 2
    raise CodeSpaceExhausted(f"No free code after {max_attempts} attempts per length up to {MAX_CODE_LENGTH}")
