import secrets
import string
from typing import Awaitable, Callable

from services.exceptions import GenerationExhaustedError

ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
CODE_LENGTH = 6
DEFAULT_MAX_ATTEMPTS = 10


def generate_code(length: int = CODE_LENGTH) -> str:
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


async def generate_unique_code(
    exists: Callable[[str], Awaitable[bool]],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> str:
    """Draw random codes until ``exists`` reports one as free.

    Raises GenerationExhaustedError when ``max_attempts`` consecutive
    candidates are already taken.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    for _ in range(max_attempts):
        candidate = generate_code()
        if not await exists(candidate):
            return candidate
    raise GenerationExhaustedError(
        f"Failed to generate a unique short code after {max_attempts} attempts"
    )
