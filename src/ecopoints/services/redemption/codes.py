"""Claim code generation."""

import secrets
from collections.abc import Callable, Sequence

from ecopoints.core.config import Settings, get_settings

DEFAULT_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
DEFAULT_LENGTH = 8


class CodeGenerator:
    """Draws fixed-length claim codes uniformly from an alphabet.

    Uses the OS CSPRNG; codes are presented physically to collect a reward,
    so they must not be guessable from earlier ones. Uniqueness against the
    ledger is checked by the caller inside its transaction.
    """

    def __init__(
        self,
        length: int = DEFAULT_LENGTH,
        alphabet: str = DEFAULT_ALPHABET,
        choice: Callable[[Sequence[str]], str] | None = None,
    ):
        """Initialize generator.

        @param length - Number of characters per code
        @param alphabet - Characters to draw from
        @param choice - Random choice function (defaults to secrets.choice)
        """
        if length < 1:
            raise ValueError("length must be positive")
        if len(set(alphabet)) < 2:
            raise ValueError("alphabet needs at least two distinct characters")
        self.length = length
        self.alphabet = alphabet
        self._choice = choice or secrets.choice
        self._allowed = frozenset(alphabet)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "CodeGenerator":
        """Build generator from application settings."""
        settings = settings or get_settings()
        return cls(
            length=settings.claim_code_length,
            alphabet=settings.claim_code_alphabet,
        )

    def generate(self) -> str:
        """Generate a new code."""
        return "".join(self._choice(self.alphabet) for _ in range(self.length))

    def is_well_formed(self, code: str) -> bool:
        """Check a code has the right length and characters."""
        return len(code) == self.length and all(c in self._allowed for c in code)
