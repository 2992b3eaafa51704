# store_credits/services/code_generator.py

"""
======================================================
PATH: store_credits/services/code_generator.py
======================================================
STORE CREDIT CODE GENERATOR

Policy:
- alphabet excludes visually ambiguous characters (0/O, 1/I)
- code = prefix + `length` random characters (secrets-grade RNG)
- generate -> check uniqueness -> regenerate on collision,
  at most `max_attempts` times, then StoreCreditCodeExhaustedError
"""

from __future__ import annotations

import secrets
from typing import Callable

from django.conf import settings

from .exceptions import StoreCreditCodeExhaustedError

CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


class StoreCreditCodeGenerator:
    def __init__(
        self,
        *,
        prefix: str = "SC-",
        length: int = 5,
        max_attempts: int = 10,
        alphabet: str = CODE_ALPHABET,
        choice: Callable[[str], str] = secrets.choice,
    ):
        if length <= 0:
            raise ValueError("length must be greater than zero")
        if max_attempts <= 0:
            raise ValueError("max_attempts must be greater than zero")
        if not alphabet:
            raise ValueError("alphabet cannot be empty")

        self.prefix = prefix or ""
        self.length = int(length)
        self.max_attempts = int(max_attempts)
        self.alphabet = alphabet
        self._choice = choice

    @classmethod
    def from_settings(cls, **overrides) -> "StoreCreditCodeGenerator":
        options = {
            "prefix": getattr(settings, "STORE_CREDIT_CODE_PREFIX", "SC-"),
            "length": getattr(settings, "STORE_CREDIT_CODE_LENGTH", 5),
            "max_attempts": getattr(settings, "STORE_CREDIT_CODE_MAX_ATTEMPTS", 10),
        }
        options.update(overrides)
        return cls(**options)

    def generate(self) -> str:
        return self.prefix + "".join(
            self._choice(self.alphabet) for _ in range(self.length)
        )

    def generate_unique(self, *, exists: Callable[[str], bool]) -> str:
        """Return a code for which exists(code) is False."""
        for _ in range(self.max_attempts):
            code = self.generate()
            if not exists(code):
                return code
        raise StoreCreditCodeExhaustedError(
            f"No unique store credit code after {self.max_attempts} attempts"
        )
