"""Identifier generation utility

This module produces random fixed-length identifiers for short links. Each
character is drawn uniformly from a Base62 alphabet using an injected random
source, which defaults to the operating system's CSPRNG.

Classes:
    IdentifierGenerator(rng=None, length=6, alphabet=ALPHABET):
        Callable-free generator object with a `generate()` method.

Functions:
    generate_identifier(rng=None, length=6) -> str:
        One-off convenience wrapper around IdentifierGenerator.

Example:
    >>> from ttlshortener.utils import IdentifierGenerator
    >>> generator = IdentifierGenerator()
    >>> identifier = generator.generate()
    >>> len(identifier)
    6

NOTE:
    - 62^6 ~= 5.68e10 possible identifiers. Uniqueness is not guaranteed by the
      generator; callers check the store and retry (see IdentifierAllocator).
    - A seeded `random.Random` may be injected in tests for reproducible output.
      Production code must keep the SystemRandom default.
"""

import random

from ttlshortener.constants import Identifier


ALPHABET = Identifier.ALPHABET
BASE = len(ALPHABET)  # 26 lowercase + 26 uppercase + 10 digits


class IdentifierGenerator:
    """Generate random identifiers of a fixed length

    Attributes:
        rng (random.Random):
            Random source; `random.SystemRandom()` unless injected.
        length (int):
            Number of characters per identifier.
        alphabet (str):
            Characters identifiers are drawn from.
    """

    def __init__(self, rng: random.Random | None = None, length: int = Identifier.LENGTH, alphabet: str = ALPHABET):
        if not isinstance(length, int) or isinstance(length, bool):
            raise TypeError(f'Length must be of type integer (given type: {type(length)}).')
        if length < 1:
            raise ValueError(f'Length must be a positive integer (given value: {length}).')
        if not alphabet:
            raise ValueError('Alphabet must be a non-empty string.')
        if len(set(alphabet)) != len(alphabet):
            raise ValueError(f'Alphabet must not contain duplicate characters (given value: {alphabet}).')

        self.rng = rng if rng is not None else random.SystemRandom()
        self.length = length
        self.alphabet = alphabet

    def generate(self) -> str:
        return ''.join(self.rng.choice(self.alphabet) for _ in range(self.length))

    @property
    def space(self) -> int:
        """Number of distinct identifiers this generator can produce."""
        return len(self.alphabet) ** self.length


def generate_identifier(rng: random.Random | None = None, length: int = Identifier.LENGTH) -> str:
    """Generate a single random identifier

    Example:
        >>> identifier = generate_identifier()
        >>> identifier.isalnum(), len(identifier)
        (True, 6)
    """
    return IdentifierGenerator(rng=rng, length=length).generate()
