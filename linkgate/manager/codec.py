"""
Base62 codec for linkgate tokens.

A token is an integer id written in base 62, rightmost symbol worth 62**0.
The symbol for each digit comes from a hand-assigned table instead of the
usual 0-9a-zA-Z order, so neighbouring ids do not give neighbouring tokens.

Both directions are spelled out literally below. Tokens already handed out
depend on this exact table: do not reorder or regenerate it.

Examples:
    >>> encode(0)
    'A'
    >>> encode(62)
    'aA'
    >>> decode("aA")
    62

LLM Prompt Example:
    "Explain why a substitution table over Base62 digits obscures sequential
    ids without changing the size of the id space."
"""

from typing import Dict

from ..errors import InvalidCharacter

SYMBOL_TO_DIGIT: Dict[str, int] = {
    "A": 0, "a": 1, "B": 2, "b": 3,
    "C": 4, "c": 5, "D": 6, "d": 7,
    "1": 8, "E": 9, "e": 10, "F": 11,
    "f": 12, "G": 13, "g": 14, "H": 15,
    "h": 16, "2": 17, "I": 18, "i": 19,
    "J": 20, "j": 21, "K": 22, "k": 23,
    "L": 24, "l": 25, "3": 26, "M": 27,
    "m": 28, "N": 29, "n": 30, "O": 31,
    "o": 32, "P": 33, "p": 34, "4": 35,
    "Q": 36, "q": 37, "R": 38, "r": 39,
    "S": 40, "s": 41, "T": 42, "t": 43,
    "5": 44, "U": 45, "u": 46, "V": 47,
    "v": 48, "W": 49, "w": 50, "X": 51,
    "x": 52, "6": 53, "Y": 54, "y": 55,
    "Z": 56, "z": 57, "7": 58, "8": 59,
    "9": 60, "0": 61,
}

# Index i holds the symbol for digit i.
DIGIT_TO_SYMBOL = "AaBbCcDd1EeFfGgHh2IiJjKkLl3MmNnOoPp4QqRrSsTt5UuVvWwXx6YyZz7890"

BASE = 62


def encode(num: int) -> str:
    """
    Encode a non-negative integer as a token.

    Python ints are unbounded, so any id round-trips.

    Raises:
        ValueError: If num is negative.
    """
    if num < 0:
        raise ValueError("num must be non-negative")
    if num == 0:
        return DIGIT_TO_SYMBOL[0]
    out = []
    while num > 0:
        num, rem = divmod(num, BASE)
        out.append(DIGIT_TO_SYMBOL[rem])
    return "".join(reversed(out))


def decode(token: str) -> int:
    """
    Decode a token back into its integer id.

    Leading "A" symbols carry digit 0 and do not change the value, so
    "AAb" and "b" decode to the same id.

    Raises:
        InvalidCharacter: If the token is empty or has a symbol outside the table.
    """
    if not token:
        raise InvalidCharacter("empty token")
    value = 0
    for char in token:
        digit = SYMBOL_TO_DIGIT.get(char)
        if digit is None:
            raise InvalidCharacter(f"invalid token symbol: {char!r}")
        value = value * BASE + digit
    return value


def is_valid(token: str) -> bool:
    """True if the token is non-empty and every symbol is in the table."""
    return bool(token) and all(char in SYMBOL_TO_DIGIT for char in token)
