"""
Fresh name generation.

Renaming a binder during substitution needs a name that occurs nowhere
else. Generated names are the decimal value of a counter followed by the
base name, e.g. "1y", "2y". Identifiers written by a user never start
with a digit, so a generated name can only clash with another generated
name. A tree may already hold names minted by another generator, so the
caller passes the names in use and next() skips them.

The counter lives in a NameGenerator object: independent runs may each
hold their own generator, and calls given none share `default_names`.
Only the owner resets a generator.
"""

from typing import AbstractSet


class NameGenerator:
    """Mints names that are unique for the lifetime of the generator."""

    def __init__(self):
        self.counter = 0

    def next(self, base: str, avoid: AbstractSet[str] = frozenset()) -> str:
        """
        Return a fresh name derived from `base`.

        Names in `avoid` are skipped; they may have been minted by another
        generator, or by this one before a reset.
        """
        # Re-freshening "1y" gives "2y" rather than "21y"
        if is_generated_name(base):
            base = base.lstrip('0123456789')
        while True:
            self.counter += 1
            name = f"{self.counter}{base}"
            if name not in avoid:
                return name

    def reset(self):
        """Restart numbering from 1."""
        self.counter = 0

    def __repr__(self):
        return f"NameGenerator(counter={self.counter})"


def is_generated_name(name: str) -> bool:
    """True if `name` follows the naming scheme of NameGenerator."""
    return name[:1].isdigit()


# Used by every call that is not given a generator. Only an explicit
# reset() restarts its numbering.
default_names = NameGenerator()
