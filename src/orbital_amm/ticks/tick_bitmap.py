"""
Tick bitmap.

One bit per tick-spacing-aligned tick, packed into 256-bit words keyed by a
signed word index. Python's `>>` and `&` on negative ints follow two's
complement floor semantics, so compressed tick -1 maps to word -1, bit 255.
"""
from dataclasses import dataclass, field
from typing import Dict, Tuple

WORD_BITS = 256
MAX_WORD = (1 << WORD_BITS) - 1


def position(compressed: int) -> Tuple[int, int]:
    """Split a compressed tick into (word index, bit index)."""
    return compressed >> 8, compressed & 0xFF


def most_significant_bit(x: int) -> int:
    if x <= 0:
        raise ValueError("most_significant_bit of a non-positive value")
    return x.bit_length() - 1


def least_significant_bit(x: int) -> int:
    if x <= 0:
        raise ValueError("least_significant_bit of a non-positive value")
    return (x & -x).bit_length() - 1


@dataclass
class TickBitmap:
    """Initialized-tick index for O(1) next-tick lookup within a word."""
    tick_spacing: int
    words: Dict[int, int] = field(default_factory=dict)

    def _compress(self, tick: int) -> int:
        # Floor division rounds negative ticks toward negative infinity
        return tick // self.tick_spacing

    def flip_tick(self, tick: int) -> None:
        """Toggle the initialized bit of a tick."""
        if tick % self.tick_spacing != 0:
            raise ValueError(f"Tick {tick} is not a multiple of spacing {self.tick_spacing}")
        word_pos, bit_pos = position(self._compress(tick))
        word = self.words.get(word_pos, 0) ^ (1 << bit_pos)
        if word:
            self.words[word_pos] = word
        else:
            self.words.pop(word_pos, None)

    def is_initialized(self, tick: int) -> bool:
        if tick % self.tick_spacing != 0:
            return False
        word_pos, bit_pos = position(self._compress(tick))
        return bool(self.words.get(word_pos, 0) >> bit_pos & 1)

    def next_initialized_tick_within_one_word(self, tick: int, lte: bool) -> Tuple[int, bool]:
        """
        Find the next initialized tick within the word containing the start.

        Searching with lte includes the start tick itself; searching upward
        starts strictly above it. When no initialized tick exists in the word
        the word's edge is returned so callers can step without overshooting.

        Args:
            tick: Starting tick
            lte: True to search at or below the start (toward the equal-price
                point), False to search strictly above it

        Returns:
            Tuple of (next tick, whether it is initialized)
        """
        compressed = self._compress(tick)

        if lte:
            word_pos, bit_pos = position(compressed)
            # All bits at or below the current position
            mask = (1 << bit_pos) - 1 + (1 << bit_pos)
            masked = self.words.get(word_pos, 0) & mask

            initialized = masked != 0
            if initialized:
                next_compressed = compressed - (bit_pos - most_significant_bit(masked))
            else:
                next_compressed = compressed - bit_pos
        else:
            word_pos, bit_pos = position(compressed + 1)
            # All bits at or above the next position
            mask = ~((1 << bit_pos) - 1) & MAX_WORD
            masked = self.words.get(word_pos, 0) & mask

            initialized = masked != 0
            if initialized:
                next_compressed = compressed + 1 + (least_significant_bit(masked) - bit_pos)
            else:
                next_compressed = compressed + 1 + (WORD_BITS - 1 - bit_pos)

        return next_compressed * self.tick_spacing, initialized
