"""A well-seeded pseudo-random generator."""

from __future__ import annotations

import os
import random


def get_random_engine() -> random.Random:
    """Return a generator seeded from 1024 words of system entropy."""
    seed = int.from_bytes(os.urandom(1024 * 4), "big")
    return random.Random(seed)