"""Random number generator handling."""

from typing import Optional, Union

import numpy as np


def as_generator(
    random_state: Optional[Union[int, np.random.Generator]] = None
) -> np.random.Generator:
    """
    Coerce ``random_state`` into a ``numpy.random.Generator``.

    Parameters
    ----------
    random_state : None, int or Generator
        ``None`` gives a freshly seeded generator, an int is used as a
        seed, a Generator is returned unchanged so the caller's stream is
        honoured.
    """
    if random_state is None:
        return np.random.default_rng()
    if isinstance(random_state, np.random.Generator):
        return random_state
    if isinstance(random_state, (int, np.integer)):
        return np.random.default_rng(random_state)
    raise TypeError(
        f"random_state must be None, an int or a numpy Generator, "
        f"got {type(random_state).__name__}"
    )
