"""Randomness sources for the RND instruction.

Sources are immutable: ``next_byte`` returns the byte together with the
advanced source, which the caller stores back into the machine state.
"""

from typing import Iterable, Protocol, Tuple

import jax
import jax.numpy as jnp
from flax.struct import PyTreeNode, field


class RandomSource(Protocol):
    """Anything that can produce a uniformly random byte."""

    def next_byte(self) -> Tuple[int, "RandomSource"]:
        ...


class JaxRandomSource(PyTreeNode):
    """Random bytes drawn from a JAX PRNG key, split on every draw."""
    key: jax.Array

    @classmethod
    def from_seed(cls, seed: int = 0) -> "JaxRandomSource":
        return cls(key=jax.random.PRNGKey(seed))

    def next_byte(self) -> Tuple[int, "JaxRandomSource"]:
        key, subkey = jax.random.split(self.key)
        value = int(jax.random.randint(subkey, shape=(), minval=0, maxval=256, dtype=jnp.int32))
        return value, self.replace(key=key)


class SequenceRandomSource(PyTreeNode):
    """Replays a fixed sequence of bytes, cycling when exhausted."""
    values: Tuple[int, ...] = field(pytree_node=False)
    position: int = 0

    def __post_init__(self):
        values = tuple(int(v) & 0xFF for v in self.values)
        if not values:
            raise ValueError("SequenceRandomSource needs at least one value")
        object.__setattr__(self, "values", values)

    def next_byte(self) -> Tuple[int, "SequenceRandomSource"]:
        value = self.values[int(self.position) % len(self.values)]
        return value, self.replace(position=int(self.position) + 1)
