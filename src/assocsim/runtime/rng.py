"""
Randomness utilities with deterministic seed derivation.
"""

import hashlib

import numpy as np


# Seed namespace convention:
# - Use one base seed for the entire scenario run.
# - Derive per-stage streams with RNG.derive_seed(seed, "<namespace>", column, ...).
# - Reserved namespaces: generate, noise, missing.
class RNG:
    def __init__(self, seed=42):
        self.seed = int(seed)
        self.rng = np.random.default_rng(self.seed)

    @staticmethod
    def derive_seed(base_seed, *parts):
        h = hashlib.sha256()
        h.update(str(base_seed).encode())
        for part in parts:
            h.update(b":")
            h.update(str(part).encode())
        return int(h.hexdigest(), 16) % (2**32)

    def spawn(self, *parts):
        """Return an independent generator for one namespaced stream."""
        return RNG(RNG.derive_seed(self.seed, *parts))

    def choice(self, a, size=None, replace=True, p=None):
        return self.rng.choice(a, size=size, replace=replace, p=p)

    def normal(self, mean, sd, size=None):
        return self.rng.normal(mean, sd, size)

    def lognormal(self, meanlog, sdlog, size=None):
        return self.rng.lognormal(meanlog, sdlog, size)

    def poisson(self, lam, size=None):
        return self.rng.poisson(lam, size)

    def binomial(self, n, p, size=None):
        return self.rng.binomial(n, p, size)

    def permutation(self, n):
        return self.rng.permutation(n)
