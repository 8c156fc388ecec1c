# gpatlas/desc.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Descriptors: validated option sets that build gpatlas objects.

Each descriptor holds plain attributes with defaults and provides

- ``set_to_default()``
- ``is_valid() -> bool``
- ``update(**kwargs) -> self`` (unknown names raise InvalidArgumentError)
- ``from_dict(mapping)`` (class method, nested dicts accepted)
- ``create()``

Examples
--------
>>> from gpatlas.desc import GaussianProcessDesc
>>> desc = GaussianProcessDesc.from_dict(
...     {"noise": 1e-3, "covariance": {"family": "laplace", "length": 0.1}}
... )
>>> gp = desc.create()
"""
import math
from gpatlas.errors import InvalidArgumentError


class _Desc:
    _defaults = {}
    _nested = {}

    def __init__(self, **kwargs):
        self.set_to_default()
        self.update(**kwargs)

    def set_to_default(self):
        for name, value in self._defaults.items():
            setattr(self, name, value)
        for name, cls in self._nested.items():
            setattr(self, name, cls())
        return self

    def update(self, **kwargs):
        for name, value in kwargs.items():
            if name not in self._defaults and name not in self._nested:
                raise InvalidArgumentError(f"{self.__class__.__name__} has no option {name!r}")
            if name in self._nested and isinstance(value, dict):
                value = self._nested[name].from_dict(value)
            setattr(self, name, value)
        return self

    @classmethod
    def from_dict(cls, mapping):
        return cls(**dict(mapping))

    def to_dict(self):
        out = {name: getattr(self, name) for name in self._defaults}
        for name in self._nested:
            out[name] = getattr(self, name).to_dict()
        return out

    def __repr__(self):
        fields = ", ".join(f"{k}={v!r}" for k, v in self.to_dict().items())
        return f"{self.__class__.__name__}({fields})"

    def is_valid(self):
        raise NotImplementedError

    def _check(self):
        if not self.is_valid():
            raise InvalidArgumentError(f"invalid descriptor: {self!r}")


def _positive(x):
    return isinstance(x, (int, float)) and math.isfinite(x) and x > 0


class CovarianceDesc(_Desc):
    """Covariance family and its initial hyperparameters."""

    _defaults = {
        "family": "thinplate",
        "length": 1.0,
        "lengths": None,
        "sigma": 1.0,
        "softening": 0.1,
    }

    def is_valid(self):
        from gpatlas.kernel import COVARIANCE_FAMILIES

        if self.family not in COVARIANCE_FAMILIES:
            return False
        if not (_positive(self.length) and _positive(self.sigma) and _positive(self.softening)):
            return False
        if self.lengths is not None:
            lengths = list(self.lengths)
            if len(lengths) not in (1, 3) or not all(_positive(float(v)) for v in lengths):
                return False
        return True

    def create(self):
        from gpatlas.kernel import create_covariance

        self._check()
        if self.family == "thinplate":
            return create_covariance("thinplate", length=self.length)
        if self.family == "laplace":
            return create_covariance(
                "laplace", length=self.length, sigma=self.sigma, softening=self.softening
            )
        if self.family == "se_ard":
            lengths = self.lengths if self.lengths is not None else (self.length,) * 3
            return create_covariance("se_ard", lengths=lengths, sigma=self.sigma)
        return create_covariance("se", length=self.length, sigma=self.sigma)


class OptimisationDesc(_Desc):
    """RProp step sizes and stopping rules."""

    _defaults = {
        "delta0": 0.1,
        "delta_min": 1e-6,
        "delta_max": 50.0,
        "eta_minus": 0.5,
        "eta_plus": 1.2,
        "eps_stop": 1e-4,
        "max_iter": 100,
    }

    def is_valid(self):
        return (
            0 < self.delta_min <= self.delta0 <= self.delta_max
            and 0 < self.eta_minus < 1 < self.eta_plus
            and self.eps_stop >= 0
            and isinstance(self.max_iter, int)
            and self.max_iter >= 0
        )

    def create(self):
        from gpatlas.kernel.parameter_selection import RProp

        self._check()
        return RProp(self)


class GaussianProcessDesc(_Desc):
    """GP regressor options."""

    _defaults = {
        "initial_size": 100,
        "noise": 0.0,
        "optimise": False,
    }
    _nested = {
        "covariance": CovarianceDesc,
        "optimisation": OptimisationDesc,
    }

    def is_valid(self):
        return (
            isinstance(self.initial_size, int)
            and self.initial_size > 0
            and isinstance(self.noise, (int, float))
            and math.isfinite(self.noise)
            and self.noise >= 0
            and self.covariance.is_valid()
            and (not self.optimise or self.optimisation.is_valid())
        )

    def create(self, sampleset=None):
        """Build a `gpatlas.core.GaussianProcess`.

        If `sampleset` is given, the GP is fitted to it (and optimised
        when `optimise` is set).
        """
        from gpatlas.core import GaussianProcess

        self._check()
        gp = GaussianProcess(
            self.covariance.create(),
            noise=self.noise,
            initial_size=self.initial_size,
            optimiser=self.optimisation.create() if self.optimise else None,
        )
        if sampleset is not None:
            gp.set(sampleset)
        return gp


class ProjectionDesc(_Desc):
    """Tolerances of the surface projection."""

    _defaults = {
        "f_tol": 1e-2,
        "improve_tol": 1e-6,
        "max_iter": 5000,
        "step_mul": 1.0,
    }

    def is_valid(self):
        return (
            self.f_tol > 0
            and self.improve_tol >= 0
            and isinstance(self.max_iter, int)
            and self.max_iter >= 0
            and self.step_mul > 0
        )

    def create(self):
        """Keyword arguments of `AtlasBase.project`."""
        self._check()
        return dict(
            f_tol=self.f_tol,
            improve_tol=self.improve_tol,
            max_iter=self.max_iter,
            step_mul=self.step_mul,
        )
