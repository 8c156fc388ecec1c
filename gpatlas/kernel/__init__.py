# gpatlas/kernel/__init__.py
# --------------------------------------------------------------
# Author: Emmanuel Vazquez <emmanuel.vazquez@centralesupelec.fr>
# Copyright (c) 2022-2026, CentraleSupelec
# License: GPLv3 (see LICENSE)
# --------------------------------------------------------------
"""
Covariance functions with derivatives and parameter selection.

Modules
-------
base
    CovarianceFunction base class and derivative-augmented assembly.
squared_exponential
    Isotropic and ARD squared-exponential covariances.
laplace
    Laplace covariance on a softened distance.
thinplate
    Thin-plate covariance.
parameter_selection
    RProp and SciPy maximum-likelihood tuning.

Public API
-----------
- Covariances:
    CovarianceFunction, SquaredExponential, SquaredExponentialARD,
    Laplace, ThinPlate, create_covariance
- Parameter selection:
    RProp, autoselect_parameters, select_parameters_with_scipy
"""

from gpatlas.errors import InvalidArgumentError
from .base import CovarianceFunction, NCHANNELS
from .squared_exponential import (
    squared_exponential_kernel,
    SquaredExponential,
    SquaredExponentialARD,
)
from .laplace import laplace_kernel, Laplace
from .thinplate import thinplate_kernel, ThinPlate
from .parameter_selection import (
    RProp,
    autoselect_parameters,
    select_parameters_with_scipy,
)

COVARIANCE_FAMILIES = {
    "se": SquaredExponential,
    "se_ard": SquaredExponentialARD,
    "laplace": Laplace,
    "thinplate": ThinPlate,
}


def create_covariance(family, **kwargs):
    """Instantiate a covariance family by name.

    Parameters
    ----------
    family : {"se", "se_ard", "laplace", "thinplate"}
    **kwargs
        Constructor arguments of the family.

    Examples
    --------
    >>> cf = create_covariance("laplace", length=0.1, sigma=1.0)
    """
    try:
        cls = COVARIANCE_FAMILIES[family]
    except KeyError:
        raise InvalidArgumentError(
            f"unknown covariance family {family!r}; expected one of {sorted(COVARIANCE_FAMILIES)}"
        ) from None
    return cls(**kwargs)


__all__ = [
    # Covariances
    "NCHANNELS",
    "CovarianceFunction",
    "squared_exponential_kernel",
    "SquaredExponential",
    "SquaredExponentialARD",
    "laplace_kernel",
    "Laplace",
    "thinplate_kernel",
    "ThinPlate",
    "COVARIANCE_FAMILIES",
    "create_covariance",
    # Parameter selection
    "RProp",
    "autoselect_parameters",
    "select_parameters_with_scipy",
]
