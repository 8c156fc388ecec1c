import gpatlas.num as gnp
from gpatlas.core import GaussianProcess
from gpatlas.desc import CovarianceDesc, GaussianProcessDesc, OptimisationDesc, ProjectionDesc
from gpatlas.errors import InvalidArgumentError
from gpatlas.kernel import Laplace, RProp, SquaredExponential, SquaredExponentialARD, ThinPlate
from gpatlas.misc.designs import fibonacci_sphere
from gpatlas.surface import training_set_from_cloud


def raises(exc_type, fun, *args, **kwargs):
    try:
        fun(*args, **kwargs)
    except exc_type:
        return True
    return False


def test_defaults():
    desc = GaussianProcessDesc()
    assert desc.initial_size == 100
    assert desc.noise == 0.0
    assert desc.optimise is False
    assert desc.covariance.family == "thinplate"
    assert desc.optimisation.max_iter == 100
    assert desc.is_valid()


def test_update_and_reset():
    desc = ProjectionDesc(f_tol=0.5)
    assert desc.f_tol == 0.5
    desc.update(max_iter=3)
    assert desc.max_iter == 3
    desc.set_to_default()
    assert desc.f_tol == 1e-2
    assert desc.max_iter == 5000


def test_unknown_option():
    assert raises(InvalidArgumentError, GaussianProcessDesc, nosie=1e-3)
    assert raises(InvalidArgumentError, CovarianceDesc().update, scale=2.0)


def test_from_dict_nested():
    desc = GaussianProcessDesc.from_dict(
        {"noise": 1e-3, "covariance": {"family": "laplace", "length": 0.2}}
    )
    assert isinstance(desc.covariance, CovarianceDesc)
    assert desc.covariance.family == "laplace"
    assert desc.covariance.length == 0.2
    assert desc.to_dict()["covariance"]["length"] == 0.2


def test_invalid_descriptors():
    assert not GaussianProcessDesc(noise=-1.0).is_valid()
    assert not GaussianProcessDesc(initial_size=0).is_valid()
    assert not CovarianceDesc(family="matern").is_valid()
    assert not CovarianceDesc(length=0.0).is_valid()
    assert not CovarianceDesc(family="se_ard", lengths=[1.0, 2.0]).is_valid()
    assert not OptimisationDesc(eta_plus=0.9).is_valid()
    assert not ProjectionDesc(f_tol=0.0).is_valid()
    assert raises(InvalidArgumentError, GaussianProcessDesc(noise=-1.0).create)
    assert raises(InvalidArgumentError, ProjectionDesc(max_iter=-1).create)


def test_covariance_families():
    assert isinstance(CovarianceDesc().create(), ThinPlate)
    assert isinstance(CovarianceDesc(family="se").create(), SquaredExponential)
    lap = CovarianceDesc(family="laplace", length=0.2, sigma=2.0).create()
    assert isinstance(lap, Laplace)
    assert gnp.allclose(gnp.exp(lap.get_log_hyper()), [0.2, 2.0])
    ard = CovarianceDesc(family="se_ard", lengths=[0.1, 0.2, 0.3]).create()
    assert isinstance(ard, SquaredExponentialARD)
    assert ard.param_dim == 4


def test_create_gp():
    desc = GaussianProcessDesc(noise=1e-3, covariance={"family": "laplace", "length": 0.1})
    gp = desc.create()
    assert isinstance(gp, GaussianProcess)
    assert gp.noise == 1e-3
    assert gp.optimiser is None
    assert gp.size == 0

    training = training_set_from_cloud(fibonacci_sphere(20, radius=0.06))
    gp = desc.create(training)
    assert gp.size == training.rows
    assert float(gp.f(training.centroid())[0]) < 0.0


def test_create_gp_with_optimiser():
    desc = GaussianProcessDesc(optimise=True, optimisation={"max_iter": 3})
    gp = desc.create()
    assert isinstance(gp.optimiser, RProp)
    assert gp.optimiser.max_iter == 3


def test_projection_kwargs():
    assert ProjectionDesc().create() == dict(f_tol=1e-2, improve_tol=1e-6, max_iter=5000, step_mul=1.0)
