import numpy as np

from scipy.sparse import csr_matrix

from growthrates.fitting._util import get_cov


def test_get_cov_line():

    # y = m*x + b with known residuals; compare with the analytical result
    x = np.array([0.0, 1.0, 2.0, 3.0])
    J = np.column_stack([x, np.ones_like(x)])
    residuals = np.array([0.1, -0.1, -0.1, 0.1])

    cov, std_errors = get_cov(residuals, J)

    s2 = np.sum(residuals**2) / 2
    expected = s2 * np.linalg.inv(J.T @ J)
    assert np.allclose(cov, expected)
    assert np.allclose(std_errors, np.sqrt(np.diag(expected)))


def test_get_cov_sparse():

    J = np.array([[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
    residuals = np.array([0.1, 0.2, -0.1])

    dense = get_cov(residuals, J)
    sparse = get_cov(residuals, csr_matrix(J))

    assert np.allclose(dense[0], sparse[0])


def test_get_cov_singular():

    J = np.array([[1.0, 1.0], [1.0, 1.0], [1.0, 1.0]])
    cov, std_errors = get_cov(np.array([0.1, 0.2, 0.3]), J)
    assert np.all(np.isnan(cov))
    assert np.all(np.isnan(std_errors))


def test_get_cov_nonfinite():

    J = np.array([[1.0], [2.0]])
    cov, std_errors = get_cov(np.array([np.nan, 0.1]), J)
    assert cov.shape == (1, 1)
    assert np.isnan(cov[0, 0])
    assert np.isnan(std_errors[0])


def test_get_cov_no_dof():

    # One point, one parameter: dof floors at 1
    J = np.array([[2.0]])
    cov, _ = get_cov(np.array([0.5]), J)
    assert np.allclose(cov, [[0.25 / 4]])
