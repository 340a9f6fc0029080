# -*- coding: utf-8 -*-
import unittest
import warnings
import numpy as np

from sklearn.exceptions import NotFittedError
from skbnn.linear_models import BayesianRidge


def linear_data(n_samples, low=-10., high=10., noise=0.25, seed=0):
    '''
    y = 1 + 2*x0 + 3*x1 + 4*x2 + uniform noise of given amplitude
    '''
    rng = np.random.RandomState(seed)
    X   = rng.uniform(low, high, (n_samples, 3))
    y   = 1. + np.dot(X, [2., 3., 4.]) + noise * (rng.rand(n_samples) - 0.5)
    return X, y



class TestBayesianRidge(unittest.TestCase):
    '''
    Tests evidence maximization for Bayesian Ridge Regression
    '''

    def test_recovers_coefficients(self):
        '''
        Model fitted on noisy linear data should predict unseen point almost
        exactly (both with and without normalization)
        '''
        X, y = linear_data(10000)
        for normalize in [False, True]:
            model = BayesianRidge(normalize=normalize, compute_score=True)
            model.fit(X, y)
            y_hat = model.predict(np.array([[7., 8., 9.]]))
            self.assertLess(abs(y_hat[0] - 75.), 0.1)
            np.testing.assert_allclose(model.coef_, [2., 3., 4.], atol=1e-2)
            self.assertAlmostEqual(model.intercept_, 1., delta=1e-2)


    def test_score_near_noiseless(self):
        ''' R2 on almost noiseless linear relationship should be close to 1 '''
        X, y = linear_data(10000, low=0., high=1.)
        model = BayesianRidge(normalize=True).fit(X, y)
        self.assertGreater(model.score(X, y), 0.95)


    def test_score_trace(self):
        '''
        Log marginal likelihood is recorded at each iteration and does not
        decrease at convergence
        '''
        X, y = linear_data(500, seed=1)
        model = BayesianRidge(compute_score=True).fit(X, y)
        self.assertEqual(len(model.scores_), model.n_iter_)
        self.assertTrue(np.all(np.isfinite(model.scores_)))
        self.assertGreaterEqual(model.scores_[-1], model.scores_[0])
        # no score trace by default
        model = BayesianRidge().fit(X, y)
        self.assertEqual(model.scores_, [])


    def test_precision_parameters(self):
        '''
        Noise precision should be close to inverse of noise variance
        '''
        X, y = linear_data(10000, noise=2., seed=2)
        model = BayesianRidge().fit(X, y)
        # variance of uniform noise with amplitude 2 is 4 / 12
        self.assertAlmostEqual(1. / model.alpha_, 4. / 12, delta=0.05)
        self.assertGreater(model.lambda_, 0)
        self.assertLessEqual(model.n_iter_, model.n_iter)


    def test_covariance(self):
        '''
        Posterior covariance is symmetric positive definite and equals
        inverse of (lambda*I + alpha*X'X) for centered X
        '''
        X, y  = linear_data(200, seed=3)
        model = BayesianRidge().fit(X, y)
        Xc    = X - np.mean(X, 0)
        S     = model.lambda_ * np.eye(3) + model.alpha_ * np.dot(Xc.T, Xc)
        np.testing.assert_allclose(model.sigma_, model.sigma_.T, atol=1e-12)
        np.testing.assert_allclose(np.dot(model.sigma_, S), np.eye(3), atol=1e-6)
        self.assertTrue(np.all(np.linalg.eigvalsh(model.sigma_) > 0))


    def test_covariance_normalized(self):
        ''' Covariance is returned on original scale of features '''
        X, y = linear_data(200, seed=4)
        X[:, 1] *= 100.
        plain = BayesianRidge().fit(X, y)
        normd = BayesianRidge(normalize=True).fit(X, y)
        np.testing.assert_allclose(plain.coef_, normd.coef_, rtol=1e-3)
        np.testing.assert_allclose(plain.predict(X), normd.predict(X), rtol=1e-4)
        _, std_plain = plain.predict(X, return_std=True)
        _, std_normd = normd.predict(X, return_std=True)
        np.testing.assert_allclose(std_plain, std_normd, rtol=1e-2)


    def test_more_features_than_samples(self):
        ''' Svd shortcut for n_features > n_samples '''
        rng   = np.random.RandomState(5)
        X     = rng.randn(10, 30)
        y     = X[:, 0] - 2 * X[:, 1] + 0.01 * rng.randn(10)
        model = BayesianRidge()
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            model.fit(X, y)
        self.assertEqual(model.coef_.shape, (30,))
        self.assertEqual(model.sigma_.shape, (30, 30))
        tol   = 1e-8 * np.max(np.abs(model.sigma_))
        np.testing.assert_allclose(model.sigma_, model.sigma_.T, atol=tol)
        self.assertTrue(np.all(np.linalg.eigvalsh(model.sigma_) > -tol))
        np.testing.assert_allclose(model.predict(X), y, atol=0.5)


    def test_predict_dist(self):
        '''
        Tests predictive distribution on small example with perfect
        multicollinearity
        '''
        X  = np.array([ [ 0.1,  -0.1,  -0.2,   0.02],
                        [ 0.3,  -0.3,  -0.6,   0.06],
                        [ 0.4,  -0.4,  -0.8,   0.08],
                        [ 0.5,  -0.5,  -1.,    0.1 ]])
        y  = np.array([ 2,  6,  8,  10.])
        model = BayesianRidge()
        # expect warnings for near perfect fit
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            model.fit(X, y)
        yh, vh = model.predict_dist(X)
        self.assertEqual(yh.shape[0], vh.shape[0])
        self.assertEqual(np.sum(vh < 0), 0)
        np.testing.assert_allclose(yh, y, atol=0.5)
        np.testing.assert_allclose(model.predict(X), yh)
        y_std, std = model.predict(X, return_std=True)
        np.testing.assert_allclose(y_std, yh)
        np.testing.assert_allclose(std**2, vh)


    def test_predictive_std_grows_away_from_data(self):
        ''' Uncertainty is larger far from training data '''
        X, y = linear_data(100, low=-1., high=1., noise=1., seed=6)
        model = BayesianRidge().fit(X, y)
        _, std = model.predict(np.array([[0., 0., 0.], [50., 50., 50.]]), return_std=True)
        self.assertGreater(std[1], std[0])
        self.assertGreaterEqual(std[0], np.sqrt(1. / model.alpha_))


    def test_constant_target(self):
        ''' Zero variance target gives degenerate but defined score '''
        X, _  = linear_data(50, seed=7)
        y     = np.full(50, 3.)
        model = BayesianRidge()
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            model.fit(X, y)
        np.testing.assert_allclose(model.predict(X), y, atol=1e-6)
        score = model.score(X, y)
        self.assertFalse(np.isnan(score))


    def test_no_intercept(self):
        X, y  = linear_data(1000, noise=0.1, seed=8)
        y    -= 1.
        model = BayesianRidge(fit_intercept=False).fit(X, y)
        self.assertEqual(model.intercept_, 0.)
        np.testing.assert_allclose(model.coef_, [2., 3., 4.], atol=1e-2)


    def test_errors(self):
        ''' Not fitted model and wrong number of features '''
        X, y  = linear_data(50, seed=9)
        model = BayesianRidge()
        with self.assertRaises(NotFittedError):
            model.predict(X)
        model.fit(X, y)
        with self.assertRaises(ValueError):
            model.predict(X[:, :2])
        with self.assertRaises(ValueError):
            model.fit(X, y[:10])


    def test_invalid_n_iter(self):
        ''' Zero iterations is rejected before fitting '''
        X, y  = linear_data(50, seed=9)
        model = BayesianRidge(n_iter=0)
        with self.assertRaises(ValueError):
            model.fit(X, y)
        self.assertFalse(hasattr(model, 'coef_'))


    def test_verbose(self):
        ''' Verbose mode prints progress of iterations '''
        from io import StringIO
        from contextlib import redirect_stdout
        X, y   = linear_data(50, seed=10)
        buffer = StringIO()
        with redirect_stdout(buffer):
            BayesianRidge(verbose=True).fit(X, y)
        self.assertIn("Iteration 0 completed", buffer.getvalue())


if __name__ == '__main__':
    unittest.main()
