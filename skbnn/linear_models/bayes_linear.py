import numpy as np
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.utils import check_X_y, check_array, as_float_array
from sklearn.utils.validation import check_is_fitted
from scipy.linalg import svd
import warnings



class BayesianRidge(RegressorMixin, BaseEstimator):
    '''
    Bayesian Ridge Regression with type II maximum likelihood (evidence
    maximization). Precision of noise (alpha) and precision of weights
    (lambda) are re-estimated at each iteration using fixed point
    Gull-MacKay updates.

    Parameters:
    -----------
    n_iter: int, optional (DEFAULT = 300)
       Maximum number of iterations

    tol: float, optional (DEFAULT = 1e-6)
       Algorithm stops when sum of absolute changes in coefficients is
       below this threshold

    alpha_1: float, optional (DEFAULT = 1e-6)
       Shape parameter of Gamma hyperprior over alpha

    alpha_2: float, optional (DEFAULT = 1e-6)
       Rate parameter of Gamma hyperprior over alpha

    lambda_1: float, optional (DEFAULT = 1e-6)
       Shape parameter of Gamma hyperprior over lambda

    lambda_2: float, optional (DEFAULT = 1e-6)
       Rate parameter of Gamma hyperprior over lambda

    compute_score: bool, optional (DEFAULT = False)
       If True log marginal likelihood is computed at each iteration

    fit_intercept: bool, optional (DEFAULT = True)
       If True includes bias term in model

    normalize: bool, optional (DEFAULT = False)
       If True, each feature is centered and divided by its l2 norm before
       fitting (statistics are saved and reused in predict)

    perfect_fit_tol: float, optional (DEFAULT = 1e-6)
       If mean squared error falls below this value warning is issued
       (precision of noise grows without bound in case of perfect fit)

    copy_X : boolean, optional (DEFAULT = True)
        If True, X will be copied, otherwise may be overwritten

    verbose: bool, optional (Default = False)
       If True at each iteration progress report is printed out

    Attributes
    ----------
    coef_  : array, shape = (n_features)
        Coefficients of the regression model (mean of posterior distribution)

    intercept_: float
        Value of bias term (if fit_intercept is False, then intercept_ = 0)

    alpha_ : float
        Estimated precision of noise

    lambda_: float
        Estimated precision of coefficients

    sigma_ : array, shape = (n_features, n_features)
        Covariance of posterior distribution of coefficients

    scores_: list
        Values of log marginal likelihood at each iteration (only if
        compute_score is True)

    n_iter_: int
        Number of iterations that were actually run

    References
    ----------
    [1] Bayesian Interpolation (MacKay 1992)
    [2] Pattern Recognition and Machine Learning, Bishop (2006) (pages 165 - 169)
    '''

    def __init__(self, n_iter=300, tol=1e-6, alpha_1=1e-6, alpha_2=1e-6,
                 lambda_1=1e-6, lambda_2=1e-6, compute_score=False,
                 fit_intercept=True, normalize=False, perfect_fit_tol=1e-6,
                 copy_X=True, verbose=False):
        self.n_iter          = n_iter
        self.tol             = tol
        self.alpha_1         = alpha_1
        self.alpha_2         = alpha_2
        self.lambda_1        = lambda_1
        self.lambda_2        = lambda_2
        self.compute_score   = compute_score
        self.fit_intercept   = fit_intercept
        self.normalize       = normalize
        self.perfect_fit_tol = perfect_fit_tol
        self.copy_X          = copy_X
        self.verbose         = verbose


    def _center_data(self, X, y):
        ''' Centers data (and scales features if normalize is True) '''
        X     = as_float_array(X, copy=self.copy_X)
        if self.fit_intercept:
            X_mean = np.average(X, axis=0)
            y_mean = np.average(y, axis=0)
            X     -= X_mean
            y      = y - y_mean
        else:
            X_mean = np.zeros(X.shape[1], dtype=X.dtype)
            y_mean = 0.
        X_std = np.ones(X.shape[1], dtype=X.dtype)
        if self.normalize:
            X_std = np.sqrt(np.sum(X**2, axis=0))
            # constant features are left unscaled
            X_std[X_std == 0] = 1.
            X    /= X_std
        return X, y, X_mean, y_mean, X_std


    @staticmethod
    def _posterior_mean(alpha, lambda_, d, dsq, u, vt, Uy, X):
        ''' Ridge solution computed from cached svd of X '''
        n_samples, n_features = X.shape
        if n_samples > n_features:
            mu = vt.T * d / (dsq + lambda_ / alpha)
        else:
            # faster for large n_features
            mu = u * 1. / (dsq + lambda_ / alpha)
            mu = np.dot(X.T, mu)
        return np.dot(mu, Uy)


    def _log_marginal_likelihood(self, n_samples, n_features, dsq, alpha,
                                 lambda_, coef, sqd_err):
        ''' Log marginal likelihood (evidence) including Gamma hyperpriors '''
        # svd is thin, directions not spanned by data have eigenvalue lambda
        logdet_sigma  = -np.sum(np.log(lambda_ + alpha * dsq))
        logdet_sigma -= (n_features - dsq.shape[0]) * np.log(lambda_)
        score  = self.lambda_1 * np.log(lambda_) - self.lambda_2 * lambda_
        score += self.alpha_1 * np.log(alpha) - self.alpha_2 * alpha
        score += 0.5 * (n_features * np.log(lambda_) + n_samples * np.log(alpha)
                        - alpha * sqd_err - lambda_ * np.sum(coef**2)
                        + logdet_sigma - n_samples * np.log(2 * np.pi))
        return score


    def fit(self, X, y):
        '''
        Fits Bayesian Ridge Regression using evidence maximization

        Parameters
        ----------
        X: array-like of size [n_samples,n_features]
           Matrix of explanatory variables (should not include bias term)

        y: array-like of size [n_samples]
           Vector of dependent variables.

        Returns
        -------
        object: self
          self
        '''
        if self.n_iter < 1:
            raise ValueError("n_iter should be positive, got {0}".format(self.n_iter))
        # preprocess data
        X, y = check_X_y(X, y, dtype=np.float64, y_numeric=True)
        n_samples, n_features = X.shape
        self.n_features_in_ = n_features
        X, y, X_mean, y_mean, X_std = self._center_data(X, y)

        #  precision of noise & and coefficients
        var_y   = np.var(y)
        # check that variance is non zero !!!
        if var_y == 0:
            alpha = 1e-2
        else:
            alpha = 1. / var_y
        lambda_ = 1.

        # to speed all further computations save svd decomposition and reuse it later
        u, d, vt = svd(X, full_matrices=False)
        Uy       = np.dot(u.T, y)
        dsq      = d**2
        mu       = np.zeros(n_features)
        self.scores_     = []
        self.perfect_fit_ = False
        eps      = np.finfo(np.float32).eps

        for i in range(self.n_iter):

            # mean of posterior distribution of coefficients
            mu_old  = mu
            mu      = self._posterior_mean(alpha, lambda_, d, dsq, u, vt, Uy, X)
            sqd_err = np.sum((y - np.dot(X, mu))**2)

            if sqd_err / n_samples < self.perfect_fit_tol and not self.perfect_fit_:
                self.perfect_fit_ = True
                warnings.warn(('Almost perfect fit!!! Estimated precision of noise '
                               'is limited only by numerical tolerance'))

            # evidence for current values of precision parameters
            if self.compute_score:
                self.scores_.append(self._log_marginal_likelihood(n_samples, n_features,
                                                                  dsq, alpha, lambda_,
                                                                  mu, sqd_err))

            # effective number of well-determined parameters
            gamma   = np.sum(alpha * dsq / (lambda_ + alpha * dsq))
            # !!! made computation numerically stable for perfect fit case
            lambda_ = (gamma + 2 * self.lambda_1) / (np.sum(mu**2) + 2 * self.lambda_2 + eps)
            alpha   = (n_samples - gamma + 2 * self.alpha_1) / (sqd_err + 2 * self.alpha_2 + eps)

            # if converged or exceeded maximum number of iterations => terminate
            converged = self._check_convergence(mu, mu_old)
            if self.verbose:
                print("Iteration {0} completed".format(i))
                if converged:
                    print("Algorithm converged after {0} iterations".format(i))
            if converged or i == self.n_iter - 1:
                break
        self.n_iter_ = i + 1

        # posterior for final values of precision parameters
        mu       = self._posterior_mean(alpha, lambda_, d, dsq, u, vt, Uy, X)
        eigvals  = 1. / (lambda_ + alpha * dsq)
        # (lambda*I + alpha*X'X)^-1
        if dsq.shape[0] < n_features:
            # eigenvalue is 1/lambda along directions orthogonal to rows of vt
            sigma = np.dot(vt.T * (eigvals - 1. / lambda_), vt)
            sigma[np.diag_indices_from(sigma)] += 1. / lambda_
        else:
            sigma = np.dot(vt.T * eigvals, vt)

        # return to original scale of features
        self.coef_     = mu / X_std
        self.sigma_    = sigma / np.outer(X_std, X_std)
        self.intercept_ = y_mean - np.dot(X_mean, self.coef_) if self.fit_intercept else 0.
        self.X_offset_ = X_mean
        self.X_scale_  = X_std
        self.y_offset_ = y_mean
        self.alpha_    = alpha
        self.lambda_   = lambda_
        return self


    def _check_convergence(self, mu, mu_old):
        '''
        Checks convergence using mean of posterior distribution
        '''
        return np.sum(np.abs(mu - mu_old)) < self.tol


    def _check_X(self, X):
        ''' Validates test data '''
        check_is_fitted(self, 'coef_')
        X = check_array(X, dtype=np.float64)
        if X.shape[1] != self.n_features_in_:
            raise ValueError(("X has {0} features, but model was fitted with "
                              "{1} features").format(X.shape[1], self.n_features_in_))
        return X


    def predict(self, X, return_std=False):
        '''
        Predicts target values (and optionally standard deviation of
        predictive distribution)

        Parameters
        ----------
        X: array-like of size (n_test_samples, n_features)
            Set of features for which corresponding responses should be predicted

        return_std: bool, optional (DEFAULT = False)
            If True standard deviation of predictive distribution is returned

        Returns
        -------
        y_hat: numpy array of size (n_test_samples,)
            Mean of predictive distribution

        std_hat: numpy array of size (n_test_samples,)
            Standard deviation of predictive distribution (only if return_std
            is True)
        '''
        X     = self._check_X(X)
        y_hat = np.dot(X, self.coef_) + self.intercept_
        if return_std:
            return y_hat, np.sqrt(self._predictive_variance(X))
        return y_hat


    def _predictive_variance(self, X):
        ''' Data noise + uncertainty in coefficients '''
        Xc          = X - self.X_offset_
        data_noise  = 1. / self.alpha_
        model_noise = np.sum(np.dot(Xc, self.sigma_) * Xc, 1)
        return data_noise + model_noise


    def predict_dist(self, X):
        '''
        Calculates  mean and variance of predictive distribution for each data
        point of test set.(Note predictive distribution for each data point is
        Gaussian, therefore it is uniquely determined by mean and variance)

        Parameters
        ----------
        x: array-like of size (n_test_samples, n_features)
            Set of features for which corresponding responses should be predicted

        Returns
        -------
        :list of two numpy arrays [mu_pred, var_pred]

            mu_pred : numpy array of size (n_test_samples,)
                      Mean of predictive distribution

            var_pred: numpy array of size (n_test_samples,)
                      Variance of predictive distribution
        '''
        X       = self._check_X(X)
        mu_pred = np.dot(X, self.coef_) + self.intercept_
        return [mu_pred, self._predictive_variance(X)]
