'''
Loss functions used by multilayer perceptron.

Every loss computes mean value of objective over samples and (optionally)
writes gradient of objective with respect to predictions, scaled by
1 / n_samples, into provided matrix.
'''
import numpy as np
from types import MappingProxyType
from .matx import sum_applied2, copy_scaled_applied2


# predictions are clipped to [EPS, 1-EPS] before taking logarithm
EPS_LOSS = 1e-15
EPS_GRAD = 1e-12



class Loss(object):
    '''
    Superclass for loss functions
    '''
    name = None

    def loss(self, y_true, y_pred, grad=None):
        '''
        Computes loss and its gradient

        Parameters
        ----------
        y_true: numpy array of size [n_samples, n_outputs]
           Target values

        y_pred: numpy array of size [n_samples, n_outputs]
           Predicted values

        grad: numpy array of size [n_samples, n_outputs] or None
           If not None it is overwritten with dJ/dy_pred / n_samples

        Returns
        -------
        J: float
           Mean loss over samples
        '''
        n_samples = y_true.shape[0]
        J = sum_applied2(y_true, y_pred, self._loss) / n_samples
        if grad is not None:
            copy_scaled_applied2(grad, y_true, y_pred, 1. / n_samples, self._grad)
        return J

    def __call__(self, y_true, y_pred, grad=None):
        return self.loss(y_true, y_pred, grad)

    def __repr__(self):
        return "{0}()".format(type(self).__name__)



class SquareLoss(Loss):
    ''' J = (h-y)^2 / 2 '''
    name = 'square'

    @staticmethod
    def _loss(y, h):
        return (h - y)**2 / 2.

    @staticmethod
    def _grad(y, h):
        return h - y



class LogLoss(Loss):
    ''' J = -y*log(h) '''
    name = 'log'

    @staticmethod
    def _loss(y, h):
        h = np.clip(h, EPS_LOSS, 1 - EPS_LOSS)
        return -y * np.log(h)

    @staticmethod
    def _grad(y, h):
        h = np.clip(h, EPS_GRAD, 1 - EPS_GRAD)
        return -y / h



class CrossEntropyLoss(Loss):
    ''' J = -y*log(h) - (1-y)*log(1-h) '''
    name = 'cross-entropy'

    @staticmethod
    def _loss(y, h):
        h = np.clip(h, EPS_LOSS, 1 - EPS_LOSS)
        return -y * np.log(h) - (1. - y) * np.log(1. - h)

    @staticmethod
    def _grad(y, h):
        h = np.clip(h, EPS_GRAD, 1 - EPS_GRAD)
        return -y / h + (1. - y) / (1. - h)



_LOSSES = MappingProxyType({loss.name: loss() for loss in
                            [SquareLoss, LogLoss, CrossEntropyLoss]})


def supported_losses():
    ''' Names of available loss functions '''
    return tuple(_LOSSES)


def get_loss(name):
    '''
    Returns loss function by its name

    Parameters
    ----------
    name: str
       One of 'square', 'log', 'cross-entropy'

    Returns
    -------
    : Loss
       Loss function object
    '''
    try:
        return _LOSSES[name]
    except (KeyError, TypeError):
        raise ValueError(("Loss {0} is unknown, supported losses are "
                          "{1}").format(name, list(_LOSSES)))
