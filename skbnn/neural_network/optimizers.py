'''
Gradient based optimizers for multilayer perceptron.

Each optimizer keeps its own state, so every layer of network should receive
separate instance. The only method used by the network is get_update, which
converts gradient into update that is added to parameters (i.e. update
already has sign of descent direction).

    IMPLEMENTED OPTIMIZERS:
    =======================
    sgd      : Stochastic Gradient Descent
    agd      : Accelerated (Nesterov) Gradient Descent
    adagrad  : Adagrad
    rmsprop  : RMSprop
    adadelta : Adadelta
    adam     : Adam
'''
import numpy as np
from functools import partial
from types import MappingProxyType



class Optimizer(object):
    '''
    Superclass for optimizers

    Parameters
    ----------
    learning_rate: float
       Step size
    '''
    def __init__(self, learning_rate):
        self.learning_rate = learning_rate
        self.t_ = 0

    def get_update(self, grad, update=None):
        '''
        Computes update of parameters from gradient

        Parameters
        ----------
        grad: numpy array
           Gradient of objective with respect to parameters

        update: numpy array of the same shape as grad or None
           If provided, update is written into this array

        Returns
        -------
        update: numpy array
           Update that should be added to parameters
        '''
        if update is None:
            update = np.empty_like(grad)
        elif update.shape != grad.shape:
            raise ValueError(("Update shape {0} does not match gradient "
                              "shape {1}").format(update.shape, grad.shape))
        self.t_ += 1
        update[...] = self._step(grad)
        return update

    def _init_state(self, grad):
        ''' Lazily allocates state with shape of gradient '''
        return np.zeros_like(grad)

    def __repr__(self):
        return "{0}(learning_rate={1})".format(type(self).__name__, self.learning_rate)



class SGD(Optimizer):
    ''' Plain gradient descent '''
    def __init__(self, learning_rate=1e-2):
        super(SGD, self).__init__(learning_rate)

    def _step(self, grad):
        return -self.learning_rate * grad



class AGD(Optimizer):
    '''
    Accelerated gradient descent (gradient descent with Nesterov momentum)

    Parameters
    ----------
    learning_rate: float, optional (DEFAULT = 1e-2)

    momentum: float, optional (DEFAULT = 0.9)
       Momentum factor, should be between 0 and 1
    '''
    def __init__(self, learning_rate=1e-2, momentum=0.9):
        super(AGD, self).__init__(learning_rate)
        self.momentum = momentum
        self.velocity_ = None

    def _step(self, grad):
        if self.velocity_ is None:
            self.velocity_ = self._init_state(grad)
        self.velocity_ = self.momentum * self.velocity_ - self.learning_rate * grad
        return self.momentum * self.velocity_ - self.learning_rate * grad



class Adagrad(Optimizer):
    ''' Adagrad, learning rate is scaled by accumulated squared gradients '''
    def __init__(self, learning_rate=1e-2, epsilon=1e-8):
        super(Adagrad, self).__init__(learning_rate)
        self.epsilon = epsilon
        self.sq_grad_ = None

    def _step(self, grad):
        if self.sq_grad_ is None:
            self.sq_grad_ = self._init_state(grad)
        self.sq_grad_ += grad**2
        return -self.learning_rate * grad / (np.sqrt(self.sq_grad_) + self.epsilon)



class RMSProp(Optimizer):
    '''
    RMSprop, learning rate is scaled by moving average of squared gradients

    Parameters
    ----------
    learning_rate: float, optional (DEFAULT = 1e-3)

    rho: float, optional (DEFAULT = 0.9)
       Decay rate of moving average
    '''
    def __init__(self, learning_rate=1e-3, rho=0.9, epsilon=1e-8):
        super(RMSProp, self).__init__(learning_rate)
        self.rho = rho
        self.epsilon = epsilon
        self.sq_grad_ = None

    def _step(self, grad):
        if self.sq_grad_ is None:
            self.sq_grad_ = self._init_state(grad)
        self.sq_grad_ = self.rho * self.sq_grad_ + (1 - self.rho) * grad**2
        return -self.learning_rate * grad / np.sqrt(self.sq_grad_ + self.epsilon)



class Adadelta(Optimizer):
    '''
    Adadelta (Zeiler 2012), step is ratio of moving averages of squared
    updates and squared gradients, learning_rate only rescales it
    '''
    def __init__(self, learning_rate=1., rho=0.95, epsilon=1e-6):
        super(Adadelta, self).__init__(learning_rate)
        self.rho = rho
        self.epsilon = epsilon
        self.sq_grad_ = None
        self.sq_update_ = None

    def _step(self, grad):
        if self.sq_grad_ is None:
            self.sq_grad_ = self._init_state(grad)
            self.sq_update_ = self._init_state(grad)
        self.sq_grad_ = self.rho * self.sq_grad_ + (1 - self.rho) * grad**2
        step = -np.sqrt(self.sq_update_ + self.epsilon) / np.sqrt(self.sq_grad_ + self.epsilon) * grad
        self.sq_update_ = self.rho * self.sq_update_ + (1 - self.rho) * step**2
        return self.learning_rate * step



class Adam(Optimizer):
    '''
    Adam optimizer (Kingma & Ba 2014)

    Parameters
    ----------
    learning_rate: float, optional (DEFAULT = 1e-3)

    beta_1: float, optional (DEFAULT = 0.9)
       Exponential decay rate for first moment

    beta_2: float, optional (DEFAULT = 0.999)
       Exponential decay rate for second moment

    epsilon: float, optional (DEFAULT = 1e-8)
    '''
    def __init__(self, learning_rate=1e-3, beta_1=0.9, beta_2=0.999, epsilon=1e-8):
        super(Adam, self).__init__(learning_rate)
        self.beta_1 = beta_1
        self.beta_2 = beta_2
        self.epsilon = epsilon
        self.m_ = None
        self.v_ = None

    def _step(self, grad):
        if self.m_ is None:
            self.m_ = self._init_state(grad)
            self.v_ = self._init_state(grad)
        self.m_ = self.beta_1 * self.m_ + (1 - self.beta_1) * grad
        self.v_ = self.beta_2 * self.v_ + (1 - self.beta_2) * grad**2
        m_hat = self.m_ / (1 - self.beta_1**self.t_)
        v_hat = self.v_ / (1 - self.beta_2**self.t_)
        return -self.learning_rate * m_hat / (np.sqrt(v_hat) + self.epsilon)



_OPTIMIZERS = MappingProxyType({'sgd': SGD, 'agd': AGD, 'adagrad': Adagrad,
                                'rmsprop': RMSProp, 'adadelta': Adadelta,
                                'adam': Adam})


def supported_optimizers():
    ''' Names of available optimizers '''
    return tuple(_OPTIMIZERS)


def get_optimizer_creator(name, **params):
    '''
    Returns callable that creates new optimizer instance on each call

    Parameters
    ----------
    name: str
       One of 'sgd','agd','adagrad','rmsprop','adadelta','adam'

    **params:
       Parameters passed to optimizer constructor (e.g. learning_rate)

    Returns
    -------
    : callable
       Optimizer factory
    '''
    try:
        optimizer = _OPTIMIZERS[name]
    except (KeyError, TypeError):
        raise ValueError(("Solver {0} is unknown, supported solvers are "
                          "{1}").format(name, list(_OPTIMIZERS)))
    return partial(optimizer, **params)
