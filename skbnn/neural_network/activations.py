'''
Activation functions used by multilayer perceptron. Derivative of every
activation is expressed through its output H = f(Z).
'''
import numpy as np
from types import MappingProxyType
from scipy.special import expit
from .matx import copy_applied



class Activation(object):
    '''
    Superclass for activation functions
    '''
    name = None

    def func(self, z, h):
        ''' Writes f(z) into h '''
        copy_applied(h, z, self._func)
        return h

    def grad(self, z, h, grad):
        ''' Writes df/dz (computed from h = f(z)) into grad '''
        copy_applied(grad, h, self._grad)
        return grad

    def __repr__(self):
        return "{0}()".format(type(self).__name__)



class Identity(Activation):
    name = 'identity'

    @staticmethod
    def _func(z):
        return z

    @staticmethod
    def _grad(h):
        return np.ones_like(h)



class Logistic(Activation):
    name = 'logistic'

    @staticmethod
    def _func(z):
        return expit(z)

    @staticmethod
    def _grad(h):
        return h * (1. - h)



class Tanh(Activation):
    name = 'tanh'

    @staticmethod
    def _func(z):
        return np.tanh(z)

    @staticmethod
    def _grad(h):
        return 1. - h**2



class ReLU(Activation):
    name = 'relu'

    @staticmethod
    def _func(z):
        return np.maximum(z, 0.)

    @staticmethod
    def _grad(h):
        return (h > 0) * 1.



_ACTIVATIONS = MappingProxyType({act.name: act() for act in
                                 [Identity, Logistic, Tanh, ReLU]})


def supported_activations():
    ''' Names of available activation functions '''
    return tuple(_ACTIVATIONS)


def get_activation(name):
    '''
    Returns activation function by its name

    Parameters
    ----------
    name: str
       One of 'identity', 'logistic', 'tanh', 'relu'

    Returns
    -------
    : Activation
    '''
    try:
        return _ACTIVATIONS[name]
    except (KeyError, TypeError):
        raise ValueError(("Activation {0} is unknown, supported activations "
                          "are {1}").format(name, list(_ACTIVATIONS)))
