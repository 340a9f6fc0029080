# -*- coding: utf-8 -*-
import unittest
import numpy as np

from skbnn.neural_network import get_activation, supported_activations



class TestActivations(unittest.TestCase):
    '''
    Tests activation functions and derivatives expressed through output
    '''

    def test_registry(self):
        self.assertEqual(set(supported_activations()),
                         {'identity', 'logistic', 'tanh', 'relu'})
        for name in ['sigmoid', 'softmax', '', ['relu']]:
            with self.assertRaises(ValueError):
                get_activation(name)


    def test_values(self):
        z = np.array([[-2., 0.], [0.5, 3.]])
        h = np.zeros((2, 2))
        get_activation('identity').func(z, h)
        np.testing.assert_allclose(h, z)
        get_activation('relu').func(z, h)
        np.testing.assert_allclose(h, [[0., 0.], [0.5, 3.]])
        get_activation('tanh').func(z, h)
        np.testing.assert_allclose(h, np.tanh(z))
        get_activation('logistic').func(z, h)
        np.testing.assert_allclose(h, 1. / (1. + np.exp(-z)))


    def test_numeric_gradient(self):
        '''
        Derivative computed from output matches numeric differentiation of
        forward function at 20 random points
        '''
        rng = np.random.RandomState(0)
        eps = 1e-6
        z   = rng.uniform(-3, 3, (20, 1))
        # keep relu away from kink
        z[np.abs(z) < 1e-3] = 0.5
        for name in supported_activations():
            act    = get_activation(name)
            h      = act.func(z, np.zeros_like(z))
            grad   = act.grad(z, h, np.zeros_like(z))
            h_plus = act.func(z + eps, np.zeros_like(z))
            h_min  = act.func(z - eps, np.zeros_like(z))
            num_grad = (h_plus - h_min) / (2 * eps)
            np.testing.assert_allclose(grad, num_grad, atol=1e-6)


    def test_relu_gradient_at_zero(self):
        z = np.array([[-1.], [0.], [2.]])
        h = get_activation('relu').func(z, np.zeros((3, 1)))
        g = get_activation('relu').grad(z, h, np.zeros((3, 1)))
        np.testing.assert_array_equal(g, [[0.], [0.], [1.]])


if __name__ == '__main__':
    unittest.main()
