# -*- coding: utf-8 -*-
import unittest
import numpy as np

from skbnn.neural_network import get_optimizer_creator, supported_optimizers



class TestOptimizers(unittest.TestCase):
    '''
    Tests that every optimizer produces descent updates
    '''

    def test_registry(self):
        self.assertEqual(set(supported_optimizers()),
                         {'sgd', 'agd', 'adagrad', 'rmsprop', 'adadelta', 'adam'})
        with self.assertRaises(ValueError):
            get_optimizer_creator('lbfgs')
        with self.assertRaises(ValueError):
            get_optimizer_creator(['adam'])


    def test_independent_instances(self):
        ''' Creator returns new optimizer with separate state on each call '''
        creator = get_optimizer_creator('adam', learning_rate=0.1)
        opt1, opt2 = creator(), creator()
        self.assertIsNot(opt1, opt2)
        self.assertEqual(opt1.learning_rate, 0.1)
        opt1.get_update(np.ones((2, 2)))
        self.assertEqual(opt1.t_, 1)
        self.assertEqual(opt2.t_, 0)


    def test_descent_direction(self):
        ''' First update has sign opposite to gradient '''
        grad = np.array([[1., -2.], [0.5, -0.1]])
        for name in supported_optimizers():
            update = np.zeros_like(grad)
            res    = get_optimizer_creator(name)().get_update(grad, update)
            self.assertIs(res, update)
            np.testing.assert_array_equal(np.sign(update), -np.sign(grad))


    def test_shape_mismatch(self):
        opt = get_optimizer_creator('sgd')()
        with self.assertRaises(ValueError):
            opt.get_update(np.ones((2, 2)), np.zeros((2, 3)))


    def test_minimizes_quadratic(self):
        ''' Each optimizer decreases f(w) = |w - 3|^2 '''
        params = {'sgd': {'learning_rate': 0.1}, 'agd': {'learning_rate': 0.05},
                  'adagrad': {'learning_rate': 0.5}, 'rmsprop': {'learning_rate': 0.05},
                  'adadelta': {}, 'adam': {'learning_rate': 0.1}}
        for name in supported_optimizers():
            optimizer = get_optimizer_creator(name, **params[name])()
            w = np.zeros((2, 1))
            for i in range(500):
                w += optimizer.get_update(2 * (w - 3.))
            self.assertLess(np.sum((w - 3.)**2), np.sum((0. - 3.)**2 * np.ones((2, 1))))
            if name != 'adadelta':
                np.testing.assert_allclose(w, 3., atol=0.1)


if __name__ == '__main__':
    unittest.main()
