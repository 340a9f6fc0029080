'''
Bayesian ridge regression and neural network estimators with sklearn api
=======================================================================

   IMPLEMENTED ALGORITHMS:
   -----------------------

       ** Linear Models
          - Bayesian Ridge Regression with evidence maximization (BayesianRidge)

       ** Neural Networks
          - Multilayer Perceptron Regressor (MLPRegressor)
          - Multilayer Perceptron Classifier (MLPClassifier)


    PACKAGE CONTENTS:
    -----------------
        linear_models (package)
        neural_network (package)

'''

__all__ = ['linear_models','neural_network']

__version__ = '0.1.0a1'
