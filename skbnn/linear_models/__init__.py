# -*- coding: utf-8 -*-
"""
This module implements Type II ML (evidence maximization) Linear Regression

    IMPLEMENTED ALGORITHMS:
    =======================
    1. Bayesian Ridge Regression               : BayesianRidge

"""

from .bayes_linear import BayesianRidge


__all__ = ['BayesianRidge']
