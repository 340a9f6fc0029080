# -*- coding: utf-8 -*-
"""
This module implements multilayer perceptron with pluggable activations,
losses and optimizers

    IMPLEMENTED ALGORITHMS:
    =======================
    1. Multilayer Perceptron Regressor         : MLPRegressor
    2. Multilayer Perceptron Classifier        : MLPClassifier

    REGISTRIES:
    ===========
    loss functions        : get_loss, supported_losses
    activation functions  : get_activation, supported_activations
    optimizers            : get_optimizer_creator, supported_optimizers

"""

from .loss import get_loss, supported_losses
from .activations import get_activation, supported_activations
from .optimizers import get_optimizer_creator, supported_optimizers
from .multilayer_perceptron import Layer, MLPRegressor, MLPClassifier


__all__ = ['MLPRegressor','MLPClassifier','Layer','get_loss','supported_losses',
           'get_activation','supported_activations','get_optimizer_creator',
           'supported_optimizers']
