import numpy as np
from sklearn.base import BaseEstimator, RegressorMixin, ClassifierMixin
from sklearn.preprocessing import LabelBinarizer
from sklearn.utils import check_X_y, check_array, check_random_state, shuffle
from sklearn.utils.multiclass import check_classification_targets
from sklearn.utils.validation import check_is_fitted
from .loss import get_loss
from .activations import get_activation
from .optimizers import get_optimizer_creator


# Difference between MLP in skbnn and sklearn
# 1) all weights of network live in one flat buffer, every layer works with
#    view of its own part of this buffer
# 2) skbnn supports elastic net penalty (l1_ratio) and gradient clipping
# 3) optimizer is pluggable, each layer has its own optimizer instance
# 4) derivative of activation is expressed through activation output



class Layer(object):
    '''
    Fully connected layer of multilayer perceptron

    Parameters
    ----------
    theta: numpy array of size [1 + n_inputs, n_outputs]
       Weights of layer (first row is bias). This is view of part of
       parameter buffer owned by network, it is modified in place.

    offset: int
       Position of theta in parameter buffer

    activation: str
       Name of activation function

    optimizer: object
       Optimizer instance (should not be shared with other layers)
    '''
    scratch_buffers = ('z', 'ypred', 'ytrue', 'ydiff', 'hgrad')

    def __init__(self, theta, offset, activation, optimizer):
        self.theta       = theta
        self.offset      = offset
        self.size        = theta.size
        self.activation  = activation
        self.activation_ = get_activation(activation)
        self.optimizer   = optimizer
        self.grad        = np.zeros(theta.shape)
        self.update      = np.zeros(theta.shape)
        self.loss        = 0.
        self._capacity   = 0
        self._buffers    = {}
        for name in self.scratch_buffers:
            setattr(self, name, None)


    @property
    def n_inputs(self):
        return self.theta.shape[0] - 1


    @property
    def n_outputs(self):
        return self.theta.shape[1]


    def init_outputs(self, n_samples):
        '''
        Resizes scratch buffers to current number of samples, memory is
        reallocated only if n_samples exceeds capacity
        '''
        size = n_samples * self.n_outputs
        if size > self._capacity:
            self._buffers  = dict((name, np.empty(size)) for name in self.scratch_buffers)
            self._capacity = size
        for name in self.scratch_buffers:
            buf = self._buffers[name][:size].reshape(n_samples, self.n_outputs)
            setattr(self, name, buf)


    def forward(self, X):
        ''' Computes Z = [1 | X] * theta and H = f(Z) '''
        self.init_outputs(X.shape[0])
        np.dot(X, self.theta[1:], out=self.z)
        self.z += self.theta[0]
        self.activation_.func(self.z, self.ypred)
        if np.isnan(self.ypred).any():
            raise FloatingPointError(('NaN in output of layer, training diverged '
                                      '(try smaller learning rate or gradient clipping)'))
        return self.ypred


    def __repr__(self):
        return "Layer(n_inputs={0}, n_outputs={1}, activation='{2}')".format(
                    self.n_inputs, self.n_outputs, self.activation)



class BaseMLP(BaseEstimator):
    '''
    Superclass for multilayer perceptron regressor and classifier
    '''
    def __init__(self, hidden_layer_sizes, activation, solver, alpha, l1_ratio,
                 gradient_clipping, epochs, batch_size, loss, learning_rate_init,
                 shuffle, random_state, verbose):
        self.hidden_layer_sizes = hidden_layer_sizes
        self.activation         = activation
        self.solver             = solver
        self.alpha              = alpha
        self.l1_ratio           = l1_ratio
        self.gradient_clipping  = gradient_clipping
        self.epochs             = epochs
        self.batch_size         = batch_size
        self.loss               = loss
        self.learning_rate_init = learning_rate_init
        self.shuffle            = shuffle
        self.random_state       = random_state
        self.verbose            = verbose


    def set_optimizer(self, creator):
        '''
        Changes optimizer used for training

        Parameters
        ----------
        creator: str or callable
           Name of solver or callable returning new optimizer instance
        '''
        self.solver = creator
        return self


    def _optimizer_creator(self):
        ''' Factory of optimizers, each layer calls it to get its own instance '''
        if callable(self.solver):
            return self.solver
        params = {}
        if self.learning_rate_init is not None:
            params['learning_rate'] = self.learning_rate_init
        return get_optimizer_creator(self.solver, **params)


    def _check_params(self):
        ''' Checks parameters, all names are resolved before any allocation '''
        get_loss(self.loss)
        get_activation(self.activation)
        self._optimizer_creator()
        if self.alpha < 0:
            raise ValueError("alpha should be non-negative, got {0}".format(self.alpha))
        if not 0 <= self.l1_ratio <= 1:
            raise ValueError("l1_ratio should be in [0,1], got {0}".format(self.l1_ratio))
        if self.batch_size is not None and self.batch_size <= 0:
            raise ValueError("batch_size should be positive, got {0}".format(self.batch_size))
        if self.epochs is not None and self.epochs <= 0:
            raise ValueError("epochs should be positive, got {0}".format(self.epochs))
        if any(size <= 0 for size in self._hidden_sizes()):
            raise ValueError(("hidden_layer_sizes should contain only positive "
                              "numbers, got {0}").format(self.hidden_layer_sizes))


    def _hidden_sizes(self):
        ''' Sizes of hidden layers as list (single int is one hidden layer) '''
        sizes = self.hidden_layer_sizes
        if isinstance(sizes, (int, np.integer)):
            return [sizes]
        try:
            return list(sizes)
        except TypeError:
            raise ValueError(("hidden_layer_sizes should be int or sequence of "
                              "ints, got {0}").format(sizes))


    def _alloc_layers(self, n_features, n_outputs, random_state):
        '''
        Creates layers, weights of all layers are views of one parameter buffer
        '''
        sizes    = [n_features] + self._hidden_sizes() + [n_outputs]
        n_params = sum((1 + n_in) * n_out for n_in, n_out in zip(sizes[:-1], sizes[1:]))
        self.coefs_buffer_ = np.zeros(n_params)

        # logistic output layer keeps predictions inside (0,1) for log losses
        if self.loss in ('log', 'cross-entropy'):
            output_activation = 'logistic'
        else:
            output_activation = self.activation

        creator      = self._optimizer_creator()
        self.layers_ = []
        offset       = 0
        n_layers     = len(sizes) - 1
        for i, (n_in, n_out) in enumerate(zip(sizes[:-1], sizes[1:])):
            size  = (1 + n_in) * n_out
            theta = self.coefs_buffer_[offset:offset + size].reshape(1 + n_in, n_out)
            theta[...] = random_state.normal(0, np.sqrt(1. / (1 + n_in)), theta.shape)
            activation = output_activation if i == n_layers - 1 else self.activation
            if activation == 'relu':
                # relu units start active: non-negative bias, and output
                # layer above relu hidden layer gets non-negative weights
                theta[0] = np.abs(theta[0])
                if i > 0 and i == n_layers - 1:
                    theta[1:] = np.abs(theta[1:])
            self.layers_.append(Layer(theta, offset, activation, creator()))
            offset += size

        # layers cover parameter buffer exactly, without overlaps
        assert offset == self.coefs_buffer_.size
        assert all(prev.offset + prev.size == nxt.offset for prev, nxt in
                   zip(self.layers_[:-1], self.layers_[1:]))
        assert all(np.shares_memory(L.theta, self.coefs_buffer_) for L in self.layers_)


    def _fit(self, X, Y):
        ''' Trains network on validated data, Y is 2d array '''
        self._check_params()
        n_samples, n_features = X.shape
        self.n_outputs_ = Y.shape[1]
        random_state    = check_random_state(self.random_state)

        # binary cross-entropy is single output case of log loss
        output_loss = self.loss
        if output_loss == 'log' and self.n_outputs_ == 1:
            output_loss = 'cross-entropy'
        self._output_loss = get_loss(output_loss)
        self._hidden_loss = get_loss('square')

        self._alloc_layers(n_features, self.n_outputs_, random_state)
        epochs = self.epochs
        if epochs is None:
            epochs = int(np.ceil(1e6 / n_samples))

        self.loss_       = np.inf
        self.loss_first_ = None
        self.loss_curve_ = []
        for epoch in range(epochs):
            X, Y = self._fit_epoch(X, Y, epoch, random_state)
        self.n_iter_ = epochs
        return self


    def _fit_epoch(self, X, Y, epoch, random_state):
        ''' Fits one epoch, returns (shuffled) data for next epoch '''
        n_samples = X.shape[0]
        if self.shuffle:
            X, Y = shuffle(X, Y, random_state=random_state)
        batch_size = n_samples if self.batch_size is None else min(self.batch_size, n_samples)
        J_sum = 0.
        for start in range(0, n_samples, batch_size):
            X_batch = X[start:start + batch_size]
            Y_batch = Y[start:start + batch_size]
            J_sum  += self._fit_mini_batch(X_batch, Y_batch) * X_batch.shape[0]
        self.loss_ = J_sum / n_samples
        self.loss_curve_.append(self.loss_)
        if epoch == 0:
            self.loss_first_ = self.loss_
        if self.verbose and epoch % 100 == 0:
            print("[MLP] Epoch {0}, loss {1}".format(epoch, self.loss_))
        return X, Y


    def _fit_mini_batch(self, X, Y):
        ''' Forward pass, backward pass and update for single mini-batch '''
        self._predict_zh(X)
        J = self._backprop(X, Y)
        self._update_params()
        return J


    def _predict_zh(self, X):
        ''' Forward propagation, returns output of last layer '''
        H = X
        for layer in self.layers_:
            H = layer.forward(H)
        return H


    def _backprop(self, X, Y):
        '''
        Backward propagation, computes gradients of all layers (uses outputs
        saved by forward pass). Returns value of loss including penalty.
        '''
        output_layer = len(self.layers_) - 1
        J = 0.
        for l in range(output_layer, -1, -1):
            L  = self.layers_[l]
            Xl = X if l == 0 else self.layers_[l - 1].ypred
            n_samples = Xl.shape[0]

            # ydiff is dJ/dH
            if l == output_layer:
                L.ytrue[...] = Y
                J = L.loss = self._output_loss.loss(L.ytrue, L.ypred, L.ydiff)
            else:
                # ydiff was filled by next layer, ytrue is target that
                # square loss would move this layer towards (diagnostics only)
                np.subtract(L.ypred, L.ydiff, out=L.ytrue)
                L.loss = self._hidden_loss.loss(L.ytrue, L.ypred)

            # dJ/dZ = dJ/dH * dH/dZ
            L.activation_.grad(L.z, L.ypred, L.hgrad)
            L.ydiff *= L.hgrad
            L.grad[0]  = np.sum(L.ydiff, axis=0)
            L.grad[1:] = np.dot(Xl.T, L.ydiff)

            # penalty is not applied to bias terms
            if self.alpha > 0:
                theta_reg    = L.theta.copy()
                theta_reg[0] = 0
                if self.l1_ratio > 0:
                    scale = self.alpha * self.l1_ratio / n_samples
                    J      += scale * np.sum(np.abs(theta_reg))
                    L.grad += scale * np.sign(theta_reg)
                if self.l1_ratio < 1:
                    scale = self.alpha * (1. - self.l1_ratio) / n_samples
                    J      += scale / 2. * np.sum(theta_reg**2)
                    L.grad += scale * theta_reg

            if self.gradient_clipping > 0:
                grad_norm = np.linalg.norm(L.grad)
                if grad_norm > self.gradient_clipping:
                    L.grad *= self.gradient_clipping / grad_norm

            # propagate error through weights before they are updated
            if l > 0:
                np.dot(L.ydiff, L.theta[1:].T, out=self.layers_[l - 1].ydiff)
        return J


    def _update_params(self):
        ''' Adds optimizer updates to weights (in parameter buffer) '''
        for L in self.layers_:
            L.optimizer.get_update(L.grad, L.update)
            L.theta += L.update


    def _forward(self, X):
        ''' Validates input and returns copy of network output '''
        check_is_fitted(self, 'layers_')
        X = check_array(X, dtype=np.float64)
        if X.shape[1] != self.layers_[0].n_inputs:
            raise ValueError(("X has {0} features, but network expects {1} "
                              "features").format(X.shape[1], self.layers_[0].n_inputs))
        return self._predict_zh(X).copy()



class MLPRegressor(RegressorMixin, BaseMLP):
    '''
    Multilayer perceptron regressor trained with mini-batch gradient descent

    Parameters
    ----------
    hidden_layer_sizes: tuple of int or int, optional (DEFAULT = ())
       Number of neurons in each hidden layer, empty tuple corresponds to
       single linear layer

    activation: str, optional (DEFAULT = 'relu')
       Activation of hidden layers {'identity','logistic','tanh','relu'}.
       Output layer uses the same activation unless loss is 'log' or
       'cross-entropy' (then output activation is 'logistic')

    solver: str or callable, optional (DEFAULT = 'adam')
       Optimizer {'sgd','agd','adagrad','rmsprop','adadelta','adam'} or
       callable that returns new optimizer instance

    alpha: float, optional (DEFAULT = 0)
       Regularization parameter

    l1_ratio: float, optional (DEFAULT = 0)
       Mixing parameter of elastic net penalty, 0 corresponds to L2 penalty
       and 1 to L1 penalty

    gradient_clipping: float, optional (DEFAULT = 0)
       If positive, gradient of each layer is rescaled whenever its l2 norm
       exceeds this value

    epochs: int, optional (DEFAULT = None)
       Number of epochs, if None ceil(1e6 / n_samples) epochs are used

    batch_size: int, optional (DEFAULT = None)
       Size of mini-batches, if None whole dataset is used

    loss: str, optional (DEFAULT = 'square')
       Loss function {'square','log','cross-entropy'}

    learning_rate_init: float, optional (DEFAULT = None)
       Learning rate passed to optimizer (if None, default of optimizer is used)

    shuffle: bool, optional (DEFAULT = True)
       If True data are shuffled before each epoch

    random_state: int, RandomState instance or None, optional (DEFAULT = None)
       Source of randomness for weight initialization and shuffling

    verbose: bool, optional (DEFAULT = False)
       If True loss is printed every 100 epochs

    Attributes
    ----------
    layers_: list of Layer
       Layers of network (from input to output)

    coefs_buffer_: numpy array
       Parameters of all layers

    loss_: float
       Loss after last epoch

    loss_first_: float
       Loss after first epoch

    loss_curve_: list
       Loss after each epoch
    '''
    def __init__(self, hidden_layer_sizes=(), activation='relu', solver='adam',
                 alpha=0., l1_ratio=0., gradient_clipping=0., epochs=None,
                 batch_size=None, loss='square', learning_rate_init=None,
                 shuffle=True, random_state=None, verbose=False):
        super(MLPRegressor, self).__init__(hidden_layer_sizes, activation, solver,
                                           alpha, l1_ratio, gradient_clipping,
                                           epochs, batch_size, loss,
                                           learning_rate_init, shuffle,
                                           random_state, verbose)


    def fit(self, X, y):
        '''
        Fits multilayer perceptron

        Parameters
        ----------
        X: array-like of size [n_samples, n_features]
           Matrix of explanatory variables

        y: array-like of size [n_samples] or [n_samples, n_outputs]
           Target values

        Returns
        -------
        self: object
           self
        '''
        X, y = check_X_y(X, y, dtype=np.float64, multi_output=True, y_numeric=True)
        self._y_ndim = y.ndim
        Y = y.reshape(-1, 1) if y.ndim == 1 else y
        return self._fit(X, Y)


    def predict(self, X):
        '''
        Predicts target values

        Parameters
        ----------
        X: array-like of size [n_samples, n_features]

        Returns
        -------
        y_hat: numpy array of size [n_samples] or [n_samples, n_outputs]
        '''
        y_hat = self._forward(X)
        if self._y_ndim == 1:
            return y_hat.ravel()
        return y_hat



class MLPClassifier(ClassifierMixin, BaseMLP):
    '''
    Multilayer perceptron classifier, output layer has logistic activation
    (one output for binary problem, one output per class otherwise).

    Parameters are the same as in MLPRegressor, except default loss which
    is 'log' (for binary problem it is identical to 'cross-entropy'). For
    problems with more than two classes 'cross-entropy' loss penalizes both
    false positive and false negative outputs.
    '''
    def __init__(self, hidden_layer_sizes=(), activation='relu', solver='adam',
                 alpha=0., l1_ratio=0., gradient_clipping=0., epochs=None,
                 batch_size=None, loss='log', learning_rate_init=None,
                 shuffle=True, random_state=None, verbose=False):
        super(MLPClassifier, self).__init__(hidden_layer_sizes, activation, solver,
                                            alpha, l1_ratio, gradient_clipping,
                                            epochs, batch_size, loss,
                                            learning_rate_init, shuffle,
                                            random_state, verbose)


    def fit(self, X, y):
        '''
        Fits multilayer perceptron classifier

        Parameters
        ----------
        X: array-like of size [n_samples, n_features]
           Matrix of explanatory variables

        y: array-like of size [n_samples]
           Class labels

        Returns
        -------
        self: object
           self
        '''
        X, y = check_X_y(X, y, dtype=np.float64)
        check_classification_targets(y)
        self._label_binarizer = LabelBinarizer()
        Y = self._label_binarizer.fit_transform(y).astype(np.float64)
        self.classes_ = self._label_binarizer.classes_
        if len(self.classes_) < 2:
            raise ValueError("Need samples of at least 2 classes")
        return self._fit(X, Y)


    def predict_proba(self, X):
        '''
        Probabilities of classes

        Parameters
        ----------
        X: array-like of size [n_samples, n_features]

        Returns
        -------
        probs: numpy array of size [n_samples, n_classes]
        '''
        H = self._forward(X)
        if H.shape[1] == 1:
            return np.hstack([1 - H, H])
        return H / np.sum(H, axis=1, keepdims=True)


    def predict(self, X):
        '''
        Predicts class labels

        Parameters
        ----------
        X: array-like of size [n_samples, n_features]

        Returns
        -------
        y_hat: numpy array of size [n_samples]
        '''
        return self._label_binarizer.inverse_transform(self._forward(X))
