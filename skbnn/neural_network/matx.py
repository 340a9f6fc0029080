import numpy as np



def check_dims(*matrices):
    '''
    Raises ValueError unless all matrices have exactly the same shape
    (no broadcasting is allowed)
    '''
    shapes = [np.shape(m) for m in matrices]
    for shape in shapes[1:]:
        if shape != shapes[0]:
            raise ValueError(("Dimension mismatch, all matrices should have "
                              "the same shape, observed : {0}").format(shapes))



def sum_applied2(A, B, func):
    '''
    Sum of binary function applied elementwise to two matrices

    Parameters
    ----------
    A: numpy array of size [n_samples, n_outputs]
       First argument of func

    B: numpy array of size [n_samples, n_outputs]
       Second argument of func

    func: callable
       Vectorized binary function func(a,b)

    Returns
    -------
    : float
       sum( func(A,B) )
    '''
    check_dims(A, B)
    return float(np.sum(func(A, B)))



def copy_scaled_applied2(out, A, B, scale, func):
    '''
    Overwrites out in place with scale * func(A,B)

    Parameters
    ----------
    out: numpy array of size [n_samples, n_outputs]
       Matrix that is overwritten

    A, B: numpy arrays of size [n_samples, n_outputs]
       Arguments of func

    scale: float
       Multiplier applied to result of func

    func: callable
       Vectorized binary function func(a,b)

    Returns
    -------
    out: numpy array
       The same object that was passed in
    '''
    check_dims(out, A, B)
    np.multiply(func(A, B), scale, out=out)
    return out



def copy_applied(out, A, func):
    ''' Overwrites out in place with func(A) '''
    check_dims(out, A)
    out[...] = func(A)
    return out
