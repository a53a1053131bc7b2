"""Helper functions layered over numpy by (import "numpy" as "np" helpers "np_helpers")."""
import numpy as np


def to_list(x):
    """Convert any iterable to a Python list; wrap scalars and strings in a list."""
    if isinstance(x, (str, bytes)):
        return [x]
    if isinstance(x, np.ndarray):
        return x.reshape(-1).tolist() if x.ndim else [x.item()]
    try:
        return list(x)
    except TypeError:
        return [x]


def to_bool(x):
    """Convert numpy or Python values to a single boolean."""
    if hasattr(x, 'any'):
        return bool(x.any())
    return bool(x)


def shape_of(x):
    """Shape of an array-like as a list of ints."""
    return list(np.shape(x))
