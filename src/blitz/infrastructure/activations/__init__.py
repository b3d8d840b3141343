from ._activations import ACTIVATED, PRE_ACTIVATION, Logistic, Rectlin, Softmax
from ._registry import available_activations, get_activation, register_activation

__all__ = [
    Rectlin.__name__,
    Logistic.__name__,
    Softmax.__name__,
    get_activation.__name__,
    register_activation.__name__,
    available_activations.__name__,
    "PRE_ACTIVATION",
    "ACTIVATED",
]
