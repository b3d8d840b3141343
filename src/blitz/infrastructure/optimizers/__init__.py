from ._gradientdescent import (
    Gradientdescent,
    available_optimizers,
    get_optimizer,
    register_optimizer,
)

__all__ = [
    Gradientdescent.__name__,
    get_optimizer.__name__,
    register_optimizer.__name__,
    available_optimizers.__name__,
]
