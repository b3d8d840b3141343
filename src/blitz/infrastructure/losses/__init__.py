from ._losses import (
    CrossEntropyBinary,
    CrossEntropyMulti,
    available_losses,
    get_loss,
    register_loss,
)

__all__ = [
    CrossEntropyBinary.__name__,
    CrossEntropyMulti.__name__,
    get_loss.__name__,
    register_loss.__name__,
    available_losses.__name__,
]
