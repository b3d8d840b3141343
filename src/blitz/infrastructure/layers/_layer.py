"""
Layer base classes.

`Layer` owns the lifecycle state machine and the output buffers shared by
every layer type; subclasses implement `_init_impl`, `_forward_prop_impl`
and `_backward_prop_impl`. `ParamLayer` adds trainable parameters, each
stored as a (parameter, gradient, velocity) triple of equal shape, and the
optimizer step over all of them.

Layers issue kernels sequentially through the injected backend and never
branch on the device kind themselves.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging
from typing import Dict, Iterator, Optional, Tuple, Union

from ...domain._backend import INumericBackend
from ...domain._layer import ILayer, LayerState
from ...domain._policies import IActivation, IFiller, IOptimizer
from ...domain._tensor import ITensor, Shape, normalize_shape
from .._config import get_config
from ..activations._registry import get_activation
from ..backend._registry import get_backend
from ..fillers import Filler

logger = logging.getLogger(__name__)

ParamTriple = Tuple[ITensor, ITensor, ITensor]


class Layer(ILayer, ABC):
    """
    Base layer with lifecycle tracking.

    Parameters
    ----------
    name : str
        Layer name, used in logs and error messages.
    activation : IActivation or str, optional
        Activation policy or registered activation name. None means identity.
    backend : INumericBackend, optional
        Backend executing every kernel. Defaults to the CPU backend for the
        configured dtype.
    """

    def __init__(
        self,
        name: str,
        activation: Optional[Union[IActivation, str]] = None,
        backend: Optional[INumericBackend] = None,
    ) -> None:
        if isinstance(activation, str):
            activation = get_activation(activation)
        self._name = str(name)
        self._activation: Optional[IActivation] = activation
        self._backend: INumericBackend = (
            backend if backend is not None else get_backend("cpu", get_config().dtype)
        )
        self._state = LayerState.UNINITIALIZED
        self._input_shape: Optional[Shape] = None
        self._forward_input: Optional[ITensor] = None
        self._forward_output: Optional[ITensor] = None
        self._backward_output: Optional[ITensor] = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> LayerState:
        return self._state

    @property
    def backend(self) -> INumericBackend:
        return self._backend

    @property
    def activation(self) -> Optional[IActivation]:
        return self._activation

    @property
    def input_shape(self) -> Optional[Shape]:
        return self._input_shape

    @property
    def forward_output(self) -> Optional[ITensor]:
        return self._forward_output

    @property
    def backward_output(self) -> Optional[ITensor]:
        return self._backward_output

    def init(self, input_shape: Shape) -> None:
        """
        Derive parameter shapes from `input_shape` and allocate buffers.

        May be called again with a different shape; everything is
        reallocated and the layer returns to INITIALIZED.

        Raises
        ------
        ValueError
            If `input_shape` is a scalar shape or has a zero batch extent.
        """
        shape = normalize_shape(input_shape)
        if len(shape) == 0 or shape[0] <= 0:
            raise ValueError(
                f"{self._name}: input shape needs a positive batch axis, got {shape}"
            )
        self._input_shape = shape
        self._forward_input = None
        self._forward_output = None
        self._backward_output = None
        self._init_impl(shape)
        self._state = LayerState.INITIALIZED
        logger.debug("%s: initialized with input shape %s", self._name, shape)

    def forward_prop(self, forward_input: ITensor) -> ITensor:
        """
        Run forward propagation and cache what backward propagation needs.

        Raises
        ------
        RuntimeError
            If the layer has not been initialized.
        """
        if self._state is LayerState.UNINITIALIZED:
            raise RuntimeError(f"{self._name}: forward_prop called before init")
        out = self._forward_prop_impl(forward_input)
        self._forward_input = forward_input
        self._forward_output = out
        self._state = LayerState.FORWARD_PROPAGATED
        return out

    def backward_prop(self, backward_input: ITensor) -> ITensor:
        """
        Run backward propagation against the cached forward state.

        `backward_input` holds the gradient with respect to this layer's
        output and is modified in place by the activation derivative.

        Raises
        ------
        RuntimeError
            If no forward pass has been cached since the last init.
        """
        if self._forward_output is None or self._state not in (
            LayerState.FORWARD_PROPAGATED,
            LayerState.BACKWARD_PROPAGATED,
        ):
            raise RuntimeError(
                f"{self._name}: backward_prop called before forward_prop"
            )
        out = self._backward_prop_impl(backward_input)
        self._backward_output = out
        self._state = LayerState.BACKWARD_PROPAGATED
        return out

    @abstractmethod
    def _init_impl(self, input_shape: Shape) -> None: ...

    @abstractmethod
    def _forward_prop_impl(self, forward_input: ITensor) -> ITensor: ...

    @abstractmethod
    def _backward_prop_impl(self, backward_input: ITensor) -> ITensor: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, state={self._state.value})"


class ParamLayer(Layer):
    """
    Layer with trainable parameters.

    Parameters
    ----------
    name : str
        Layer name.
    filler : IFiller or str
        Filler policy (or registered filler name) for the weights.
    optimizer : IOptimizer
        Update rule applied by `update`.
    activation : IActivation or str, optional
        Activation policy.
    backend : INumericBackend, optional
        Kernel backend.
    """

    def __init__(
        self,
        name: str,
        filler: Union[IFiller, str],
        optimizer: IOptimizer,
        activation: Optional[Union[IActivation, str]] = None,
        backend: Optional[INumericBackend] = None,
    ) -> None:
        super().__init__(name, activation, backend)
        self._filler: IFiller = Filler(filler) if isinstance(filler, str) else filler
        self._optimizer = optimizer
        self._params: Dict[str, ParamTriple] = {}

    @property
    def filler(self) -> IFiller:
        return self._filler

    @property
    def optimizer(self) -> IOptimizer:
        return self._optimizer

    def _add_param(
        self, key: str, shape: Shape, filler: Optional[IFiller] = None
    ) -> ParamTriple:
        """
        Allocate a parameter with matching gradient and velocity tensors.

        The parameter is filled with `filler`, or zero-filled when None.
        Gradient and velocity start at zero.
        """
        backend = self._backend
        param = backend.zeros(shape)
        if filler is not None:
            filler(backend, param)
        triple = (param, backend.zeros(shape), backend.zeros(shape))
        self._params[key] = triple
        return triple

    def parameters(self) -> Dict[str, ITensor]:
        return {k: t[0] for k, t in self._params.items()}

    def gradients(self) -> Dict[str, ITensor]:
        return {k: t[1] for k, t in self._params.items()}

    def velocities(self) -> Dict[str, ITensor]:
        return {k: t[2] for k, t in self._params.items()}

    def param_triples(self) -> Iterator[Tuple[str, ParamTriple]]:
        return iter(self._params.items())

    def update(self, batch_size: int) -> None:
        """
        Apply the optimizer to every (parameter, gradient, velocity) triple.

        Raises
        ------
        RuntimeError
            If no backward pass has produced gradients yet.
        """
        if self._state is not LayerState.BACKWARD_PROPAGATED:
            raise RuntimeError(
                f"{self._name}: update requires a completed backward_prop"
            )
        for _, (param, grad, velocity) in self.param_triples():
            self._optimizer.update(self._backend, param, grad, velocity, batch_size)


__all__ = [
    Layer.__name__,
    ParamLayer.__name__,
]
