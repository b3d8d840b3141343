"""
Affine (fully connected) layer.

Computes `y = activation(x @ W + b)` with

- `W` of shape `(input_dim, nout)`, filled by the layer's filler policy,
- `b` of shape `(nout,)`, zero-initialized,

where `input_dim` is the per-sample feature count of the input
(`size // shape[0]`), so inputs with trailing dimensions are flattened per
sample.

Forward and backward passes are a fixed sequence of backend kernels:

forward:
    pre  = matrix_dot(x, W)
    pre  = bias_forward(pre, b)
    out  = activation.apply(pre)

backward (g is the upstream gradient, modified in place):
    g       = activation.derivative(g)
    dW      = matrix_dot(x, g, transa=True)
    db      = bias_backward_update(g)
    dx      = matrix_dot(g, W, transb=True)

The optimizer update is a separate call (`update(batch_size)`).
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from ...domain._backend import INumericBackend
from ...domain._errors import ShapeMismatchError, UnsupportedKernelError
from ...domain._policies import IActivation, IFiller, IOptimizer
from ...domain._tensor import ITensor, Shape, sample_dims
from .._config import KERNELS, get_config
from ..activations._activations import ACTIVATED, PRE_ACTIVATION
from ._layer import ParamLayer, ParamTriple

logger = logging.getLogger(__name__)


class Affine(ParamLayer):
    """
    Fully connected layer.

    Parameters
    ----------
    name : str
        Layer name.
    filler : IFiller or str
        Weight filler policy or registered filler name.
    optimizer : IOptimizer
        Parameter update rule.
    activation : IActivation or str, optional
        Activation applied to the affine output. None means identity.
    nout : int
        Number of output units.
    kernel : str, optional
        Matrix-multiply kernel (`"blas"` or `"asm"`). Defaults to
        `BlitzConfig.kernel`.
    backend : INumericBackend, optional
        Kernel backend. Defaults to the CPU backend.

    Raises
    ------
    ValueError
        If `nout` is not positive.
    UnsupportedKernelError
        If `kernel` is not a recognized kernel name.
    """

    def __init__(
        self,
        name: str,
        filler: Union[IFiller, str],
        optimizer: IOptimizer,
        activation: Optional[Union[IActivation, str]],
        nout: int,
        kernel: Optional[str] = None,
        backend: Optional[INumericBackend] = None,
    ) -> None:
        super().__init__(name, filler, optimizer, activation, backend)
        if int(nout) <= 0:
            raise ValueError(f"nout must be a positive integer, got {nout}")
        kernel = get_config().kernel if kernel is None else kernel
        if kernel not in KERNELS:
            raise UnsupportedKernelError(kernel, KERNELS)
        self.nout = int(nout)
        self.kernel = kernel
        self.input_dim: Optional[int] = None
        self._pre_activation: Optional[ITensor] = None
        self._buffer_shape: Optional[Shape] = None

    @property
    def weight(self) -> ITensor:
        return self._param("weight")[0]

    @property
    def bias(self) -> ITensor:
        return self._param("bias")[0]

    @property
    def weight_gradient(self) -> ITensor:
        return self._param("weight")[1]

    @property
    def bias_gradient(self) -> ITensor:
        return self._param("bias")[1]

    @property
    def weight_velocity(self) -> ITensor:
        return self._param("weight")[2]

    @property
    def bias_velocity(self) -> ITensor:
        return self._param("bias")[2]

    @property
    def pre_activation(self) -> Optional[ITensor]:
        return self._pre_activation

    def _param(self, key: str) -> ParamTriple:
        try:
            return self._params[key]
        except KeyError:
            raise RuntimeError(
                f"{self.name}: parameters are not allocated before init"
            ) from None

    def _init_impl(self, input_shape: Shape) -> None:
        _, input_dim = sample_dims(input_shape)
        if input_dim <= 0:
            raise ValueError(
                f"{self.name}: input shape {input_shape} has no features per sample"
            )
        self.input_dim = input_dim
        self._params = {}
        self._add_param("weight", (input_dim, self.nout), self.filler)
        self._add_param("bias", (self.nout,))
        self._allocate_buffers(tuple(input_shape))
        logger.debug(
            "%s: weight %s, bias %s, kernel %s",
            self.name,
            (input_dim, self.nout),
            (self.nout,),
            self.kernel,
        )

    def _allocate_buffers(self, input_shape: Shape) -> None:
        """Size the output and input-gradient buffers for inputs of `input_shape`."""
        backend = self.backend
        batch = int(input_shape[0])
        self._pre_activation = backend.zeros((batch, self.nout))
        if self.activation is None:
            self._output = self._pre_activation
        else:
            self._output = backend.zeros((batch, self.nout))
        self._input_grad = backend.zeros(input_shape)
        self._buffer_shape = input_shape

    def _forward_prop_impl(self, forward_input: ITensor) -> ITensor:
        shape = tuple(forward_input.shape)
        batch, dim = sample_dims(shape)
        if len(shape) == 0 or batch <= 0 or dim != self.input_dim:
            raise ShapeMismatchError(
                "Affine.forward_prop",
                f"expected (batch, {self.input_dim}) features, got shape {shape}",
            )
        if shape != self._buffer_shape:
            self._allocate_buffers(shape)

        backend = self.backend
        pre = self._pre_activation
        backend.matrix_dot(
            forward_input, self.weight, False, False, 1.0, 0.0, pre, self.kernel
        )
        backend.bias_forward(pre, self.bias, pre)
        if self.activation is not None:
            self.activation.apply(backend, pre, self._output)
        return self._output

    def _backward_prop_impl(self, backward_input: ITensor) -> ITensor:
        expected = tuple(self.forward_output.shape)
        if tuple(backward_input.shape) != expected:
            raise ShapeMismatchError.shapes(
                "Affine.backward_prop", expected, backward_input.shape
            )

        backend = self.backend
        if self.activation is not None:
            kind = getattr(self.activation, "input_kind", ACTIVATED)
            cached = self._pre_activation if kind == PRE_ACTIVATION else self._output
            self.activation.derivative(backend, cached, backward_input)

        backend.matrix_dot(
            self._forward_input,
            backward_input,
            True,
            False,
            1.0,
            0.0,
            self.weight_gradient,
            self.kernel,
        )
        backend.bias_backward_update(backward_input, self.bias_gradient)
        backend.matrix_dot(
            backward_input,
            self.weight,
            False,
            True,
            1.0,
            0.0,
            self._input_grad,
            self.kernel,
        )
        return self._input_grad

    def __repr__(self) -> str:
        return (
            f"Affine(name={self.name!r}, nout={self.nout}, kernel={self.kernel!r}, "
            f"activation={self.activation!r}, state={self.state.value})"
        )


__all__ = [Affine.__name__]
