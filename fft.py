import enum
import logging
import math

import numpy as np

logger = logging.getLogger(__name__)


class FFTError(Exception):
    """Base exception for FFT engine errors."""


class FFTNotInitializedError(FFTError, RuntimeError):
    """Raised when transform() is called before initialize()."""

    def __init__(self, message=None):
        super().__init__(message or "FFTEngine is not initialized; call initialize(log2n) first")


class FFTSizeError(FFTError, ValueError):
    """Raised when the input arrays do not match the initialized size."""

    def __init__(self, expected, got_re, got_im):
        self.expected = expected
        self.got_re = got_re
        self.got_im = got_im
        super().__init__(
            f"FFT input size mismatch: engine size is {expected}, "
            f"got len(x_re)={got_re}, len(x_im)={got_im}"
        )


class Direction(enum.Enum):
    FORWARD = "forward"
    INVERSE = "inverse"


def bit_reverse(x, num_bits):
    """Reverse the low ``num_bits`` bits of ``x``."""
    result = 0
    for _ in range(num_bits):
        result = (result << 1) | (x & 1)
        x >>= 1
    return result


def log2_size(n):
    """Return log2(n) for a power-of-two n, or raise ValueError."""
    if isinstance(n, bool) or not isinstance(n, (int, np.integer)) or n < 1 or n & (n - 1) != 0:
        raise ValueError(f"FFT size must be power of 2. Given: {n}")
    return int(n).bit_length() - 1


def _check_writable_output(x, name):
    """Reject containers the result cannot be written into without loss."""
    if isinstance(x, np.ndarray):
        if not np.issubdtype(x.dtype, np.floating):
            raise TypeError(f"{name} must have a floating dtype, got {x.dtype}")
        if x.ndim != 1:
            raise ValueError(f"{name} must be 1D. Given shape: {x.shape}")
        if not x.flags.writeable:
            raise TypeError(f"{name} is a read-only array")
    elif not hasattr(type(x), "__setitem__"):
        raise TypeError(f"{name} must be a mutable sequence, got {type(x).__name__}")


class FFTEngine:
    """
    In-place radix-2 FFT of a fixed power-of-two size.

    The size is set by initialize() and reused by every transform() call
    until the next initialize(). Working buffers are allocated once per
    size; an engine must not be shared between concurrent transforms.
    """

    def __init__(self, log2n=None):
        self.log2n = None
        self.n = 0
        self.inv_n = 0.0
        self._re = None
        self._im = None
        self.rev_target = None
        if log2n is not None:
            self.initialize(log2n)

    @property
    def is_initialized(self):
        return self.rev_target is not None

    @property
    def size(self):
        return self.n

    def initialize(self, log2n):
        if isinstance(log2n, bool) or not isinstance(log2n, (int, np.integer)) or log2n < 0:
            raise ValueError(f"log2n must be a non-negative integer. Given: {log2n!r}")
        log2n = int(log2n)
        n = 1 << log2n

        self.log2n = log2n
        self.n = n
        self.inv_n = 1.0 / n
        self._re = [0.0] * n
        self._im = [0.0] * n
        self.rev_target = np.fromiter(
            (bit_reverse(k, log2n) for k in range(n)), dtype=np.intp, count=n
        )
        logger.debug(f"FFTEngine initialized: N={n} (log2n={log2n})")

    def transform(self, x_re, x_im, direction):
        """
        Transform ``x_re``/``x_im`` in place.

        FORWARD computes X[k] = sum(x[n] * exp(-2j*pi*k*n/N)); INVERSE uses
        the conjugate rotation and scales by 1/N. Both arrays are overwritten
        with the result in natural order.
        """
        if not self.is_initialized:
            raise FFTNotInitializedError()
        if not isinstance(direction, Direction):
            raise TypeError(f"direction must be a Direction, got {direction!r}")
        n = self.n
        if len(x_re) != n or len(x_im) != n:
            raise FFTSizeError(n, len(x_re), len(x_im))
        if x_re is x_im:
            raise ValueError("x_re and x_im must be distinct arrays")
        _check_writable_output(x_re, "x_re")
        _check_writable_output(x_im, "x_im")
        if (
            isinstance(x_re, np.ndarray)
            and isinstance(x_im, np.ndarray)
            and np.shares_memory(x_re, x_im)
        ):
            raise ValueError("x_re and x_im must not share memory")

        re = self._re
        im = self._im
        forward = direction is Direction.FORWARD

        if forward:
            for k in range(n):
                re[k] = float(x_re[k])
                im[k] = float(x_im[k])
        else:
            scale = self.inv_n
            for k in range(n):
                re[k] = float(x_re[k]) * scale
                im[k] = float(x_im[k]) * scale

        num_flies = n >> 1
        span = n >> 1
        spacing = n
        w_index_step = 1

        for _ in range(self.log2n):
            angle_inc = w_index_step * 2.0 * math.pi / n
            if forward:
                angle_inc = -angle_inc
            w_mul_re = math.cos(angle_inc)
            w_mul_im = math.sin(angle_inc)

            for start in range(0, n, spacing):
                top = start
                bot = start + span
                w_re = 1.0
                w_im = 0.0
                for _ in range(num_flies):
                    top_re = re[top]
                    top_im = im[top]
                    bot_re = re[bot]
                    bot_im = im[bot]

                    re[top] = top_re + bot_re
                    im[top] = top_im + bot_im

                    diff_re = top_re - bot_re
                    diff_im = top_im - bot_im
                    re[bot] = diff_re * w_re - diff_im * w_im
                    im[bot] = diff_re * w_im + diff_im * w_re

                    top += 1
                    bot += 1

                    w_re, w_im = (
                        w_re * w_mul_re - w_im * w_mul_im,
                        w_re * w_mul_im + w_im * w_mul_re,
                    )

            num_flies >>= 1
            span >>= 1
            spacing >>= 1
            w_index_step <<= 1

        rev_target = self.rev_target
        for k in range(n):
            target = rev_target[k]
            x_re[target] = re[k]
            x_im[target] = im[k]


class CustomFFT:
    @staticmethod
    def _run(x, direction):
        X = np.asarray(x)
        if X.ndim != 1:
            raise ValueError(f"FFT expects a 1D sequence. Given shape: {X.shape}")
        engine = FFTEngine(log2_size(len(X)))
        X = X.astype(complex)
        x_re = X.real.copy()
        x_im = X.imag.copy()
        engine.transform(x_re, x_im, direction)
        return x_re + 1j * x_im

    @staticmethod
    def fft(x):
        return CustomFFT._run(x, Direction.FORWARD)

    @staticmethod
    def inverse_fft(X):
        return CustomFFT._run(X, Direction.INVERSE)
