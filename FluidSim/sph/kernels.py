# -- SPH Smoothing Kernels -- #

'''
Smoothing kernel functions for 2D SPH interpolation.

Implements three radially symmetric kernels together with their
radial derivatives dW/dr:

- Gaussian: non-compact, W = exp(-r^2/h^2) / (h * sqrt(pi))
- Cubic:    compact support at r = h, W = (h^2 - r^2)^3 / (pi * h^8 / 4)
- Linear:   compact support at r = h, W = (h - r)^2 / (pi * h^4 / 6)

Note that the support radius of the compact kernels is h itself,
not 2h as for the classic M4 spline.

The cubic and linear normalizations integrate to one over the
plane. The Gaussian keeps the 1/(h * sqrt(pi)) prefactor of its
one-dimensional form, so its planar integral is h * sqrt(pi).

Kernels are selected with the KernelType enumeration. An unknown
tag is a configuration error and is never replaced by another
kernel.

References:
-----------
Monaghan (1992) -- Smoothed Particle Hydrodynamics
Muller et al. (2003) -- Particle-based fluid simulation for
    interactive applications
'''

from __future__ import annotations

import math
from enum import Enum
from typing import Protocol

import numpy as np

from FluidSim.sph.errors import ConfigurationError


######################################################################
# -- Kernel Selection -- #
######################################################################

class KernelType(Enum):
    '''Enumerated kernel shapes.'''

    GAUSSIAN = 'gaussian'
    CUBIC = 'cubic'
    LINEAR = 'linear'

    @classmethod
    def fromName(cls, name: str) -> KernelType:
        '''
        Parse a kernel name from configuration.

        Parameters:
        -----------
        name : str
            'gaussian', 'cubic' or 'linear' (case-insensitive)

        Returns:
        --------
        KernelType : Matching tag

        Raises:
        -------
        ConfigurationError : If the name is unknown
        '''
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            raise ConfigurationError(f'Unknown kernel type: {name!r}') from None


######################################################################
# -- Kernel Protocol -- #
######################################################################

class SphKernel(Protocol):
    '''Protocol for SPH smoothing kernel functions.'''

    def evaluate(self, r: float, h: float) -> float:
        '''
        Evaluate kernel W(r, h).

        Parameters:
        -----------
        r : float
            Distance between particles [m]
        h : float
            Smoothing length [m]

        Returns:
        --------
        float : Kernel value [1/m^2]
        '''
        ...

    def derivative(self, r: float, h: float) -> float:
        '''
        Evaluate the radial derivative dW/dr.

        Parameters:
        -----------
        r : float
            Distance between particles [m]
        h : float
            Smoothing length [m]

        Returns:
        --------
        float : dW/dr [1/m^3]
        '''
        ...

    def evaluateBatch(self, distances: np.ndarray, h: float) -> np.ndarray:
        '''Evaluate W for an array of distances.'''
        ...

    def derivativeBatch(self, distances: np.ndarray, h: float) -> np.ndarray:
        '''Evaluate dW/dr for an array of distances.'''
        ...


######################################################################
# -- Gaussian Kernel -- #
######################################################################

class GaussianKernel:
    '''
    Gaussian smoothing kernel.

    W(r) = (1 / (h * sqrt(pi))) * exp(-r^2 / h^2)
    dW/dr = -(2 * r / h^2) * W(r)

    Strictly positive everywhere and monotonically decreasing
    in r, with no compact support.
    '''

    kernelType = KernelType.GAUSSIAN

    def evaluate(self, r: float, h: float) -> float:
        return (1.0 / (h * math.sqrt(math.pi))) * math.exp(-(r * r) / (h * h))

    def derivative(self, r: float, h: float) -> float:
        return (-2.0 * r / (h * h)) * self.evaluate(r, h)

    def evaluateBatch(self, distances: np.ndarray, h: float) -> np.ndarray:
        distances = np.asarray(distances, dtype=float)
        return (1.0 / (h * math.sqrt(math.pi))) * np.exp(-(distances * distances) / (h * h))

    def derivativeBatch(self, distances: np.ndarray, h: float) -> np.ndarray:
        distances = np.asarray(distances, dtype=float)
        return (-2.0 * distances / (h * h)) * self.evaluateBatch(distances, h)


######################################################################
# -- Cubic Kernel -- #
######################################################################

class CubicKernel:
    '''
    Cubic (poly6-style) smoothing kernel with support radius h.

    W(r) = max(0, h^2 - r^2)^3 / V,   V = pi * h^8 / 4
    dW/dr = -24 / (pi * h^8) * r * (h^2 - r^2)^2   for r <= h

    Value and derivative both vanish at r = h.
    '''

    kernelType = KernelType.CUBIC

    @staticmethod
    def _volume(h: float) -> float:
        '''Normalization volume pi * h^8 / 4.'''
        return math.pi * h ** 8 / 4.0

    def evaluate(self, r: float, h: float) -> float:
        value = max(0.0, h * h - r * r)
        return value * value * value / self._volume(h)

    def derivative(self, r: float, h: float) -> float:
        if r > h:
            return 0.0

        f = h * h - r * r
        scale = -24.0 / (math.pi * h ** 8)
        return scale * r * f * f

    def evaluateBatch(self, distances: np.ndarray, h: float) -> np.ndarray:
        distances = np.asarray(distances, dtype=float)
        value = np.maximum(0.0, h * h - distances * distances)
        return value ** 3 / self._volume(h)

    def derivativeBatch(self, distances: np.ndarray, h: float) -> np.ndarray:
        distances = np.asarray(distances, dtype=float)
        f = h * h - distances * distances
        scale = -24.0 / (math.pi * h ** 8)
        return np.where(distances > h, 0.0, scale * distances * f * f)


######################################################################
# -- Linear Kernel -- #
######################################################################

class LinearKernel:
    '''
    Linear ("spiky" profile) smoothing kernel with support radius h.

    W(r) = (h - r)^2 / V,   V = pi * h^4 / 6   for r < h
    dW/dr = -12 / (pi * h^4) * (h - r)          for r < h

    The weight falls off linearly in slope, giving a sharp peak
    at r = 0 that keeps close particles apart.
    '''

    kernelType = KernelType.LINEAR

    @staticmethod
    def _volume(h: float) -> float:
        '''Normalization volume pi * h^4 / 6.'''
        return math.pi * h ** 4 / 6.0

    def evaluate(self, r: float, h: float) -> float:
        if r >= h:
            return 0.0

        return (h - r) * (h - r) / self._volume(h)

    def derivative(self, r: float, h: float) -> float:
        if r >= h:
            return 0.0

        scale = 12.0 / (math.pi * h ** 4)
        return -(h - r) * scale

    def evaluateBatch(self, distances: np.ndarray, h: float) -> np.ndarray:
        distances = np.asarray(distances, dtype=float)
        gap = np.maximum(0.0, h - distances)
        return gap * gap / self._volume(h)

    def derivativeBatch(self, distances: np.ndarray, h: float) -> np.ndarray:
        distances = np.asarray(distances, dtype=float)
        scale = 12.0 / (math.pi * h ** 4)
        return -np.maximum(0.0, h - distances) * scale


######################################################################
# -- Kernel Factory and Dispatch -- #
######################################################################

_KERNELS: dict[KernelType, SphKernel] = {
    KernelType.GAUSSIAN: GaussianKernel(),
    KernelType.CUBIC: CubicKernel(),
    KernelType.LINEAR: LinearKernel(),
}


def createKernel(kernelType: KernelType | str) -> SphKernel:
    '''
    Return the kernel instance for a tag or configuration name.

    Kernels are stateless, so the same instance is shared.

    Parameters:
    -----------
    kernelType : KernelType | str
        Kernel tag, or its configuration name

    Returns:
    --------
    SphKernel : Kernel instance

    Raises:
    -------
    ConfigurationError : If the kernel type is unknown
    '''
    if isinstance(kernelType, str):
        kernelType = KernelType.fromName(kernelType)

    kernel = _KERNELS.get(kernelType)
    if kernel is None:
        raise ConfigurationError(f'Unknown kernel type: {kernelType!r}')
    return kernel


def influence(distance: float, h: float, kernelType: KernelType) -> float:
    '''Kernel weight W(distance, h) for the selected kernel.'''
    return createKernel(kernelType).evaluate(distance, h)


def influenceDerivative(distance: float, h: float, kernelType: KernelType) -> float:
    '''Kernel slope dW/dr at distance for the selected kernel.'''
    return createKernel(kernelType).derivative(distance, h)
