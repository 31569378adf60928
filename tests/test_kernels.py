# -- Smoothing Kernel Tests -- #

'''
Tests for kernel values, derivatives, support and normalization.
'''

import math

import numpy as np
import pytest

from FluidSim.sph.errors import ConfigurationError
from FluidSim.sph.kernels import (
    CubicKernel,
    GaussianKernel,
    KernelType,
    LinearKernel,
    createKernel,
    influence,
    influenceDerivative,
)

ALL_KERNELS = [KernelType.GAUSSIAN, KernelType.CUBIC, KernelType.LINEAR]
COMPACT_KERNELS = [KernelType.CUBIC, KernelType.LINEAR]


def planarIntegral(kernel, h, nSamples=20000):
    '''Midpoint-rule integral of 2*pi*r*W(r) over [0, 6h].'''
    rMax = 6.0 * h
    dr = rMax / nSamples
    r = (np.arange(nSamples) + 0.5) * dr
    return float(np.sum(2.0 * math.pi * r * kernel.evaluateBatch(r, h)) * dr)


class TestKernelValues:

    @pytest.mark.parametrize('kernelType', ALL_KERNELS)
    @pytest.mark.parametrize('h', [0.25, 1.0, 3.0])
    def testWeightIsNonNegative(self, kernelType, h):
        kernel = createKernel(kernelType)
        distances = np.linspace(0.0, 4.0 * h, 401)

        assert np.all(kernel.evaluateBatch(distances, h) >= 0.0)
        assert all(kernel.evaluate(d, h) >= 0.0 for d in distances)

    @pytest.mark.parametrize('kernelType', COMPACT_KERNELS)
    def testCompactKernelsVanishOutsideSupport(self, kernelType):
        kernel = createKernel(kernelType)
        h = 1.5

        for d in [h, 1.0001 * h, 2.0 * h, 10.0 * h]:
            assert kernel.evaluate(d, h) == 0.0
            assert kernel.derivative(d, h) == 0.0

        # Limit from below approaches zero
        assert kernel.evaluate(h * (1.0 - 1e-6), h) < 1e-9
        assert abs(kernel.derivative(h * (1.0 - 1e-6), h)) < 1e-4

    def testGaussianIsPositiveAndDecreasing(self):
        kernel = GaussianKernel()
        distances = np.linspace(0.0, 3.0, 300)
        weights = kernel.evaluateBatch(distances, 1.0)

        assert np.all(weights > 0.0)
        assert np.all(np.diff(weights) < 0.0)

    def testGaussianPeakValue(self):
        assert GaussianKernel().evaluate(0.0, 2.0) == pytest.approx(1.0 / (2.0 * math.sqrt(math.pi)))

    def testCubicPeakValue(self):
        h = 2.0
        expected = h ** 6 / (math.pi * h ** 8 / 4.0)
        assert CubicKernel().evaluate(0.0, h) == pytest.approx(expected)

    def testLinearPeakValue(self):
        h = 2.0
        expected = h ** 2 / (math.pi * h ** 4 / 6.0)
        assert LinearKernel().evaluate(0.0, h) == pytest.approx(expected)

    @pytest.mark.parametrize('kernelType', ALL_KERNELS)
    def testBatchMatchesScalar(self, kernelType):
        kernel = createKernel(kernelType)
        h = 1.3
        distances = np.linspace(0.0, 2.5 * h, 57)

        scalarWeights = [kernel.evaluate(d, h) for d in distances]
        scalarSlopes = [kernel.derivative(d, h) for d in distances]

        np.testing.assert_allclose(kernel.evaluateBatch(distances, h), scalarWeights, rtol=1e-12, atol=0.0)
        np.testing.assert_allclose(kernel.derivativeBatch(distances, h), scalarSlopes, rtol=1e-12, atol=0.0)


class TestKernelDerivatives:

    @pytest.mark.parametrize('kernelType', ALL_KERNELS)
    @pytest.mark.parametrize('fraction', [0.1, 0.3, 0.5, 0.7, 0.9])
    def testDerivativeMatchesFiniteDifference(self, kernelType, fraction):
        kernel = createKernel(kernelType)
        h = 1.7
        d = fraction * h
        eps = 1e-6 * h

        numeric = (kernel.evaluate(d + eps, h) - kernel.evaluate(d - eps, h)) / (2.0 * eps)

        assert kernel.derivative(d, h) == pytest.approx(numeric, rel=1e-3)

    @pytest.mark.parametrize('kernelType', ALL_KERNELS)
    def testDerivativeIsNonPositive(self, kernelType):
        kernel = createKernel(kernelType)
        distances = np.linspace(0.0, 3.0, 61)

        assert np.all(kernel.derivativeBatch(distances, 1.0) <= 0.0)

    def testGaussianDerivativeFormula(self):
        kernel = GaussianKernel()
        d, h = 0.4, 0.8
        assert kernel.derivative(d, h) == pytest.approx(-(2.0 * d / h ** 2) * kernel.evaluate(d, h))


class TestKernelNormalization:

    @pytest.mark.parametrize('kernelType', COMPACT_KERNELS)
    @pytest.mark.parametrize('h', [0.5, 1.0, 2.5])
    def testCompactKernelsIntegrateToOne(self, kernelType, h):
        assert planarIntegral(createKernel(kernelType), h) == pytest.approx(1.0, rel=1e-3)

    def testGaussianPlanarIntegralIsHSqrtPi(self):
        h = 0.8
        assert planarIntegral(GaussianKernel(), h) == pytest.approx(h * math.sqrt(math.pi), rel=1e-3)


class TestKernelSelection:

    @pytest.mark.parametrize('name, expected', [
        ('gaussian', KernelType.GAUSSIAN),
        ('Cubic', KernelType.CUBIC),
        (' linear ', KernelType.LINEAR),
    ])
    def testFromName(self, name, expected):
        assert KernelType.fromName(name) is expected

    def testUnknownNameRaises(self):
        with pytest.raises(ConfigurationError):
            KernelType.fromName('quintic')

        with pytest.raises(ConfigurationError):
            createKernel('wendlandC2')

    def testUnknownTagRaises(self):
        with pytest.raises(ConfigurationError):
            createKernel(42)

    def testDispatchMatchesKernelClasses(self):
        assert influence(0.3, 1.0, KernelType.CUBIC) == CubicKernel().evaluate(0.3, 1.0)
        assert influenceDerivative(0.3, 1.0, KernelType.LINEAR) == LinearKernel().derivative(0.3, 1.0)
        assert influence(0.3, 1.0, KernelType.GAUSSIAN) == GaussianKernel().evaluate(0.3, 1.0)
