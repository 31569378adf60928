# -- SPH Density and Pressure-Force Evaluation -- #

'''
Exhaustive pairwise SPH summations for density and pressure force.

Every live particle interacts with every other live particle: no
neighbour grid or tree is used, so cost is O(N^2) per pass.

Density of particle i (self excluded, clamped at a small floor):
    rho_i = sum_{j != i} m * W(|x_i - x_j|, h)

Density at an arbitrary point x (all particles, no clamp):
    rho(x) = sum_j m * W(|x - x_j|, h)

Pressure-gradient force on particle i:
    F_i = sum_{j != i} (p_j / rho_j) * m * dW/dr(|x_i - x_j|, h) * e_ij
    e_ij = (x_j - x_i) / |x_j - x_i|

Pairs with zero separation have no defined direction and are
skipped in the force sum.

The per-index functions evaluate one particle against the store.
The batch functions evaluate the whole live range in row blocks of
the full pair matrix, which bounds memory at blockSize * N pairs.

References:
-----------
Monaghan (1992) -- Smoothed Particle Hydrodynamics
Muller et al. (2003) -- Particle-based fluid simulation for
    interactive applications
'''

from __future__ import annotations

import numpy as np

from FluidSim import constants as const
from FluidSim.sph.kernels import createKernel
from FluidSim.sph.particles import ParticleStore
from FluidSim.sph.pressureModels import evaluatePressure
from FluidSim.sph.protocols import SimulationParameters


def _checkIndex(store: ParticleStore, index: int) -> None:
    if not 0 <= index < store.count:
        raise IndexError(f'Particle index {index} outside [0, {store.count})')


######################################################################
# -- Single Particle Evaluation -- #
######################################################################

def evaluateDensity(
    store: ParticleStore, index: int, params: SimulationParameters
) -> float:
    '''
    Density of one live particle from all other live particles.

    Parameters:
    -----------
    store : ParticleStore
        Particle store
    index : int
        Particle index, 0 <= index < count
    params : SimulationParameters
        Simulation parameters

    Returns:
    --------
    float : Density [kg/m^3], at least the density floor
    '''
    _checkIndex(store, index)
    kernel = createKernel(params.kernelType)
    positions = store.livePositions

    distances = np.linalg.norm(positions - positions[index], axis=1)
    weights = kernel.evaluateBatch(distances, params.smoothingLength)
    weights[index] = 0.0

    density = float(np.sum(weights * params.particleMass))
    return max(density, const.densityFloor)


def evaluateDensityAt(
    store: ParticleStore, point, params: SimulationParameters
) -> float:
    '''
    Density at an arbitrary point, for visualization and diagnostics.

    Every live particle contributes and the result is not clamped,
    so an empty neighbourhood gives zero.

    Parameters:
    -----------
    store : ParticleStore
        Particle store
    point : array-like
        Query position [m], length 2
    params : SimulationParameters
        Simulation parameters

    Returns:
    --------
    float : Density [kg/m^3]
    '''
    kernel = createKernel(params.kernelType)
    point = np.asarray(point, dtype=float)

    distances = np.linalg.norm(store.livePositions - point, axis=1)
    weights = kernel.evaluateBatch(distances, params.smoothingLength)
    return float(np.sum(weights * params.particleMass))


def evaluateForce(
    store: ParticleStore, index: int, params: SimulationParameters
) -> np.ndarray:
    '''
    Pressure-gradient force on one live particle.

    Reads the densities and pressures currently held by the store,
    so a density pass must have run first.

    Parameters:
    -----------
    store : ParticleStore
        Particle store with up-to-date densities and pressures
    index : int
        Particle index, 0 <= index < count
    params : SimulationParameters
        Simulation parameters

    Returns:
    --------
    np.ndarray : Force vector, shape (2,)
    '''
    _checkIndex(store, index)
    kernel = createKernel(params.kernelType)
    positions = store.livePositions

    offsets = positions - positions[index]
    distances = np.linalg.norm(offsets, axis=1)

    valid = distances > 0.0
    valid[index] = False
    if not np.any(valid):
        return np.zeros(2)

    slopes = kernel.derivativeBatch(distances[valid], params.smoothingLength)
    scale = (
        store.livePressures[valid] / store.liveDensities[valid]
        * params.particleMass * slopes
    )
    directions = offsets[valid] / distances[valid][:, np.newaxis]

    return np.sum(scale[:, np.newaxis] * directions, axis=0)


######################################################################
# -- Whole-Store Passes (Vectorized) -- #
######################################################################

def _blockGeometry(
    positions: np.ndarray, start: int, stop: int
) -> tuple[np.ndarray, np.ndarray]:
    '''
    Offsets x_j - x_i and distances for rows i in [start, stop).

    Returns:
    --------
    tuple[np.ndarray, np.ndarray] :
        offsets shape (stop - start, N, 2), distances shape (stop - start, N)
    '''
    offsets = positions[np.newaxis, :, :] - positions[start:stop, np.newaxis, :]
    distances = np.linalg.norm(offsets, axis=2)
    return offsets, distances


def computeDensities(
    store: ParticleStore,
    params: SimulationParameters,
    blockSize: int = const.pairBlockSize,
) -> None:
    '''
    Recompute density and pressure for every live particle.

    Positions are only read, so every particle sees the same
    snapshot. Results are written to store.densities and
    store.pressures.

    Parameters:
    -----------
    store : ParticleStore
        Particle store, updated in place
    params : SimulationParameters
        Simulation parameters
    blockSize : int
        Rows of the pair matrix processed at once
    '''
    n = store.count
    if n == 0:
        return

    kernel = createKernel(params.kernelType)
    h = params.smoothingLength
    positions = store.livePositions
    densities = np.empty(n)

    for start in range(0, n, blockSize):
        stop = min(start + blockSize, n)
        _, distances = _blockGeometry(positions, start, stop)

        weights = kernel.evaluateBatch(distances, h)
        # Exclude self-contribution (diagonal of the pair matrix)
        rows = np.arange(stop - start)
        weights[rows, rows + start] = 0.0

        densities[start:stop] = np.sum(weights * params.particleMass, axis=1)

    np.maximum(densities, const.densityFloor, out=densities)
    store.densities[:n] = densities
    store.pressures[:n] = evaluatePressure(densities, params.equationOfState)


def computeForces(
    store: ParticleStore,
    params: SimulationParameters,
    blockSize: int = const.pairBlockSize,
) -> np.ndarray:
    '''
    Pressure-gradient force on every live particle.

    Reads a consistent snapshot of positions, densities and
    pressures; nothing in the store is modified.

    Parameters:
    -----------
    store : ParticleStore
        Particle store with up-to-date densities and pressures
    params : SimulationParameters
        Simulation parameters
    blockSize : int
        Rows of the pair matrix processed at once

    Returns:
    --------
    np.ndarray : Forces, shape (count, 2)
    '''
    n = store.count
    forces = np.zeros((n, 2))
    if n == 0:
        return forces

    kernel = createKernel(params.kernelType)
    h = params.smoothingLength
    positions = store.livePositions

    # p_j / rho_j * m, shared by every row
    pressureTerm = store.livePressures / store.liveDensities * params.particleMass

    for start in range(0, n, blockSize):
        stop = min(start + blockSize, n)
        offsets, distances = _blockGeometry(positions, start, stop)

        # Skip self pairs and coincident particles
        valid = distances > 0.0
        rows = np.arange(stop - start)
        valid[rows, rows + start] = False

        safeDistances = np.where(valid, distances, 1.0)
        slopes = kernel.derivativeBatch(distances, h)
        coeff = np.where(valid, pressureTerm[np.newaxis, :] * slopes / safeDistances, 0.0)

        # sum_j coeff_ij * (x_j - x_i)
        forces[start:stop] = np.einsum('ij,ijk->ik', coeff, offsets)

    return forces
