# -- Density and Pressure Field Sampling -- #

'''
Sample continuous SPH fields on a regular grid for diagnostics.

The domain is divided into nx by ny cells and the point density
(all particles, unclamped) is evaluated at each cell centre. The
pressure field applies the active equation of state to those
densities. A renderer can turn either field into a heat map;
no colouring happens here.
'''

from __future__ import annotations

import numpy as np

from FluidSim.sph.interactions import evaluateDensityAt
from FluidSim.sph.particles import ParticleStore
from FluidSim.sph.pressureModels import evaluatePressure
from FluidSim.sph.protocols import SimulationParameters


def cellCenters(params: SimulationParameters, nx: int, ny: int) -> tuple[np.ndarray, np.ndarray]:
    '''
    Cell-centre coordinates of an nx by ny grid over the domain.

    Returns:
    --------
    tuple[np.ndarray, np.ndarray] : (xCenters shape (nx,), yCenters shape (ny,))
    '''
    if nx < 1 or ny < 1:
        raise ValueError(f'Grid must have at least one cell, got {nx} x {ny}')

    dx = params.width / nx
    dy = params.height / ny
    xCenters = (np.arange(nx) + 0.5) * dx
    yCenters = (np.arange(ny) + 0.5) * dy
    return xCenters, yCenters


def sampleDensityField(
    store: ParticleStore,
    params: SimulationParameters,
    nx: int,
    ny: int,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    '''
    Point density at every cell centre.

    Parameters:
    -----------
    store : ParticleStore
        Particle store
    params : SimulationParameters
        Simulation parameters
    nx : int
        Number of cells along x
    ny : int
        Number of cells along y

    Returns:
    --------
    tuple[np.ndarray, np.ndarray, np.ndarray] :
        (xCenters, yCenters, density) with density shape (ny, nx)
    '''
    xCenters, yCenters = cellCenters(params, nx, ny)
    field = np.empty((ny, nx))

    for row, y in enumerate(yCenters):
        for col, x in enumerate(xCenters):
            field[row, col] = evaluateDensityAt(store, (x, y), params)

    return xCenters, yCenters, field


def samplePressureField(
    store: ParticleStore,
    params: SimulationParameters,
    nx: int,
    ny: int,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    '''
    Pressure from the sampled density field.

    Returns:
    --------
    tuple[np.ndarray, np.ndarray, np.ndarray] :
        (xCenters, yCenters, pressure) with pressure shape (ny, nx)
    '''
    xCenters, yCenters, density = sampleDensityField(store, params, nx, ny)
    pressure = np.asarray(evaluatePressure(density, params.equationOfState), dtype=float)
    return xCenters, yCenters, pressure
