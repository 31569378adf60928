# -- SPH Particle Store -- #

'''
Fixed-capacity particle store for the SPH core.

Stores positions, velocities, accelerations, densities and
pressures as contiguous NumPy arrays sized to the store capacity.
Only the first `count` rows are live; rows beyond it are unused
storage. Particles can be appended up to capacity and the live
range can be reset, but the arrays themselves never reallocate.

Particle mass is not stored per particle: a single mass from
SimulationParameters applies to the whole store.
'''

from __future__ import annotations

import logging
import math

import numpy as np

logger = logging.getLogger(__name__)


class ParticleStore:
    '''
    Ordered, mutable, fixed-capacity sequence of particles.

    Invariant: 0 <= count <= capacity. Particles with index
    below count are live and take part in every summation.

    Parameters:
    -----------
    capacity : int
        Maximum number of particles
    count : int
        Initial number of live particles (default: capacity)
    '''

    def __init__(self, capacity: int, count: int | None = None) -> None:
        if capacity < 0:
            raise ValueError(f'Capacity must be non-negative, got {capacity}')

        self._capacity = int(capacity)
        self.positions = np.zeros((self._capacity, 2))
        self.velocities = np.zeros((self._capacity, 2))
        self.accelerations = np.zeros((self._capacity, 2))
        self.densities = np.zeros(self._capacity)
        self.pressures = np.zeros(self._capacity)

        self._count = 0
        self.reset(self._capacity if count is None else count)

    ######################################################################
    # -- Size -- #
    ######################################################################

    @property
    def capacity(self) -> int:
        '''Maximum number of particles.'''
        return self._capacity

    @property
    def count(self) -> int:
        '''Number of live particles.'''
        return self._count

    def __len__(self) -> int:
        return self._count

    @property
    def isFull(self) -> bool:
        '''True when no more particles can be appended.'''
        return self._count >= self._capacity

    ######################################################################
    # -- Live Views -- #
    ######################################################################

    @property
    def livePositions(self) -> np.ndarray:
        '''Positions of live particles [m], shape (count, 2) view.'''
        return self.positions[:self._count]

    @property
    def liveVelocities(self) -> np.ndarray:
        '''Velocities of live particles [m/s], shape (count, 2) view.'''
        return self.velocities[:self._count]

    @property
    def liveAccelerations(self) -> np.ndarray:
        '''Last computed accelerations [m/s^2], shape (count, 2) view.'''
        return self.accelerations[:self._count]

    @property
    def liveDensities(self) -> np.ndarray:
        '''Densities of live particles [kg/m^3], shape (count,) view.'''
        return self.densities[:self._count]

    @property
    def livePressures(self) -> np.ndarray:
        '''Pressures of live particles [Pa], shape (count,) view.'''
        return self.pressures[:self._count]

    ######################################################################
    # -- Structural Mutation -- #
    ######################################################################

    def reset(self, count: int) -> None:
        '''
        Set the number of live particles.

        Newly exposed rows are cleared to a zero state. Rows
        beyond the new count are left as unused storage.

        Parameters:
        -----------
        count : int
            New live count, 0 <= count <= capacity
        '''
        count = int(count)
        if not 0 <= count <= self._capacity:
            raise ValueError(
                f'Particle count {count} outside [0, {self._capacity}]'
            )

        if count > self._count:
            self.clearRange(self._count, count)
        self._count = count

    def addParticle(
        self,
        position,
        velocity=(0.0, 0.0),
    ) -> bool:
        '''
        Append a particle at the end of the live range.

        Parameters:
        -----------
        position : array-like
            Position [m], length 2
        velocity : array-like
            Velocity [m/s], length 2

        Returns:
        --------
        bool : False if the store is full (nothing changes)
        '''
        if self.isFull:
            logger.debug('Particle store full (%d), append rejected', self._capacity)
            return False

        i = self._count
        self.clearRange(i, i + 1)
        self.positions[i] = position
        self.velocities[i] = velocity
        self._count += 1
        return True

    def clearRange(self, start: int, stop: int) -> None:
        '''Zero every attribute for rows [start, stop).'''
        self.positions[start:stop] = 0.0
        self.velocities[start:stop] = 0.0
        self.accelerations[start:stop] = 0.0
        self.densities[start:stop] = 0.0
        self.pressures[start:stop] = 0.0

    ######################################################################
    # -- Diagnostics -- #
    ######################################################################

    def kineticEnergy(self, particleMass: float) -> float:
        '''
        Total kinetic energy of live particles.

        KE = (1/2) * m * sum_i |v_i|^2

        Parameters:
        -----------
        particleMass : float
            Shared particle mass [kg]

        Returns:
        --------
        float : Kinetic energy [J]
        '''
        vels = self.liveVelocities
        return float(0.5 * particleMass * np.sum(vels * vels))

    def potentialEnergy(self, particleMass: float, gravity: float) -> float:
        '''
        Gravitational potential energy of live particles.

        Gravity accelerates along +y, so PE = -sum_i m * g * y_i
        with reference level y = 0.

        Returns:
        --------
        float : Potential energy [J]
        '''
        heights = self.livePositions[:, 1]
        return float(-particleMass * gravity * np.sum(heights))

    def maxSpeed(self) -> float:
        '''Maximum velocity magnitude among live particles [m/s].'''
        if self._count == 0:
            return 0.0
        speeds = np.linalg.norm(self.liveVelocities, axis=1)
        return float(np.max(speeds))

    def maxDensityError(self, restDensity: float) -> float:
        '''
        Maximum relative density error max |rho_i - rho_0| / rho_0.

        Parameters:
        -----------
        restDensity : float
            Rest density rho_0 [kg/m^3]
        '''
        if self._count == 0:
            return 0.0
        errors = np.abs(self.liveDensities - restDensity) / restDensity
        return float(np.max(errors))


######################################################################
# -- Initializers -- #
######################################################################

def initializeRandom(
    store: ParticleStore,
    width: float,
    height: float,
    rng: np.random.Generator | int | None = None,
) -> None:
    '''
    Scatter the live particles uniformly over the domain.

    Velocity, density, pressure and acceleration are zeroed.

    Parameters:
    -----------
    store : ParticleStore
        Store whose live range is initialized
    width : float
        Domain width [m]
    height : float
        Domain height [m]
    rng : np.random.Generator | int | None
        Random generator, or a seed for a new one
    '''
    generator = np.random.default_rng(rng)
    n = store.count

    store.clearRange(0, n)
    store.positions[:n, 0] = generator.uniform(0.0, width, n)
    store.positions[:n, 1] = generator.uniform(0.0, height, n)


def initializeGrid(
    store: ParticleStore,
    width: float,
    height: float,
    spacing: float,
) -> None:
    '''
    Place the live particles on a regular grid centred in the domain.

    The grid has nx = floor(sqrt(count)) columns, filled row by row.
    A count that is not a perfect square leaves a partial last row
    and logs a warning.

    Parameters:
    -----------
    store : ParticleStore
        Store whose live range is initialized
    width : float
        Domain width [m]
    height : float
        Domain height [m]
    spacing : float
        Distance between neighbouring grid points [m]
    '''
    n = store.count
    store.clearRange(0, n)
    if n == 0:
        return

    nx = math.isqrt(n)
    if nx * nx != n:
        logger.warning(
            'Number of particles (%d) is not a perfect square, '
            'grid will have a partial last row', n,
        )

    xOffset = (width - (nx - 1) * spacing) / 2.0
    yOffset = (height - (nx - 1) * spacing) / 2.0

    # Row-major: index = row * nx + column
    index = np.arange(n)
    rows = index // nx
    columns = index % nx
    store.positions[:n, 0] = xOffset + columns * spacing
    store.positions[:n, 1] = yOffset + rows * spacing
