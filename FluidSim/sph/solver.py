# -- SPH Step Orchestrator -- #

'''
One synchronous SPH step and a solver wrapper for host loops.

Each step runs three full passes over the live particles, in a
fixed order, and every pass finishes before the next begins:

    1. Density and pressure for every particle (prior positions)
    2. Pressure-gradient force -> acceleration -> velocity
       a_i = F_i / rho_i + (0, g)
    3. Proposed position, wall collisions, commit

Because each pass only reads the snapshot produced by the previous
one, the result does not depend on particle order.

The step has no failure mode for valid input; configuration is
checked once, when the solver is built or its parameters change.
'''

from __future__ import annotations

import logging

import numpy as np

from FluidSim.sph.boundaryHandling import BoundaryHandler
from FluidSim.sph.interactions import computeDensities, computeForces
from FluidSim.sph.particles import ParticleStore
from FluidSim.sph.protocols import SimulationParameters, SimulationState
from FluidSim.sph.timeIntegration import SymplecticEuler

logger = logging.getLogger(__name__)


######################################################################
# -- Single Step -- #
######################################################################

def computeAccelerations(
    store: ParticleStore, params: SimulationParameters
) -> np.ndarray:
    '''
    Pressure plus gravity acceleration for every live particle.

    a_i = F_i / rho_i + (0, g)

    Requires densities and pressures from the current step.

    Returns:
    --------
    np.ndarray : Accelerations [m/s^2], shape (count, 2)
    '''
    forces = computeForces(store, params)
    accelerations = forces / store.liveDensities[:, np.newaxis]
    accelerations[:, 1] += params.gravity
    return accelerations


def step(store: ParticleStore, params: SimulationParameters, dt: float) -> None:
    '''
    Advance the particle store by one time step, in place.

    Parameters:
    -----------
    store : ParticleStore
        Particle store, exclusively owned for the duration of the step
    params : SimulationParameters
        Validated simulation parameters
    dt : float
        Time step size [s]
    '''
    if store.count == 0:
        return

    integrator = SymplecticEuler()
    boundary = BoundaryHandler(params.width, params.height, params.damping)

    # 1. Density and pressure
    computeDensities(store, params)

    # 2. Acceleration and velocity
    accelerations = computeAccelerations(store, params)
    store.liveAccelerations[:] = accelerations
    integrator.kick(store, accelerations, dt)

    # 3. Position and wall collisions
    proposed = integrator.drift(store, dt)
    boundary.resolveCollisions(store, proposed)


######################################################################
# -- Solver -- #
######################################################################

class PairwiseSphSolver:
    '''
    Fixed-step SPH solver with exhaustive pairwise interactions.

    Owns the simulation parameters, tracks simulated time and step
    count, and reports diagnostics after every step. The time step
    is chosen by the host on each call.

    Parameters:
    -----------
    params : SimulationParameters
        Simulation parameters, validated on construction
    '''

    def __init__(self, params: SimulationParameters) -> None:
        self._params = params.validate()
        self._particles: ParticleStore | None = None
        self._time: float = 0.0
        self._step: int = 0
        self._dt: float = 0.0

    ######################################################################
    # -- Initialization -- #
    ######################################################################

    def initialize(self, particles: ParticleStore) -> None:
        '''
        Attach a particle store and compute its initial density.

        Parameters:
        -----------
        particles : ParticleStore
            Initialized particle store
        '''
        self._particles = particles
        self._time = 0.0
        self._step = 0
        self._dt = 0.0

        computeDensities(particles, self._params)
        logger.debug(
            'Solver initialized with %d/%d particles',
            particles.count, particles.capacity,
        )

    def updateParameters(self, params: SimulationParameters) -> None:
        '''
        Replace the parameters between steps.

        Parameters:
        -----------
        params : SimulationParameters
            New parameters, validated before use
        '''
        self._params = params.validate()

    ######################################################################
    # -- Main Time Step -- #
    ######################################################################

    def step(self, dt: float) -> SimulationState:
        '''
        Advance one time step.

        Parameters:
        -----------
        dt : float
            Time step size [s], non-negative

        Returns:
        --------
        SimulationState : Diagnostics after the step
        '''
        if self._particles is None:
            raise RuntimeError('Solver has no particles; call initialize() first')
        if dt < 0.0:
            raise ValueError(f'Time step must be non-negative, got {dt}')

        step(self._particles, self._params, dt)

        self._dt = dt
        self._time += dt
        self._step += 1

        return self.currentState

    ######################################################################
    # -- Properties -- #
    ######################################################################

    @property
    def currentState(self) -> SimulationState:
        '''Current simulation state snapshot.'''
        if self._particles is None:
            raise RuntimeError('Solver has no particles; call initialize() first')

        p = self._particles
        params = self._params

        return SimulationState(
            time=self._time,
            step=self._step,
            dt=self._dt,
            kineticEnergy=p.kineticEnergy(params.particleMass),
            potentialEnergy=p.potentialEnergy(params.particleMass, params.gravity),
            maxVelocity=p.maxSpeed(),
            maxDensityError=p.maxDensityError(params.restDensity),
        )

    @property
    def particles(self) -> ParticleStore:
        '''Access the particle store.'''
        return self._particles

    @property
    def parameters(self) -> SimulationParameters:
        '''Current simulation parameters.'''
        return self._params

    @property
    def time(self) -> float:
        '''Accumulated simulation time [s].'''
        return self._time

    @property
    def stepCount(self) -> int:
        '''Number of completed steps.'''
        return self._step
