# -- SPH Time Integration -- #

'''
Time integration for the SPH particle store.

Implements the Symplectic Euler (semi-implicit Euler) scheme,
split into its two halves so the boundary handler can inspect
the proposed positions before they are committed:

    kick:  v(t+dt) = v(t) + a(t) * dt
    drift: x(t+dt) = x(t) + v(t+dt) * dt

The drift uses the updated velocity, which is what makes the
scheme symplectic.

References:
-----------
Hairer et al. (2003) -- Geometric Numerical Integration
'''

from __future__ import annotations

from typing import Protocol

import numpy as np

from FluidSim.sph.particles import ParticleStore


######################################################################
# -- Time Integrator Protocol -- #
######################################################################

class TimeIntegrator(Protocol):
    '''Protocol for kick/drift time integration schemes.'''

    def kick(self, particles: ParticleStore, accelerations: np.ndarray, dt: float) -> None:
        '''Advance live velocities by one step.'''
        ...

    def drift(self, particles: ParticleStore, dt: float) -> np.ndarray:
        '''Return proposed positions without committing them.'''
        ...


######################################################################
# -- Symplectic Euler Integrator -- #
######################################################################

class SymplecticEuler:
    '''
    Symplectic (semi-implicit) Euler integrator.

    Velocities are updated in place by kick(). Positions are only
    proposed by drift(); committing them is left to the boundary
    handler, which clamps any that leave the domain.
    '''

    def kick(self, particles: ParticleStore, accelerations: np.ndarray, dt: float) -> None:
        '''
        Update live velocities from accelerations.

        Parameters:
        -----------
        particles : ParticleStore
            Particle store, velocities updated in place
        accelerations : np.ndarray
            Accelerations [m/s^2], shape (count, 2)
        dt : float
            Time step size [s]
        '''
        particles.liveVelocities[:] += accelerations * dt

    def drift(self, particles: ParticleStore, dt: float) -> np.ndarray:
        '''
        Propose new positions from the (updated) velocities.

        Parameters:
        -----------
        particles : ParticleStore
            Particle store, not modified
        dt : float
            Time step size [s]

        Returns:
        --------
        np.ndarray : Proposed positions [m], shape (count, 2)
        '''
        return particles.livePositions + particles.liveVelocities * dt
