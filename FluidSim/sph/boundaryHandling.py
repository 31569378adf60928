# -- SPH Boundary Conditions -- #

'''
Collision handling against the rectangular simulation domain.

Particles live in [0, width] x [0, height]. A proposed position
outside the domain is clamped onto the wall it crossed and the
velocity component normal to that wall is reflected and damped:

    v_n <- -damping * v_n

The two axes are handled independently, so a particle leaving
through a corner is reflected on both.
'''

from __future__ import annotations

import numpy as np

from FluidSim.sph.particles import ParticleStore


class BoundaryHandler:
    '''
    Reflecting walls for a rectangular domain anchored at the origin.

    Parameters:
    -----------
    width : float
        Domain width [m]
    height : float
        Domain height [m]
    damping : float
        Fraction of normal velocity kept after a collision, in [0, 1]
    '''

    def __init__(self, width: float, height: float, damping: float) -> None:
        self._bounds = np.array([width, height], dtype=float)
        self._damping = damping

    @property
    def width(self) -> float:
        '''Domain width [m].'''
        return float(self._bounds[0])

    @property
    def height(self) -> float:
        '''Domain height [m].'''
        return float(self._bounds[1])

    @property
    def damping(self) -> float:
        '''Collision damping coefficient.'''
        return self._damping

    def resolveCollisions(
        self, particles: ParticleStore, proposedPositions: np.ndarray
    ) -> None:
        '''
        Clamp proposed positions to the domain and commit them.

        Parameters:
        -----------
        particles : ParticleStore
            Particle store; live positions and velocities updated in place
        proposedPositions : np.ndarray
            Positions after the drift [m], shape (count, 2)
        '''
        positions = np.array(proposedPositions, dtype=float)
        velocities = particles.liveVelocities

        for d in range(2):
            belowMin = positions[:, d] < 0.0
            aboveMax = positions[:, d] > self._bounds[d]
            hit = belowMin | aboveMax

            positions[belowMin, d] = 0.0
            positions[aboveMax, d] = self._bounds[d]
            velocities[hit, d] *= -self._damping

        particles.livePositions[:] = positions
