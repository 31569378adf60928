# -- Simulation Scenarios Package -- #

'''
Pre-configured simulation scenarios for the SPH core.

Each scenario provides initial conditions (particle layout and
store capacity) for a specific demonstration problem.
'''

from FluidSim.scenarios.particleBox import (
    ParticleBoxConfig,
    createParticleBox,
    gridDropParameters,
)
