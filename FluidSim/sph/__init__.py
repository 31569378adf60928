# -- SPH Engine Package -- #

'''
Core Smoothed Particle Hydrodynamics (SPH) engine.

Provides kernel functions, equations of state, the particle store,
pairwise density and force evaluation, time integration, boundary
handling, and the step orchestrator.
'''

from FluidSim.sph.errors import ConfigurationError
from FluidSim.sph.kernels import KernelType, createKernel, influence, influenceDerivative
from FluidSim.sph.pressureModels import ColeEquation, GasEquation, evaluatePressure
from FluidSim.sph.protocols import SimulationParameters, SimulationState
from FluidSim.sph.particles import ParticleStore, initializeGrid, initializeRandom
from FluidSim.sph.interactions import evaluateDensity, evaluateDensityAt, evaluateForce
from FluidSim.sph.solver import PairwiseSphSolver, step
from FluidSim.sph.fieldSampling import sampleDensityField, samplePressureField
