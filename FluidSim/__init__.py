# -- FluidSim Package -- #

'''
Two-dimensional Smoothed Particle Hydrodynamics (SPH) simulation.

Particle density from kernel summation, pressure from a selectable
equation of state, pressure-gradient forces, and wall-bounded
time integration, with headless scenarios and frame export for
external visualization.
'''

__version__ = '0.1.0'

from FluidSim.runner import FluidSimRunner
from FluidSim.scenarios.particleBox import ParticleBoxConfig
from FluidSim.export.frameExporter import FrameExporter
