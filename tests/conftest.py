# -- Pytest Configuration for FluidSim Tests -- #

'''
Shared fixtures for the SPH core tests.
'''

import sys
from pathlib import Path

import numpy as np
import pytest


def pytest_configure(config):
    '''Add the project root to sys.path so FluidSim imports without install.'''
    projectRoot = Path(__file__).parent.parent
    if str(projectRoot) not in sys.path:
        sys.path.insert(0, str(projectRoot))


@pytest.fixture
def gasParams():
    '''Demo parameters: gaussian kernel, linear gas equation of state.'''
    from FluidSim.sph.protocols import SimulationParameters

    return SimulationParameters().validate()


@pytest.fixture
def randomStore(gasParams):
    '''Store with 40 live particles scattered over the demo domain.'''
    from FluidSim.sph.particles import ParticleStore, initializeRandom

    store = ParticleStore(capacity=64, count=40)
    initializeRandom(store, gasParams.width, gasParams.height, rng=1234)
    return store


@pytest.fixture
def rng():
    return np.random.default_rng(42)
