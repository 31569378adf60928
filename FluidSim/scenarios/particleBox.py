# -- Particle Box Scenario -- #

'''
Closed rectangular box filled with SPH particles.

The particles start either scattered uniformly at random over the
whole box (the interactive demo) or as a centred square grid block
that collapses under gravity. All four walls reflect.

The scenario creates a ParticleStore with spare capacity, so a host
can keep appending particles while the simulation runs.
'''

from __future__ import annotations

import json
from dataclasses import dataclass

from FluidSim import constants as const
from FluidSim.sph.kernels import KernelType
from FluidSim.sph.particles import ParticleStore, initializeGrid, initializeRandom
from FluidSim.sph.protocols import SimulationParameters


######################################################################
# -- Particle Box Configuration -- #
######################################################################

@dataclass
class ParticleBoxConfig:
    '''
    Configuration for a particle box scenario.

    Parameters:
    -----------
    particleCount : int
        Initial number of live particles
    capacity : int
        Store capacity (>= particleCount)
    layout : str
        Initial placement: 'random' or 'grid'
    spacing : float
        Grid spacing [m], used by the 'grid' layout
    seed : int | None
        Random seed for the 'random' layout
    dt : float
        Fixed host time step [s]
    endTime : float
        Simulation end time [s]
    outputInterval : float
        Time between output frames [s]
    particleRadius : float
        Display radius passed to the exporter [m]
    '''

    particleCount: int = const.particleCount
    capacity: int = const.particleCapacity
    layout: str = 'random'
    spacing: float = 0.5
    seed: int | None = None
    dt: float = const.frameTimeStep
    endTime: float = 5.0
    outputInterval: float = 0.05
    particleRadius: float = const.particleRadius

    @classmethod
    def interactiveDemo(cls) -> ParticleBoxConfig:
        '''
        Random particle cloud with the demo defaults.

        100 particles, room for 1000, gaussian kernel, gas EOS.
        '''
        return cls(
            particleCount=100,
            capacity=1000,
            layout='random',
            seed=0,
        )

    @classmethod
    def gridDrop(cls) -> ParticleBoxConfig:
        '''
        20 x 20 grid block dropped into the box.

        Pair with gridDropParameters() for the cubic kernel setup.
        '''
        return cls(
            particleCount=400,
            capacity=400,
            layout='grid',
            spacing=0.25,
            endTime=3.0,
        )

    @classmethod
    def fromDict(cls, data: dict) -> ParticleBoxConfig:
        '''
        Build a scenario config from parsed configuration data.

        Reads the 'world' and 'simulation' sections, plus the display
        radius from 'particle'.
        '''
        worldSection = data.get('world', {})
        simSection = data.get('simulation', {})
        particleSection = data.get('particle', {})

        particleCount = int(worldSection.get('particleCount', const.particleCount))
        return cls(
            particleCount=particleCount,
            capacity=int(worldSection.get('capacity', max(particleCount, const.particleCapacity))),
            layout=simSection.get('layout', 'random'),
            spacing=float(simSection.get('spacing', 0.5)),
            seed=worldSection.get('seed'),
            dt=float(simSection.get('dt', const.frameTimeStep)),
            endTime=float(simSection.get('endTime', 5.0)),
            outputInterval=float(simSection.get('outputInterval', 0.05)),
            particleRadius=float(particleSection.get('radius', const.particleRadius)),
        )

    @classmethod
    def fromJson(cls, configPath: str) -> ParticleBoxConfig:
        '''Load a scenario config from a JSON configuration file.'''
        with open(configPath, 'r') as f:
            data = json.load(f)

        return cls.fromDict(data)


def gridDropParameters() -> SimulationParameters:
    '''Parameters matching the gridDrop() preset.'''
    return SimulationParameters(
        width=8.0,
        height=6.0,
        particleMass=1.0,
        smoothingLength=0.6,
        gravity=const.gravity,
        damping=0.5,
        kernelType=KernelType.CUBIC,
    ).validate()


######################################################################
# -- Scenario Creation -- #
######################################################################

def createParticleBox(
    boxConfig: ParticleBoxConfig,
    params: SimulationParameters,
) -> ParticleStore:
    '''
    Create and initialize the particle store for a box scenario.

    Parameters:
    -----------
    boxConfig : ParticleBoxConfig
        Scenario configuration
    params : SimulationParameters
        Simulation parameters providing the domain size

    Returns:
    --------
    ParticleStore : Store with particleCount live particles

    Raises:
    -------
    ValueError : If the layout is unknown or capacity < particleCount
    '''
    if boxConfig.capacity < boxConfig.particleCount:
        raise ValueError(
            f'Capacity {boxConfig.capacity} smaller than particle count '
            f'{boxConfig.particleCount}'
        )

    store = ParticleStore(boxConfig.capacity, count=boxConfig.particleCount)

    if boxConfig.layout == 'random':
        initializeRandom(store, params.width, params.height, rng=boxConfig.seed)
    elif boxConfig.layout == 'grid':
        initializeGrid(store, params.width, params.height, boxConfig.spacing)
    else:
        raise ValueError(f'Unknown particle layout: {boxConfig.layout}')

    return store
