# -- SPH Simulation Protocols -- #

'''
Core data structures and solver protocol for the SPH simulation.

Defines the simulation parameter bundle (SimulationParameters),
the per-step diagnostics snapshot (SimulationState), and the
protocol a step orchestrator satisfies.

Parameters are an explicit, immutable value passed to every call.
Nothing in the core reads shared module state, so independent
simulations never interfere with each other.
'''

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass, field
from typing import Protocol, TYPE_CHECKING

from FluidSim import constants as const
from FluidSim.sph.errors import ConfigurationError
from FluidSim.sph.kernels import KernelType
from FluidSim.sph.pressureModels import (
    ColeEquation,
    GasEquation,
    PressureEquation,
    equationFromDict,
)

if TYPE_CHECKING:
    from FluidSim.sph.particles import ParticleStore


######################################################################
# -- Simulation Parameters -- #
######################################################################

@dataclass(frozen=True)
class SimulationParameters:
    '''
    Read-only configuration for one simulation step.

    Values are checked on construction (and by dataclasses.replace),
    so ConfigurationError is raised before any step can use them.

    Parameters:
    -----------
    width : float
        Domain width, x in [0, width] [m]
    height : float
        Domain height, y in [0, height] [m]
    particleMass : float
        Mass shared by every particle [kg]
    smoothingLength : float
        Smoothing length h [m]
    gravity : float
        Gravitational acceleration added along +y [m/s^2]
    damping : float
        Velocity fraction kept on wall collision, in [0, 1]
    kernelType : KernelType
        Smoothing kernel selector
    equationOfState : GasEquation | ColeEquation
        Equation-of-state record
    '''

    width: float = const.worldWidth
    height: float = const.worldHeight
    particleMass: float = const.particleMass
    smoothingLength: float = const.smoothingLength
    gravity: float = const.gravity
    damping: float = const.damping
    kernelType: KernelType = KernelType.GAUSSIAN
    equationOfState: PressureEquation = field(default_factory=GasEquation)

    def __post_init__(self) -> None:
        # An invalid bundle can never reach a step
        self.validate()

    @property
    def restDensity(self) -> float:
        '''Rest density of the active equation of state [kg/m^3].'''
        return self.equationOfState.restDensity

    def validate(self) -> SimulationParameters:
        '''
        Check the bundle before it enters a step loop.

        Returns:
        --------
        SimulationParameters : self, for chaining

        Raises:
        -------
        ConfigurationError : On any invalid value
        '''
        if not isinstance(self.kernelType, KernelType):
            raise ConfigurationError(f'Unknown kernel type: {self.kernelType!r}')
        if not isinstance(self.equationOfState, (GasEquation, ColeEquation)):
            raise ConfigurationError(
                f'Unknown pressure equation: {self.equationOfState!r}'
            )
        self.equationOfState.validate()

        if not self.smoothingLength > 0.0:
            raise ConfigurationError(
                f'Smoothing length must be positive, got {self.smoothingLength}'
            )
        if not self.particleMass > 0.0:
            raise ConfigurationError(
                f'Particle mass must be positive, got {self.particleMass}'
            )
        if not (self.width > 0.0 and self.height > 0.0):
            raise ConfigurationError(
                f'Domain must have positive extent, got {self.width} x {self.height}'
            )
        if not 0.0 <= self.damping <= 1.0:
            raise ConfigurationError(
                f'Damping must lie in [0, 1], got {self.damping}'
            )
        return self

    def adjusted(
        self,
        smoothingLength: float | None = None,
        gravity: float | None = None,
        restDensity: float | None = None,
    ) -> SimulationParameters:
        '''
        Copy with host-side tweaks applied between steps.

        Parameters:
        -----------
        smoothingLength : float | None
            New smoothing length [m]
        gravity : float | None
            New gravity [m/s^2]
        restDensity : float | None
            New rest density for the active equation [kg/m^3]

        Returns:
        --------
        SimulationParameters : Validated copy
        '''
        changes: dict = {}
        if smoothingLength is not None:
            changes['smoothingLength'] = float(smoothingLength)
        if gravity is not None:
            changes['gravity'] = float(gravity)
        if restDensity is not None:
            changes['equationOfState'] = dataclasses.replace(
                self.equationOfState, restDensity=float(restDensity),
            )
        return dataclasses.replace(self, **changes).validate()

    @classmethod
    def fromDict(cls, data: dict) -> SimulationParameters:
        '''
        Build parameters from parsed configuration data.

        Reads the 'world', 'particle', 'pressure' and 'kernel'
        sections. Missing values fall back to the defaults in
        FluidSim.constants.

        Parameters:
        -----------
        data : dict
            Parsed configuration

        Returns:
        --------
        SimulationParameters : Validated parameters
        '''
        worldSection = data.get('world', {})
        particleSection = data.get('particle', {})
        pressureSection = data.get('pressure', {})
        kernelSection = data.get('kernel', {})

        pressureName = pressureSection.get('type', const.pressureName)
        equation = equationFromDict(
            pressureName, pressureSection.get(str(pressureName).lower(), {}),
        )

        return cls(
            width=float(worldSection.get('width', const.worldWidth)),
            height=float(worldSection.get('height', const.worldHeight)),
            particleMass=float(particleSection.get('mass', const.particleMass)),
            smoothingLength=float(kernelSection.get('h', const.smoothingLength)),
            gravity=float(worldSection.get('gravity', const.gravity)),
            damping=float(particleSection.get('damping', const.damping)),
            kernelType=KernelType.fromName(kernelSection.get('type', const.kernelName)),
            equationOfState=equation,
        ).validate()

    @classmethod
    def fromJson(cls, configPath: str) -> SimulationParameters:
        '''
        Load parameters from a JSON configuration file.

        Parameters:
        -----------
        configPath : str
            Path to the JSON configuration file

        Returns:
        --------
        SimulationParameters : Validated parameters
        '''
        with open(configPath, 'r') as f:
            data = json.load(f)

        return cls.fromDict(data)

    def toDict(self) -> dict:
        '''Configuration-shaped dictionary, the inverse of fromDict.'''
        eos = self.equationOfState
        eosFields = {
            f.name: getattr(eos, f.name) for f in dataclasses.fields(eos)
        }
        return {
            'world': {
                'width': self.width,
                'height': self.height,
                'gravity': self.gravity,
            },
            'particle': {
                'mass': self.particleMass,
                'damping': self.damping,
            },
            'pressure': {
                'type': eos.name,
                eos.name: eosFields,
            },
            'kernel': {
                'type': self.kernelType.value,
                'h': self.smoothingLength,
            },
        }


######################################################################
# -- Simulation State -- #
######################################################################

@dataclass
class SimulationState:
    '''
    Snapshot of the simulation diagnostics after a step.

    Parameters:
    -----------
    time : float
        Accumulated simulation time [s]
    step : int
        Number of completed steps
    dt : float
        Size of the last step [s]
    kineticEnergy : float
        Total kinetic energy of live particles [J]
    potentialEnergy : float
        Gravitational potential energy, -sum(m * g * y) [J]
    maxVelocity : float
        Maximum particle speed [m/s]
    maxDensityError : float
        Maximum relative density error |rho - rho_0| / rho_0
    '''

    time: float
    step: int
    dt: float
    kineticEnergy: float
    potentialEnergy: float
    maxVelocity: float
    maxDensityError: float

    @property
    def totalEnergy(self) -> float:
        '''Total mechanical energy (KE + PE) [J].'''
        return self.kineticEnergy + self.potentialEnergy


######################################################################
# -- Solver Protocol -- #
######################################################################

class SphSolver(Protocol):
    '''Protocol for SPH step orchestrators.'''

    def initialize(self, particles: ParticleStore) -> None:
        '''Attach a particle store and compute initial density.'''
        ...

    def step(self, dt: float) -> SimulationState:
        '''Advance one time step and return the new state.'''
        ...

    @property
    def currentState(self) -> SimulationState:
        '''Current simulation state snapshot.'''
        ...

    @property
    def particles(self) -> ParticleStore:
        '''Access the particle store.'''
        ...
