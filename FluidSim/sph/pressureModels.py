# -- Equations of State -- #

'''
Pressure models mapping particle density to pressure.

Two equations of state are provided, each as its own parameter
record carrying exactly the values it needs:

- GasEquation:  p = (rho - rho_0) * k
- ColeEquation: p = B * ((rho / rho_0)^gamma - 1) + p_background,
                B = rho_0 * c^2 / gamma

The gas model is allowed to go negative below rest density, pulling
sparse regions back together instead of only pushing dense ones
apart.

References:
-----------
Cole (1948) -- Underwater Explosions
Monaghan (1994) -- Simulating free surface flows with SPH
'''

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import numpy as np

from FluidSim import constants as const
from FluidSim.sph.errors import ConfigurationError


######################################################################
# -- Gas (Linear) Equation -- #
######################################################################

@dataclass(frozen=True)
class GasEquation:
    '''
    Linear gas approximation of the equation of state.

    Parameters:
    -----------
    restDensity : float
        Density at which pressure is zero [kg/m^3]
    pressureMultiplier : float
        Stiffness k relating density error to pressure [Pa*m^3/kg]
    '''

    restDensity: float = const.gasRestDensity
    pressureMultiplier: float = const.pressureMultiplier

    name = 'gas'

    def pressure(self, density):
        '''
        Pressure for a density value or array [Pa].

        Parameters:
        -----------
        density : float | np.ndarray
            Density [kg/m^3]

        Returns:
        --------
        float | np.ndarray : Pressure [Pa], negative below rest density
        '''
        densityError = density - self.restDensity
        return densityError * self.pressureMultiplier

    def validate(self) -> None:
        '''Raise ConfigurationError for a non-positive rest density.'''
        if not self.restDensity > 0.0:
            raise ConfigurationError(
                f'Rest density must be positive, got {self.restDensity}'
            )


######################################################################
# -- Cole (Stiffened) Equation -- #
######################################################################

@dataclass(frozen=True)
class ColeEquation:
    '''
    Cole (Tait-type) stiffened equation of state.

    Parameters:
    -----------
    restDensity : float
        Reference density rho_0 [kg/m^3]
    speedOfSound : float
        Artificial speed of sound c [m/s]
    adiabaticIndex : float
        Exponent gamma (7 for water)
    backgroundPressure : float
        Pressure offset returned at rest density [Pa]
    '''

    restDensity: float = const.coleRestDensity
    speedOfSound: float = const.speedOfSound
    adiabaticIndex: float = const.adiabaticIndex
    backgroundPressure: float = const.backgroundPressure

    name = 'cole'

    @property
    def stiffness(self) -> float:
        '''Bulk constant B = rho_0 * c^2 / gamma [Pa].'''
        return self.restDensity * self.speedOfSound ** 2 / self.adiabaticIndex

    def pressure(self, density):
        '''
        Pressure for a density value or array [Pa].

        Parameters:
        -----------
        density : float | np.ndarray
            Density [kg/m^3], non-negative

        Returns:
        --------
        float | np.ndarray : Pressure [Pa]
        '''
        x = np.power(density / self.restDensity, self.adiabaticIndex) - 1.0
        result = self.stiffness * x + self.backgroundPressure
        if np.ndim(result) == 0:
            return float(result)
        return result

    def validate(self) -> None:
        '''Raise ConfigurationError for non-physical parameters.'''
        if not self.restDensity > 0.0:
            raise ConfigurationError(
                f'Rest density must be positive, got {self.restDensity}'
            )
        if not self.adiabaticIndex > 0.0:
            raise ConfigurationError(
                f'Adiabatic index must be positive, got {self.adiabaticIndex}'
            )


PressureEquation = Union[GasEquation, ColeEquation]


######################################################################
# -- Dispatch -- #
######################################################################

def evaluatePressure(density, equation: PressureEquation):
    '''
    Convert density to pressure with the selected equation of state.

    Parameters:
    -----------
    density : float | np.ndarray
        Density [kg/m^3]
    equation : GasEquation | ColeEquation
        Equation-of-state record

    Returns:
    --------
    float | np.ndarray : Pressure [Pa]

    Raises:
    -------
    ConfigurationError : If the record is not a known equation
    '''
    if isinstance(equation, (GasEquation, ColeEquation)):
        return equation.pressure(density)
    raise ConfigurationError(f'Unknown pressure equation: {equation!r}')


def equationFromDict(name: str, section: dict) -> PressureEquation:
    '''
    Build an equation-of-state record from a configuration section.

    Missing values fall back to the module defaults.

    Parameters:
    -----------
    name : str
        'gas' or 'cole'
    section : dict
        Values for the selected equation (restDensity, ...)

    Returns:
    --------
    GasEquation | ColeEquation : Validated record

    Raises:
    -------
    ConfigurationError : If the name is unknown or values are invalid
    '''
    key = str(name).strip().lower()

    if key == 'gas':
        equation = GasEquation(
            restDensity=float(section.get('restDensity', const.gasRestDensity)),
            pressureMultiplier=float(section.get('pressureMultiplier', const.pressureMultiplier)),
        )
    elif key == 'cole':
        equation = ColeEquation(
            restDensity=float(section.get('restDensity', const.coleRestDensity)),
            speedOfSound=float(section.get('speedOfSound', const.speedOfSound)),
            adiabaticIndex=float(section.get('adiabaticIndex', const.adiabaticIndex)),
            backgroundPressure=float(section.get('backgroundPressure', const.backgroundPressure)),
        )
    else:
        raise ConfigurationError(f'Unknown pressure type: {name!r}')

    equation.validate()
    return equation
