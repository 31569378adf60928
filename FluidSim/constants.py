# -- Physical and Numerical Defaults for the SPH Core -- #

'''
Default parameter values for the 2D SPH particle simulation.
All values in SI units unless otherwise noted.

The defaults reproduce the interactive particle demo: a small
box of light particles driven by a linear (gas) equation of state
and a Gaussian kernel. The y-axis points in the direction positive
gravity pulls (screen-style coordinates).

References:
-----------
Monaghan (1992) -- Smoothed Particle Hydrodynamics
Cole (1948) -- Underwater Explosions
'''

#--------------------------------------------------------------------#
# -- World -- #
#--------------------------------------------------------------------#

# Domain extent [m]
worldWidth: float = 16.0
worldHeight: float = 9.0

# Gravitational acceleration along +y [m/s^2]
gravity: float = 9.8

# Initial live particle count and store capacity
particleCount: int = 100
particleCapacity: int = 1000

#--------------------------------------------------------------------#
# -- Particle -- #
#--------------------------------------------------------------------#

# Mass shared by every particle [kg]
particleMass: float = 0.2

# Display radius, only carried through to exported metadata [m]
particleRadius: float = 0.1

# Fraction of normal velocity kept after a wall collision
damping: float = 0.9

#--------------------------------------------------------------------#
# -- Kernel -- #
#--------------------------------------------------------------------#

# Smoothing length h [m]
smoothingLength: float = 2.0

# Kernel name: 'gaussian', 'cubic' or 'linear'
kernelName: str = 'gaussian'

# Lower bound applied to particle density [kg/m^3]
densityFloor: float = 1e-6

#--------------------------------------------------------------------#
# -- Equation of State -- #
#--------------------------------------------------------------------#

# Equation name: 'gas' or 'cole'
pressureName: str = 'gas'

# Gas (linear) model
gasRestDensity: float = 0.8
pressureMultiplier: float = 100.0

# Cole (stiffened) model
coleRestDensity: float = 1.0
speedOfSound: float = 10.0

# gamma = 7 is the usual choice for water
adiabaticIndex: float = 7.0
backgroundPressure: float = 0.0

#--------------------------------------------------------------------#
# -- Time Stepping -- #
#--------------------------------------------------------------------#

# Fixed host time step, one 60 Hz frame [s]
frameTimeStep: float = 1.0 / 60.0

# Rows per block in the vectorized pair sums
pairBlockSize: int = 256
