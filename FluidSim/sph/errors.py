# -- SPH Core Exceptions -- #

'''
Exceptions raised by the SPH core.
'''


class ConfigurationError(ValueError):
    '''
    Invalid simulation configuration.

    Raised at the configuration boundary (parameter validation,
    kernel and equation-of-state selection) before any simulation
    step runs. Never raised from inside the per-particle math.
    '''
