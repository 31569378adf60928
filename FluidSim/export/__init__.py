# -- Export Package -- #

'''
Frame export for external visualization of SPH runs.
'''

from FluidSim.export.frameExporter import FrameExporter
