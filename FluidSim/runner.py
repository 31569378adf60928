# -- Fluid Simulation Runner -- #

'''
Command-line entry point for headless SPH particle-box runs.

Builds the particle box from a preset or a JSON file, advances the
pairwise solver with a fixed host time step, prints a progress
table, and optionally writes the recorded frames for an external
renderer.

Usage:
    fluidsim                                   # Interactive-demo particle cloud
    fluidsim --preset gridDrop                 # Collapsing grid block
    fluidsim --config FluidSim/configs/demo.json
    fluidsim --steps 200 --no-export           # Fixed number of steps, no export
'''

from __future__ import annotations

import argparse
import logging
import time as timeModule

import numpy as np

from FluidSim import constants as const
from FluidSim.sph.particles import ParticleStore
from FluidSim.sph.protocols import SimulationParameters, SimulationState
from FluidSim.sph.solver import PairwiseSphSolver
from FluidSim.scenarios.particleBox import ParticleBoxConfig, createParticleBox, gridDropParameters
from FluidSim.export.frameExporter import FrameExporter

logger = logging.getLogger(__name__)

_RULE = 62


#--------------------------------------------------------------------#
# -- CLI Argument Parser -- #
#--------------------------------------------------------------------#

def buildParser() -> argparse.ArgumentParser:
    '''Command-line options for the runner.'''
    parser = argparse.ArgumentParser(
        prog='fluidsim',
        description='FluidSim -- 2D SPH particle box',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        '--config', type=str, default=None,
        help='JSON file with world, particle, pressure, kernel and simulation sections',
    )
    source.add_argument(
        '--preset', type=str, default=None, choices=['demo', 'gridDrop'],
        help='Built-in scenario when no config file is given (default: demo)',
    )

    parser.add_argument('--steps', type=int, default=None,
                        help='Stop after this many steps instead of at the end time')
    parser.add_argument('--dt', type=float, default=None,
                        help=f'Host time step [s] (default: {const.frameTimeStep:.4f})')
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for the random particle layout')
    parser.add_argument('--no-export', action='store_true',
                        help='Do not write recorded frames')
    parser.add_argument('--output-dir', type=str, default='FluidSim/output',
                        help='Directory for exported frames (default: FluidSim/output)')
    parser.add_argument('--log-level', type=str, default='WARNING',
                        help='Library log level (default: WARNING)')

    return parser


def loadConfig(configPath: str) -> tuple[SimulationParameters, ParticleBoxConfig]:
    '''
    Read solver parameters and the particle box from one JSON file.

    Parameters:
    -----------
    configPath : str
        JSON configuration path

    Returns:
    --------
    tuple[SimulationParameters, ParticleBoxConfig] : Validated parameters and box settings
    '''
    return SimulationParameters.fromJson(configPath), ParticleBoxConfig.fromJson(configPath)


def resolveScenario(args: argparse.Namespace) -> tuple[SimulationParameters, ParticleBoxConfig, str]:
    '''
    Parameters, box settings and export name selected by the CLI options.

    With neither --config nor --preset the demo preset is used.
    '''
    if args.config:
        params, boxConfig = loadConfig(args.config)
        scenarioName = 'config'
    elif args.preset == 'gridDrop':
        params, boxConfig = gridDropParameters(), ParticleBoxConfig.gridDrop()
        scenarioName = 'gridDrop'
    else:
        params, boxConfig = SimulationParameters().validate(), ParticleBoxConfig.interactiveDemo()
        scenarioName = 'demo'

    if args.dt is not None:
        boxConfig.dt = args.dt
    if args.seed is not None:
        boxConfig.seed = args.seed

    return params, boxConfig, scenarioName


#--------------------------------------------------------------------#
# -- Report Helpers -- #
#--------------------------------------------------------------------#

def _heading(title: str, char: str = '-') -> None:
    print(char * _RULE)
    print(f'  {title}')
    print(char * _RULE)


def _meanDensity(particles: ParticleStore) -> float:
    if particles.count == 0:
        return 0.0
    return float(np.mean(particles.liveDensities))


#--------------------------------------------------------------------#
# -- Runner Class -- #
#--------------------------------------------------------------------#

class FluidSimRunner:
    '''
    Drives one particle-box simulation from setup to export.

    The runner owns a FrameExporter; frames are recorded at the
    start, every output interval, and at the end of the run.
    '''

    def __init__(self) -> None:
        self._exporter = FrameExporter()

    @property
    def exporter(self) -> FrameExporter:
        '''Frames recorded so far.'''
        return self._exporter

    def runFromConfig(
        self,
        configPath: str,
        doExport: bool = True,
        exportDir: str = 'FluidSim/output',
        maxSteps: int | None = None,
    ) -> dict:
        '''Load a JSON configuration and run it. See run() for the result.'''
        params, boxConfig = loadConfig(configPath)
        return self.run(
            boxConfig, params,
            doExport=doExport, exportDir=exportDir, maxSteps=maxSteps,
            scenarioName='config',
        )

    def run(
        self,
        boxConfig: ParticleBoxConfig,
        params: SimulationParameters,
        doExport: bool = True,
        exportDir: str = 'FluidSim/output',
        maxSteps: int | None = None,
        scenarioName: str = 'particleBox',
    ) -> dict:
        '''
        Build the box, step it to the end time, and report.

        Parameters:
        -----------
        boxConfig : ParticleBoxConfig
            Particle count, layout and stepping settings
        params : SimulationParameters
            Solver parameters
        doExport : bool
            Write recorded frames when the run ends
        exportDir : str
            Directory for the exported file
        maxSteps : int | None
            Stop early after this many steps
        scenarioName : str
            Name used in the exported filename

        Returns:
        --------
        dict : finalState, wallClockSeconds, nFrames and exportPath (None without export)
        '''
        if not boxConfig.dt > 0.0:
            raise ValueError(f'Host time step must be positive, got {boxConfig.dt}')

        print()
        _heading('FLUIDSIM -- PAIRWISE SPH PARTICLE BOX', char='=')
        print()

        particles = createParticleBox(boxConfig, params)
        self._printSetup(boxConfig, params, particles)

        solver = PairwiseSphSolver(params)
        solver.initialize(particles)
        self._exporter.addFrame(solver.currentState, particles)

        wallClockStart = timeModule.perf_counter()
        finalState = self._advance(solver, boxConfig, maxSteps)
        wallClockSeconds = timeModule.perf_counter() - wallClockStart

        self._exporter.addFrame(finalState, particles)
        logger.info('Run finished after %d steps (%.2f s wall clock)',
                    finalState.step, wallClockSeconds)

        print()
        print(f'  Steps taken:       {finalState.step:8d}')
        print(f'  Simulated time:    {finalState.time:8.3f} s')
        print(f'  Wall-clock time:   {wallClockSeconds:8.2f} s')
        print(f'  Frames recorded:   {self._exporter.nFrames:8d}')
        print()

        exportPath = None
        if doExport:
            _heading('EXPORT')
            exportPath = self._exporter.export(
                params=params,
                outputDir=exportDir,
                scenarioName=scenarioName,
                particleRadius=boxConfig.particleRadius,
            )
            print(f'  Frames written to {exportPath}')
            print()

        self._printSummary(finalState, particles)

        return {
            'finalState': finalState,
            'wallClockSeconds': wallClockSeconds,
            'nFrames': self._exporter.nFrames,
            'exportPath': exportPath,
        }

    def _advance(
        self,
        solver: PairwiseSphSolver,
        boxConfig: ParticleBoxConfig,
        maxSteps: int | None,
    ) -> SimulationState:
        '''Step until the end time or the step limit, recording frames.'''
        particles = solver.particles

        _heading('STEPPING')
        print(f'  {"t":>8}  {"step":>7}  {"live":>6}  {"max|v|":>8}  {"mean rho":>9}  {"rho err":>8}')
        print(f'  {"(s)":>8}  {"":>7}  {"":>6}  {"(m/s)":>8}  {"(kg/m2)":>9}  {"(%)":>8}')
        print('  ' + '.' * 54)

        # About twenty table rows per run
        reportEvery = max(1, int(round(boxConfig.endTime / boxConfig.dt / 20.0)))
        nextFrameTime = boxConfig.outputInterval
        state = solver.currentState

        while solver.time < boxConfig.endTime:
            if maxSteps is not None and solver.stepCount >= maxSteps:
                break

            state = solver.step(boxConfig.dt)

            if state.time >= nextFrameTime:
                self._exporter.addFrame(state, particles)
                nextFrameTime += boxConfig.outputInterval

            if state.step == 1 or state.step % reportEvery == 0:
                print(
                    f'  {state.time:8.3f}  {state.step:7d}  {particles.count:6d}  '
                    f'{state.maxVelocity:8.3f}  {_meanDensity(particles):9.4f}  '
                    f'{state.maxDensityError * 100:8.2f}'
                )

        return state

    @staticmethod
    def _printSetup(
        boxConfig: ParticleBoxConfig,
        params: SimulationParameters,
        particles: ParticleStore,
    ) -> None:
        _heading('SETUP')
        print(f'  Box:               {params.width:.2f} m x {params.height:.2f} m')
        print(f'  Particles:         {particles.count} live / {particles.capacity} capacity ({boxConfig.layout})')
        print(f'  Mass, h:           {params.particleMass:.4f} kg, {params.smoothingLength:.4f} m')
        print(f'  Kernel:            {params.kernelType.value}')
        print(f'  Pressure:          {params.equationOfState.name}, rest density {params.restDensity:.4f}')
        print(f'  Gravity, damping:  {params.gravity:.3f} m/s^2, {params.damping:.3f}')
        print(f'  dt, end time:      {boxConfig.dt:.5f} s, {boxConfig.endTime:.2f} s')
        print()

    @staticmethod
    def _printSummary(finalState: SimulationState, particles: ParticleStore) -> None:
        _heading('SUMMARY', char='=')
        print(f'  Kinetic energy:    {finalState.kineticEnergy:12.5f} J')
        print(f'  Potential energy:  {finalState.potentialEnergy:12.5f} J')
        print(f'  Mechanical energy: {finalState.totalEnergy:12.5f} J')
        print(f'  Mean density:      {_meanDensity(particles):12.5f} kg/m^2')
        print(f'  Max density error: {finalState.maxDensityError * 100:12.3f} %')
        print(f'  Max speed:         {finalState.maxVelocity:12.5f} m/s')
        print('=' * _RULE)
        print()


#--------------------------------------------------------------------#
# -- CLI Entry Point -- #
#--------------------------------------------------------------------#

def main(argv: list[str] | None = None) -> None:
    '''Parse options, configure logging and run one simulation.'''
    args = buildParser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format='%(levelname)s: %(name)s: %(message)s',
    )

    params, boxConfig, scenarioName = resolveScenario(args)

    FluidSimRunner().run(
        boxConfig,
        params,
        doExport=not args.no_export,
        exportDir=args.output_dir,
        maxSteps=args.steps,
        scenarioName=scenarioName,
    )


if __name__ == '__main__':
    main()
