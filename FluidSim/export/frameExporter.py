# -- Particle Frame Exporter -- #

'''
Writes recorded SPH particle frames to JSON for an external renderer.

The core never draws. A host records the live range of the
particle store at chosen times and this module writes one compact
document that a viewer can replay:

    {
        "meta":    {"type": "fluidSim", "nFrames": ..., "nParticles": ...,
                    "particleRadius": ..., "kernelType": ..., "created": ...},
        "config":  SimulationParameters.toDict(),
        "frames":  [{"time", "step", "count", "positions", "speeds",
                     "densities", "pressures"}, ...],
        "history": {"times", "kinetic", "potential", "total",
                    "maxDensityError", "maxVelocity"}
    }

Since particles can be appended during a run, "count" may differ
between frames; "nParticles" reports the last frame.
'''

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import numpy as np

from FluidSim import constants as const
from FluidSim.sph.particles import ParticleStore
from FluidSim.sph.protocols import SimulationParameters, SimulationState

_HISTORY_FIELDS = ('times', 'kinetic', 'potential', 'total', 'maxDensityError', 'maxVelocity')


class FrameExporter:
    '''
    Records particle frames and diagnostic history, then writes them.

    Parameters:
    -----------
    decimals : int
        Rounding applied to every stored value
    '''

    def __init__(self, decimals: int = 6) -> None:
        self._decimals = decimals
        self._frames: list[dict] = []
        self._history: dict[str, list[float]] = {name: [] for name in _HISTORY_FIELDS}

    @property
    def nFrames(self) -> int:
        '''Number of recorded frames.'''
        return len(self._frames)

    @property
    def history(self) -> dict[str, list[float]]:
        '''Diagnostic series, one entry per recorded frame.'''
        return self._history

    def _rounded(self, values: np.ndarray) -> list:
        return np.round(values, self._decimals).tolist()

    def addFrame(self, state: SimulationState, particles: ParticleStore) -> None:
        '''
        Record the live particles and the diagnostics of one step.

        Parameters:
        -----------
        state : SimulationState
            Diagnostics for the step being recorded
        particles : ParticleStore
            Store whose live range is copied
        '''
        speeds = np.linalg.norm(particles.liveVelocities, axis=1)
        t = round(state.time, self._decimals)

        self._frames.append({
            'time': t,
            'step': state.step,
            'count': particles.count,
            'positions': self._rounded(particles.livePositions),
            'speeds': self._rounded(speeds),
            'densities': self._rounded(particles.liveDensities),
            'pressures': self._rounded(particles.livePressures),
        })

        samples = (
            t,
            state.kineticEnergy,
            state.potentialEnergy,
            state.totalEnergy,
            state.maxDensityError,
            state.maxVelocity,
        )
        for name, value in zip(_HISTORY_FIELDS, samples):
            self._history[name].append(round(value, self._decimals))

    def export(
        self,
        params: SimulationParameters,
        outputDir: str = 'FluidSim/output',
        scenarioName: str = 'particleBox',
        particleRadius: float = const.particleRadius,
    ) -> str:
        '''
        Write every recorded frame to fluidSim_<scenario>_<timestamp>.json.

        Parameters:
        -----------
        params : SimulationParameters
            Parameters stored under "config"
        outputDir : str
            Directory to write into, created if missing
        scenarioName : str
            Scenario part of the filename
        particleRadius : float
            Display radius for the renderer [m]

        Returns:
        --------
        str : Path of the written file
        '''
        now = datetime.now()
        directory = Path(outputDir)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f'fluidSim_{scenarioName}_{now:%Y%m%d_%H%M%S}.json'

        document = {
            'meta': {
                'type': 'fluidSim',
                'dimensions': 2,
                'nFrames': self.nFrames,
                'nParticles': self._frames[-1]['count'] if self._frames else 0,
                'particleRadius': particleRadius,
                'kernelType': params.kernelType.value,
                'created': now.isoformat(timespec='seconds'),
            },
            'config': params.toDict(),
            'frames': self._frames,
            'history': self._history,
        }

        with path.open('w') as f:
            json.dump(document, f, separators=(',', ':'))

        return str(path)
