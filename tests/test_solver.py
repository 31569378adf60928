# -- Step Orchestrator Tests -- #

'''
Tests for the synchronous SPH step, wall collisions and the solver.
'''

import numpy as np
import pytest

from FluidSim.sph.boundaryHandling import BoundaryHandler
from FluidSim.sph.errors import ConfigurationError
from FluidSim.sph.particles import ParticleStore
from FluidSim.sph.protocols import SimulationParameters, SimulationState
from FluidSim.sph.solver import PairwiseSphSolver, computeAccelerations, step
from FluidSim.sph.interactions import computeDensities
from FluidSim.sph.timeIntegration import SymplecticEuler


def singleParticle(position, velocity=(0.0, 0.0)):
    store = ParticleStore(1)
    store.positions[0] = position
    store.velocities[0] = velocity
    return store


class TestStep:

    def testFreeParticleFallsWithGravity(self, gasParams):
        store = singleParticle((8.0, 4.0))

        step(store, gasParams, 0.1)

        np.testing.assert_allclose(store.liveAccelerations[0], [0.0, gasParams.gravity])
        np.testing.assert_allclose(store.velocities[0], [0.0, 0.98])
        np.testing.assert_allclose(store.positions[0], [8.0, 4.0 + 0.098])

    def testRightWallReflection(self, gasParams):
        store = singleParticle((15.99, 4.0), velocity=(2.0, 0.0))

        step(store, gasParams, 0.1)

        assert store.positions[0, 0] == gasParams.width
        assert store.velocities[0, 0] == pytest.approx(-2.0 * gasParams.damping)
        # y is unaffected by the x collision
        assert store.velocities[0, 1] == pytest.approx(0.98)

    def testLeftWallReflection(self, gasParams):
        store = singleParticle((0.01, 4.0), velocity=(-3.0, 0.0))

        step(store, gasParams, 0.1)

        assert store.positions[0, 0] == 0.0
        assert store.velocities[0, 0] == pytest.approx(3.0 * gasParams.damping)

    def testBottomRightCorner(self, gasParams):
        store = singleParticle((gasParams.width, gasParams.height))

        step(store, gasParams, 0.1)

        np.testing.assert_allclose(store.liveAccelerations[0], [0.0, gasParams.gravity])
        assert store.positions[0, 0] == gasParams.width
        assert store.positions[0, 1] == gasParams.height
        assert store.velocities[0, 0] == 0.0
        assert store.velocities[0, 1] == pytest.approx(-gasParams.damping * gasParams.gravity * 0.1)

    def testZeroDampingStopsAtWall(self):
        params = SimulationParameters(damping=0.0)
        store = singleParticle((params.width - 0.01, 1.0), velocity=(5.0, 0.0))

        step(store, params, 0.1)

        assert store.positions[0, 0] == params.width
        assert store.velocities[0, 0] == 0.0

    def testPositionsStayInsideDomain(self, randomStore, gasParams):
        for _ in range(20):
            step(randomStore, gasParams, 0.05)

        x, y = randomStore.livePositions[:, 0], randomStore.livePositions[:, 1]
        assert np.all((x >= 0.0) & (x <= gasParams.width))
        assert np.all((y >= 0.0) & (y <= gasParams.height))

    def testZeroTimeStepIsIdempotent(self, randomStore, gasParams):
        step(randomStore, gasParams, 0.0)
        positions = randomStore.positions.copy()
        velocities = randomStore.velocities.copy()

        step(randomStore, gasParams, 0.0)

        np.testing.assert_array_equal(randomStore.positions, positions)
        np.testing.assert_array_equal(randomStore.velocities, velocities)

    def testResultIndependentOfParticleOrder(self, randomStore, gasParams):
        n = randomStore.count
        permutation = np.random.default_rng(3).permutation(n)

        shuffled = ParticleStore(randomStore.capacity, count=n)
        shuffled.positions[:n] = randomStore.livePositions[permutation]
        shuffled.velocities[:n] = randomStore.liveVelocities[permutation]

        for _ in range(3):
            step(randomStore, gasParams, 0.02)
            step(shuffled, gasParams, 0.02)

        np.testing.assert_allclose(
            shuffled.livePositions, randomStore.livePositions[permutation], atol=1e-10,
        )
        np.testing.assert_allclose(
            shuffled.liveVelocities, randomStore.liveVelocities[permutation], atol=1e-10,
        )

    def testDeadRowsUntouched(self, gasParams):
        store = ParticleStore(3, count=3)
        store.positions[:] = [[1.0, 1.0], [1.5, 1.0], [9.0, 9.0]]
        store.reset(2)

        step(store, gasParams, 0.1)

        np.testing.assert_array_equal(store.positions[2], [9.0, 9.0])
        assert store.densities[2] == 0.0

    def testInvalidParametersNeverReachStep(self):
        store = singleParticle((1.0, 1.0))

        with pytest.raises(ConfigurationError):
            step(store, SimulationParameters(smoothingLength=0.0), 0.1)

        np.testing.assert_array_equal(store.positions[0], [1.0, 1.0])

    def testEmptyStoreIsNoOp(self, gasParams):
        store = ParticleStore(4, count=0)

        step(store, gasParams, 0.1)

        np.testing.assert_array_equal(store.positions, 0.0)

    def testAccelerationIncludesPressure(self, gasParams):
        store = ParticleStore(2)
        store.positions[:] = [[4.0, 4.0], [4.5, 4.0]]
        computeDensities(store, gasParams)

        accelerations = computeAccelerations(store, gasParams)

        assert accelerations.shape == (2, 2)
        np.testing.assert_allclose(accelerations[:, 1], gasParams.gravity)
        np.testing.assert_allclose(accelerations[0, 0], -accelerations[1, 0])


class TestIntegratorAndBoundary:

    def testKickThenDrift(self):
        store = singleParticle((1.0, 1.0), velocity=(1.0, 0.0))
        integrator = SymplecticEuler()

        integrator.kick(store, np.array([[2.0, 0.0]]), 0.5)
        proposed = integrator.drift(store, 0.5)

        np.testing.assert_allclose(store.velocities[0], [2.0, 0.0])
        np.testing.assert_allclose(proposed[0], [2.0, 1.0])
        # drift proposes without committing
        np.testing.assert_allclose(store.positions[0], [1.0, 1.0])

    def testResolveCollisionsCommits(self):
        store = ParticleStore(2)
        store.velocities[:] = [[1.0, -1.0], [0.5, 0.5]]
        handler = BoundaryHandler(2.0, 2.0, 0.5)

        handler.resolveCollisions(store, np.array([[2.5, -0.5], [1.0, 1.0]]))

        np.testing.assert_allclose(store.livePositions, [[2.0, 0.0], [1.0, 1.0]])
        np.testing.assert_allclose(store.liveVelocities, [[-0.5, 0.5], [0.5, 0.5]])
        assert handler.width == 2.0
        assert handler.damping == 0.5


class TestPairwiseSphSolver:

    def testStepBeforeInitializeRaises(self, gasParams):
        solver = PairwiseSphSolver(gasParams)

        with pytest.raises(RuntimeError):
            solver.step(0.01)

    def testStateBeforeInitializeRaises(self, gasParams):
        solver = PairwiseSphSolver(gasParams)

        with pytest.raises(RuntimeError):
            solver.currentState

    def testNegativeTimeStepRaises(self, gasParams, randomStore):
        solver = PairwiseSphSolver(gasParams)
        solver.initialize(randomStore)

        with pytest.raises(ValueError):
            solver.step(-0.01)

    def testInvalidParametersRejected(self):
        with pytest.raises(ConfigurationError):
            PairwiseSphSolver(SimulationParameters(smoothingLength=0.0))

    def testInitializeComputesDensity(self, gasParams, randomStore):
        solver = PairwiseSphSolver(gasParams)
        solver.initialize(randomStore)

        assert np.all(randomStore.liveDensities > 0.0)
        assert solver.time == 0.0
        assert solver.stepCount == 0
        assert solver.particles is randomStore

    def testStepTracksTimeAndState(self, gasParams, randomStore):
        solver = PairwiseSphSolver(gasParams)
        solver.initialize(randomStore)

        for _ in range(4):
            state = solver.step(0.025)

        assert isinstance(state, SimulationState)
        assert state.step == 4
        assert solver.stepCount == 4
        assert state.time == pytest.approx(0.1)
        assert state.dt == 0.025
        assert state.maxVelocity > 0.0
        assert state.kineticEnergy == pytest.approx(
            randomStore.kineticEnergy(gasParams.particleMass)
        )
        assert state.totalEnergy == pytest.approx(state.kineticEnergy + state.potentialEnergy)

    def testUpdateParameters(self, gasParams, randomStore):
        solver = PairwiseSphSolver(gasParams)
        solver.initialize(randomStore)

        solver.updateParameters(gasParams.adjusted(gravity=0.0))
        solver.step(0.1)
        assert solver.parameters.gravity == 0.0

        with pytest.raises(ConfigurationError):
            solver.updateParameters(SimulationParameters(damping=2.0))
        assert solver.parameters.gravity == 0.0

    def testEmptyStore(self, gasParams):
        solver = PairwiseSphSolver(gasParams)
        solver.initialize(ParticleStore(8, count=0))

        state = solver.step(0.1)

        assert state.step == 1
        assert state.kineticEnergy == 0.0
        assert state.maxVelocity == 0.0

    def testAppendDuringRun(self, gasParams):
        store = ParticleStore(4, count=0)
        solver = PairwiseSphSolver(gasParams)
        solver.initialize(store)

        store.addParticle((4.0, 4.0))
        solver.step(0.1)
        store.addParticle((5.0, 4.0))
        state = solver.step(0.1)

        assert store.count == 2
        assert state.maxVelocity > 0.0
