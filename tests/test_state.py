"""Tests for particle state and initial conditions."""

import numpy as np
import pytest

from mdsim.exceptions import ConfigurationError
from mdsim.system import (
    FrozenParticleSystem,
    NormalVelocitySampler,
    ParticleSystem,
    VelocitySampler,
    cubic_lattice,
)


class TestParticleSystem:
    """Test ParticleSystem container."""

    def test_create_defaults(self):
        """Test that velocities and accelerations default to zeros."""
        system = ParticleSystem.create(positions=np.zeros((3, 4)))

        assert system.n_particles == 4
        assert system.velocities.shape == (3, 4)
        assert system.accelerations.shape == (3, 4)
        assert np.all(system.velocities == 0)
        assert np.all(system.accelerations == 0)
        assert system.step == 0
        assert system.time == 0.0

    def test_arrays_are_float64(self):
        """Test that integer input is converted."""
        system = ParticleSystem.create(positions=np.ones((3, 2), dtype=int))
        assert system.positions.dtype == np.float64

    def test_rejects_row_per_particle_layout(self):
        """Test that (N, 3) arrays are rejected."""
        with pytest.raises(ValueError, match="positions"):
            ParticleSystem.create(positions=np.zeros((5, 3)))

    def test_rejects_mismatched_velocities(self):
        """Test that velocities must match positions."""
        with pytest.raises(ValueError, match="velocities"):
            ParticleSystem.create(positions=np.zeros((3, 4)), velocities=np.zeros((3, 5)))

    def test_rejects_mismatched_accelerations(self):
        """Test that accelerations must match positions."""
        with pytest.raises(ValueError, match="accelerations"):
            ParticleSystem.create(
                positions=np.zeros((3, 4)), accelerations=np.zeros((2, 4))
            )

    def test_does_not_alias_input(self):
        """Test that the system owns its arrays."""
        positions = np.zeros((3, 2))
        system = ParticleSystem.create(positions=positions)

        positions[0, 0] = 5.0
        assert system.positions[0, 0] == 0.0

    def test_copy_is_deep(self):
        """Test that copies are independent."""
        system = ParticleSystem.create(positions=np.zeros((3, 2)))
        clone = system.copy()

        clone.positions[0, 0] = 1.0
        clone.step = 4

        assert system.positions[0, 0] == 0.0
        assert system.step == 0

    def test_freeze_is_read_only(self):
        """Test frozen snapshots cannot be modified."""
        system = ParticleSystem.create(positions=np.zeros((3, 2)), step=3, time=0.3)
        frozen = system.freeze()

        assert isinstance(frozen, FrozenParticleSystem)
        assert frozen.step == 3
        with pytest.raises(ValueError):
            frozen.positions[0, 0] = 1.0

        # Later changes to the system do not leak into the snapshot
        system.positions[0, 0] = 2.0
        assert frozen.positions[0, 0] == 0.0

    def test_thaw_round_trip(self):
        """Test thawing gives a writable copy."""
        system = ParticleSystem.create(positions=np.arange(6.0).reshape(3, 2))
        thawed = system.freeze().thaw()

        thawed.positions[0, 0] = -1.0
        np.testing.assert_array_equal(system.positions, np.arange(6.0).reshape(3, 2))

    def test_kinetic_energy(self):
        """Test KE = 0.5 * m * sum(v^2)."""
        velocities = np.array([[1.0, 0.0], [0.0, 2.0], [0.0, 0.0]])
        system = ParticleSystem.create(positions=np.zeros((3, 2)), velocities=velocities)

        assert system.kinetic_energy() == pytest.approx(2.5)
        assert system.kinetic_energy(mass=2.0) == pytest.approx(5.0)

    def test_center_of_mass_velocity(self):
        """Test mean velocity for uniform masses."""
        velocities = np.array([[1.0, 3.0], [0.0, 2.0], [-1.0, 1.0]])
        system = ParticleSystem.create(positions=np.zeros((3, 2)), velocities=velocities)

        np.testing.assert_allclose(system.center_of_mass_velocity(), [2.0, 1.0, 0.0])


class TestCubicLattice:
    """Test lattice placement."""

    def test_eight_particles_fill_unit_cube(self):
        """Test N=8 gives every corner of {0,1}^3 exactly once."""
        positions = cubic_lattice(8)

        assert positions.shape == (3, 8)
        points = {tuple(int(c) for c in column) for column in positions.T}
        expected = {(x, y, z) for x in (0, 1) for y in (0, 1) for z in (0, 1)}
        assert points == expected
        assert len(points) == 8

    def test_x_fills_fastest(self):
        """Test ordering: x first, then y, then z."""
        positions = cubic_lattice(27)

        np.testing.assert_array_equal(positions[:, 0], [0, 0, 0])
        np.testing.assert_array_equal(positions[:, 1], [1, 0, 0])
        np.testing.assert_array_equal(positions[:, 2], [2, 0, 0])
        np.testing.assert_array_equal(positions[:, 3], [0, 1, 0])
        np.testing.assert_array_equal(positions[:, 9], [0, 0, 1])
        np.testing.assert_array_equal(positions[:, 26], [2, 2, 2])

    def test_single_particle(self):
        """Test N=1 sits at the origin."""
        np.testing.assert_array_equal(cubic_lattice(1), np.zeros((3, 1)))

    def test_spacing(self):
        """Test lattice spacing scales coordinates."""
        positions = cubic_lattice(8, spacing=0.5)
        assert positions.max() == pytest.approx(0.5)

    def test_deterministic(self):
        """Test that repeated calls agree."""
        np.testing.assert_array_equal(cubic_lattice(64), cubic_lattice(64))

    @pytest.mark.parametrize("n", [0, 2, 10, 100])
    def test_non_cube_is_fatal(self, n):
        """Test that counts without integer cube root are rejected."""
        with pytest.raises(ConfigurationError):
            cubic_lattice(n)


class TestNormalVelocitySampler:
    """Test initial velocity sampling."""

    def test_abstract_base(self):
        """Test that VelocitySampler cannot be instantiated."""
        with pytest.raises(TypeError):
            VelocitySampler()

    def test_shape(self):
        """Test sampled velocities are (3, N)."""
        velocities = NormalVelocitySampler(seed=0).sample(27)
        assert velocities.shape == (3, 27)

    def test_seeded_reproducible(self):
        """Test that equal seeds give equal velocities."""
        v1 = NormalVelocitySampler(seed=42).sample(64)
        v2 = NormalVelocitySampler(seed=42).sample(64)
        v3 = NormalVelocitySampler(seed=43).sample(64)

        np.testing.assert_array_equal(v1, v2)
        assert not np.allclose(v1, v3)

    def test_injected_generator(self):
        """Test that an injected generator is used as the random source."""
        rng = np.random.default_rng(7)
        expected = np.random.default_rng(7).normal(0.0, 2.0, size=(3, 8))

        np.testing.assert_array_equal(NormalVelocitySampler(rng=rng).sample(8), expected)

    def test_moments(self):
        """Test mean 0 and the configured standard deviation."""
        velocities = NormalVelocitySampler(std=2.0, seed=1).sample(20000)

        assert abs(velocities.mean()) < 0.05
        assert velocities.std() == pytest.approx(2.0, rel=0.02)

    def test_zero_std(self):
        """Test that a zero std gives particles at rest."""
        velocities = NormalVelocitySampler(std=0.0, seed=1).sample(8)
        np.testing.assert_array_equal(velocities, np.zeros((3, 8)))

    def test_negative_std_rejected(self):
        """Test that a negative std is a configuration error."""
        with pytest.raises(ConfigurationError):
            NormalVelocitySampler(std=-1.0)
