"""
Tests for transform plans.
"""

import numpy as np
import pytest

from scintwf.core.fft import DCT2DPlan, RealFFTPlan


class TestRealFFTPlan:
    """Tests for the real-to-complex FFT plan."""

    def test_constant(self):
        with RealFFTPlan(8) as plan:
            spectrum = plan.execute(np.ones(8))
        assert spectrum.shape == (5,)
        assert np.allclose(spectrum, [8, 0, 0, 0, 0])

    def test_reuse(self):
        """A plan can transform several inputs."""
        plan = RealFFTPlan(4)
        first = plan.execute([1.0, 0.0, 0.0, 0.0])
        second = plan.execute([0.0, 1.0, 0.0, 0.0])
        assert np.allclose(first, [1, 1, 1])
        assert np.allclose(second, [1, -1j, -1])
        plan.close()

    def test_buffer_execute(self):
        plan = RealFFTPlan(4)
        plan.buffer[:] = [1.0, 1.0, 1.0, 1.0]
        assert np.allclose(plan.execute(), [4, 0, 0])

    def test_closed(self):
        with RealFFTPlan(4) as plan:
            pass
        assert plan.closed
        with pytest.raises(RuntimeError):
            plan.execute(np.ones(4))

    def test_wrong_shape(self):
        with pytest.raises(ValueError):
            RealFFTPlan(4).execute(np.ones(5))

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            RealFFTPlan(0)


class TestDCT2DPlan:
    """Tests for the 2-D type-I DCT plan."""

    def test_constant(self):
        """DCT-I of a constant is 2(N-1) at the zero index only."""
        with DCT2DPlan((3, 4)) as plan:
            result = plan.execute(np.ones((3, 4)))

        expected = np.zeros((3, 4))
        expected[0, 0] = 2 * 2 * 2 * 3
        assert np.allclose(result, expected)

    def test_input_not_modified(self):
        data = np.arange(12.0).reshape(3, 4)
        copy = data.copy()
        DCT2DPlan((3, 4)).execute(data)
        assert np.array_equal(data, copy)

    def test_invalid_shape(self):
        with pytest.raises(ValueError):
            DCT2DPlan((1, 4))
        with pytest.raises(ValueError):
            DCT2DPlan((4,))
