"""Tests for geometry envelopes."""

import pandas as pd
import pytest

from vectortools import Envelope, create_from_wkt


class TestEnvelope:
    def test_of_a_polygon(self, square):
        assert square.envelope == Envelope(0.0, 10.0, 0.0, 10.0)

    def test_of_a_3d_line(self):
        envelope = create_from_wkt('LINESTRING (0 1 2,3 -4 5)').envelope
        assert envelope.is_3d
        assert (envelope.min_z, envelope.max_z) == (2.0, 5.0)
        assert envelope.z_size == 3.0

    def test_of_an_empty_geometry(self):
        assert create_from_wkt('POLYGON EMPTY').envelope is None

    def test_is_a_snapshot(self):
        line = create_from_wkt('LINESTRING (0 0,1 1)')
        envelope = line.envelope
        line.add_point(5, 5)
        assert envelope.max_x == 1.0
        assert line.envelope.max_x == 5.0

    def test_sizes(self):
        envelope = Envelope(1, 4, 2, 8)
        assert (envelope.x_size, envelope.y_size) == (3, 6)
        assert envelope.z_size is None

    def test_invalid_bounds(self):
        with pytest.raises(ValueError):
            Envelope(5, 1, 0, 1)
        with pytest.raises(ValueError):
            Envelope(0, 1, 0, 1, min_z=0)

    def test_contains_and_intersects(self):
        outer = Envelope(0, 10, 0, 10)
        inner = Envelope(2, 3, 2, 3)
        apart = Envelope(20, 30, 20, 30)
        assert outer.contains(inner)
        assert not inner.contains(outer)
        assert outer.intersects(inner)
        assert not outer.intersects(apart)

    def test_merge(self):
        merged = Envelope(0, 1, 0, 1, 0, 1).merge(Envelope(5, 6, -1, 0, 2, 3))
        assert merged == Envelope(0, 6, -1, 1, 0, 3)
        assert not Envelope(0, 1, 0, 1).merge(Envelope(0, 1, 0, 1, 0, 1)).is_3d

    def test_to_dataframe(self):
        df = Envelope(0, 10, -5, 5).to_dataframe()
        expected = pd.DataFrame([[0, -5], [10, 5]], columns=['x', 'y'], index=['min', 'max'])
        pd.testing.assert_frame_equal(df, expected)

    def test_to_dataframe_3d(self):
        df = Envelope(0, 10, -5, 5, 1, 2).to_dataframe()
        assert list(df.columns) == ['x', 'y', 'z']
        assert df.loc['max', 'z'] == 2
