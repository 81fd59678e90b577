"""Test module for the fourcolor.svgpath module.

This module contains unit tests for the fourcolor.svgpath module.

The tests are grouped into test cases, each of which is a function prefixed with "test_".
The tests are run using pytest.
"""

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from fourcolor.bezier import BezierCurve
from fourcolor.svgpath import ClosePath, CubicTo, FcPathParser, LineTo, MoveTo

###############################################################################
# Tokenizer
###############################################################################


class TestTokenize:
    """Test conversion of path strings into tagged commands."""

    def test_basic_commands(self):
        """Test one command of each kind."""
        commands = FcPathParser.tokenize("M 10 20 L 30 40 C 1,2 3,4 5,6 Z")

        assert commands == [
            MoveTo(10.0, 20.0),
            LineTo(30.0, 40.0),
            CubicTo(1.0, 2.0, 3.0, 4.0, 5.0, 6.0),
            ClosePath(),
        ]

    def test_lowercase_commands_are_relative(self):
        """Test that lowercase letters set the relative flag."""
        commands = FcPathParser.tokenize("m1,2 l3,4 z")

        assert commands == [MoveTo(1.0, 2.0, True), LineTo(3.0, 4.0, True), ClosePath()]

    def test_number_formats(self):
        """Test signs, leading dots, exponents and missing separators."""
        commands = FcPathParser.tokenize("M1e1,2E0L-3.5.5")

        assert commands == [MoveTo(10.0, 2.0), LineTo(-3.5, 0.5)]

    def test_surplus_pairs_repeat_command(self):
        """Test implicit LineTo after MoveTo and repeated LineTo."""
        commands = FcPathParser.tokenize("M0,0 1,0 L1,1 0,1")

        assert commands == [MoveTo(0.0, 0.0), LineTo(1.0, 0.0), LineTo(1.0, 1.0), LineTo(0.0, 1.0)]

    def test_incomplete_operands_are_dropped(self):
        """Test that incomplete operand groups produce no command."""
        assert FcPathParser.tokenize("M 1") == []
        assert FcPathParser.tokenize("M0,0 L1,2,3") == [MoveTo(0.0, 0.0), LineTo(1.0, 2.0)]
        assert FcPathParser.tokenize("M0,0 C1,2,3,4") == [MoveTo(0.0, 0.0)]

    def test_unknown_commands_are_skipped(self):
        """Test that unsupported commands are ignored together with their operands."""
        commands = FcPathParser.tokenize("M0,0 H 5 Q 1,1 2,2 L1,1")

        assert commands == [MoveTo(0.0, 0.0), LineTo(1.0, 1.0)]

    def test_empty_and_garbage_input(self):
        """Test that degenerate input never raises."""
        assert FcPathParser.tokenize("") == []
        assert FcPathParser.tokenize("   ,, ") == []
        assert FcPathParser.tokenize("12 34") == []


###############################################################################
# Parser
###############################################################################


class TestParse:
    """Test ring building."""

    def test_open_polyline(self):
        """Test a single open ring."""
        rings = FcPathParser.parse("M 10 20 L 30 40")

        assert len(rings) == 1
        assert_array_equal(rings[0], [[10.0, 20.0], [30.0, 40.0]])

    def test_close_path_appends_start(self):
        """Test that ClosePath returns to the start point."""
        rings = FcPathParser.parse("M0,0 L1,0 L1,1 Z")

        assert len(rings) == 1
        assert_array_equal(rings[0], [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 0.0]])

    def test_close_path_does_not_duplicate_start(self):
        """Test that an explicitly closed ring is not closed twice."""
        rings = FcPathParser.parse("M0,0 L1,0 L1,1 L0,0 Z")

        assert_array_equal(rings[0], [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 0.0]])

    def test_multiple_rings(self):
        """Test islands: one ring per closed sub-path."""
        rings = FcPathParser.parse("M0,0 L1,0 L1,1 Z M5,5 L6,5 L6,6 Z")

        assert len(rings) == 2
        assert_array_equal(rings[1], [[5.0, 5.0], [6.0, 5.0], [6.0, 6.0], [5.0, 5.0]])

    def test_move_finalizes_open_ring(self):
        """Test that MoveTo finalizes the ring in progress."""
        rings = FcPathParser.parse("M0,0 L1,0 M5,5 L6,6")

        assert len(rings) == 2
        assert_array_equal(rings[0], [[0.0, 0.0], [1.0, 0.0]])
        assert_array_equal(rings[1], [[5.0, 5.0], [6.0, 6.0]])

    def test_move_only_ring(self):
        """Test that a lone MoveTo yields a single point ring."""
        rings = FcPathParser.parse("M3,4")

        assert len(rings) == 1
        assert_array_equal(rings[0], [[3.0, 4.0]])

    def test_cubic_curve_sampling(self):
        """Test that a cubic curve contributes exactly 10 analytic samples."""
        control_points = [(0.0, 0.0), (50.0, 200.0), (150.0, -100.0), (200.0, 0.0)]

        rings = FcPathParser.parse("M0,0 C50,200 150,-100 200,0")

        assert rings[0].shape == (11, 2)
        assert_array_equal(rings[0][0], [0.0, 0.0])
        for i in range(1, 11):
            t = i / 10
            u = 1 - t
            expected_x = u**3 * 0.0 + 3 * u**2 * t * 50.0 + 3 * u * t**2 * 150.0 + t**3 * 200.0
            expected_y = u**3 * 0.0 + 3 * u**2 * t * 200.0 + 3 * u * t**2 * -100.0 + t**3 * 0.0
            assert_allclose(rings[0][i], [expected_x, expected_y], atol=1e-9)
        assert_allclose(rings[0][1:], BezierCurve.polygonize_cubic_curve(control_points), atol=0)

    def test_cubic_curve_continues_from_end_point(self):
        """Test that the curve end point becomes the current point."""
        rings = FcPathParser.parse("M0,0 C0,1 1,1 1,0 l1,0")

        assert_array_equal(rings[0][-2], [1.0, 0.0])
        assert_array_equal(rings[0][-1], [2.0, 0.0])

    def test_relative_commands(self):
        """Test relative coordinates, including relative curves."""
        rings = FcPathParser.parse("m10,10 l5,0 l0,5 z")

        assert_array_equal(rings[0], [[10.0, 10.0], [15.0, 10.0], [15.0, 15.0], [10.0, 10.0]])

        curve = FcPathParser.parse("M10,10 c5,0 5,0 10,0")
        assert_allclose(curve[0][-1], [20.0, 10.0])
        assert_allclose(curve[0][5], [15.0, 10.0], atol=1e-9)

    def test_drawing_after_close_starts_new_ring(self):
        """Test that a LineTo after ClosePath starts a new ring at its own point."""
        rings = FcPathParser.parse("M0,0 L1,0 L1,1 Z L2,2")

        assert len(rings) == 2
        assert_array_equal(rings[0], [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 0.0]])
        assert_array_equal(rings[1], [[2.0, 2.0]])

    def test_drawing_after_close_continues_from_start(self):
        """Test that a curve after ClosePath starts at the closed ring's start without extra point."""
        rings = FcPathParser.parse("M0,0 L1,0 L1,1 Z C0,1 1,1 1,0")

        assert rings[1].shape == (10, 2)
        assert_allclose(rings[1], BezierCurve.polygonize_cubic_curve([(0, 0), (0, 1), (1, 1), (1, 0)]), atol=0)

    def test_lines_without_move(self):
        """Test that an outline without MoveTo still yields its ring."""
        rings = FcPathParser.parse("L0,0 L10,0 L10,10 Z")

        assert len(rings) == 1
        assert_array_equal(rings[0], [[0.0, 0.0], [10.0, 0.0], [10.0, 10.0]])

    def test_curve_without_current_point(self):
        """Test that a leading curve contributes only its end point."""
        rings = FcPathParser.parse("C1,2 3,4 5,6 L7,8")

        assert len(rings) == 1
        assert_array_equal(rings[0], [[5.0, 6.0], [7.0, 8.0]])

    def test_degenerate_input(self):
        """Test that malformed input degrades to empty or partial output."""
        assert FcPathParser.parse("") == []
        assert FcPathParser.parse("M 1") == []
        assert FcPathParser.parse("Z Z") == []

        rings = FcPathParser.parse("M0,0 L1")
        assert len(rings) == 1
        assert_array_equal(rings[0], [[0.0, 0.0]])

        rings = FcPathParser.parse("L 1 2 C 1 2 3 4 5 6")
        assert rings[0].shape == (11, 2)
        assert_array_equal(rings[0][0], [1.0, 2.0])
        assert_array_equal(rings[0][-1], [5.0, 6.0])

    def test_rings_are_read_only(self):
        """Test that parsed rings cannot be modified."""
        rings = FcPathParser.parse("M0,0 L1,0 L1,1 Z")

        assert not rings[0].flags.writeable
        with pytest.raises(ValueError):
            rings[0][0, 0] = 5.0

    def test_custom_bezier_steps(self):
        """Test that the number of curve samples is configurable."""
        rings = FcPathParser.parse("M0,0 C0,1 1,1 1,0", bezier_steps=4)

        assert rings[0].shape == (5, 2)
        assert rings[0].dtype == np.float64
