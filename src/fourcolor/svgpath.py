"""Parsing of SVG-like path descriptions into sampled rings"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import ClassVar, Dict, List, Optional, Tuple, Union

import numpy as np

from fourcolor.bezier import BezierCurve
from fourcolor.common import BEZIER_STEPS, Point, Ring

logger = logging.getLogger(__name__)


###############################################################################
# Path commands
###############################################################################


@dataclass(frozen=True)
class MoveTo:
    """Start a new ring at (x, y)."""

    x: float
    y: float
    relative: bool = False


@dataclass(frozen=True)
class LineTo:
    """Straight line from the current point to (x, y)."""

    x: float
    y: float
    relative: bool = False


@dataclass(frozen=True)
class CubicTo:
    """Cubic Bezier curve from the current point via (x1, y1), (x2, y2) to (x3, y3)."""

    x1: float
    y1: float
    x2: float
    y2: float
    x3: float
    y3: float
    relative: bool = False


@dataclass(frozen=True)
class ClosePath:
    """Close the current ring by returning to its start point."""


PathCommand = Union[MoveTo, LineTo, CubicTo, ClosePath]


###############################################################################
# FcPathParser
###############################################################################


class FcPathParser:
    """
    Turns a path description into rings (ordered point sequences).

    A path description is a string of command letters, each followed by its
    numeric operands separated by whitespace and/or commas:
        MoveTo:       2: Mm
        LineTo:       2: Ll
        CubicBezier:  6: Cc
        ClosePath:    0: Zz
    Uppercase letters use absolute coordinates, lowercase letters are relative
    to the current point. Surplus operands repeat the command; surplus pairs
    after a MoveTo are implicit LineTo commands.

    Drawing commands always append to the ring in progress. Without a
    preceding MoveTo (at the very beginning or after a ClosePath) they start
    a new ring at their own point; no connecting segment is added.

    Parsing never raises on malformed input. Incomplete operand groups and
    unknown command letters are dropped (logged on DEBUG level), so degenerate
    input yields degenerate (possibly empty) output.
    """

    # Token definition: a command letter or a number
    TOKEN_PATTERN: ClassVar[re.Pattern] = re.compile(r"([A-Za-z])|([-+]?[0-9]*\.?[0-9]+(?:[eE][-+]?[0-9]+)?)")
    # Number of operands consumed by each supported command
    ARITY: ClassVar[Dict[str, int]] = {"M": 2, "L": 2, "C": 6, "Z": 0}

    @classmethod
    def _split_groups(cls, path_string: str) -> List[Tuple[str, List[float]]]:
        """Split _path_string_ into (letter, operands) groups."""
        groups: List[Tuple[str, List[float]]] = []
        for match in cls.TOKEN_PATTERN.finditer(path_string):
            letter, number = match.groups()
            if letter:
                groups.append((letter, []))
            elif groups:
                groups[-1][1].append(float(number))
            else:
                logger.debug("Ignoring operand %s before the first command", number)
        return groups

    @classmethod
    def tokenize(cls, path_string: str) -> List[PathCommand]:
        """
        Convert _path_string_ into a list of tagged path commands.

        Args:
            path_string (str): path description, e.g. "M 0,0 L 10,0 C 15,0 20,5 20,10 Z"

        Returns:
            List[PathCommand]: the commands in input order
        """
        commands: List[PathCommand] = []
        for letter, operands in cls._split_groups(path_string):
            cmd = letter.upper()
            relative = letter.islower()
            arity = cls.ARITY.get(cmd)

            if arity is None:
                logger.debug("Skipping unsupported command '%s' with %d operands", letter, len(operands))
                continue

            if arity == 0:
                if operands:
                    logger.debug("Ignoring %d operands of command '%s'", len(operands), letter)
                commands.append(ClosePath())
                continue

            num_groups, leftover = divmod(len(operands), arity)
            if leftover:
                logger.debug("Dropping %d surplus operands of command '%s'", leftover, letter)

            for i in range(num_groups):
                args = operands[i * arity : (i + 1) * arity]
                if cmd == "M":
                    if i == 0:
                        commands.append(MoveTo(args[0], args[1], relative))
                    else:
                        commands.append(LineTo(args[0], args[1], relative))
                elif cmd == "L":
                    commands.append(LineTo(args[0], args[1], relative))
                else:
                    commands.append(CubicTo(*args, relative=relative))

        return commands

    @staticmethod
    def _resolve(current: Optional[Point], x: float, y: float, relative: bool) -> Point:
        """Absolute coordinates of (x, y) given the current point."""
        if relative and current is not None:
            return (current[0] + x, current[1] + y)
        return (x, y)

    @classmethod
    def rings_from_commands(cls, commands: List[PathCommand], bezier_steps: int = BEZIER_STEPS) -> List[Ring]:
        """
        Run the ring building state machine over _commands_.

        Args:
            commands (List[PathCommand]): tagged commands, see tokenize()
            bezier_steps (int): number of samples per cubic curve (t = 1/steps ... 1.0)

        Returns:
            List[Ring]: read-only (n, 2) arrays, one per traced sub-path
        """
        point_lists: List[List[Point]] = []
        current: List[Point] = []
        start_point: Optional[Point] = None
        current_point: Optional[Point] = None

        for command in commands:
            if isinstance(command, MoveTo):
                if current:
                    point_lists.append(current)
                current_point = cls._resolve(current_point, command.x, command.y, command.relative)
                start_point = current_point
                current = [current_point]

            elif isinstance(command, LineTo):
                current_point = cls._resolve(current_point, command.x, command.y, command.relative)
                current.append(current_point)

            elif isinstance(command, CubicTo):
                end_point = cls._resolve(current_point, command.x3, command.y3, command.relative)
                if current_point is None:
                    logger.debug("CubicTo without current point, keeping its end point only")
                    current_point = end_point
                    current.append(end_point)
                    continue
                control_points = [
                    current_point,
                    cls._resolve(current_point, command.x1, command.y1, command.relative),
                    cls._resolve(current_point, command.x2, command.y2, command.relative),
                    end_point,
                ]
                current.extend(BezierCurve.polygonize_cubic_curve(control_points, bezier_steps))
                current_point = end_point

            elif isinstance(command, ClosePath):
                if start_point is not None and current and current[-1] != start_point:
                    current.append(start_point)
                if current:
                    point_lists.append(current)
                current = []
                if start_point is not None:
                    current_point = start_point

        if current:
            point_lists.append(current)

        rings: List[Ring] = []
        for point_list in point_lists:
            ring = np.array(point_list, dtype=np.float64)
            ring.flags.writeable = False
            rings.append(ring)
        return rings

    @classmethod
    def parse(cls, path_string: str, bezier_steps: int = BEZIER_STEPS) -> List[Ring]:
        """
        Parse _path_string_ into rings.

        Args:
            path_string (str): path description
            bezier_steps (int): number of samples per cubic curve

        Returns:
            List[Ring]: the rings in drawing order, possibly empty
        """
        return cls.rings_from_commands(cls.tokenize(path_string), bezier_steps)
