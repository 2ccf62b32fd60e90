"""SVG path data and point list parsing.

Path data is tokenized into operator letters and numbers, then grouped into
`PathCommand` values. Supported operators:

- M/m: move (extra coordinate pairs are implicit line-tos)
- L/l: line
- H/h, V/v: horizontal/vertical line (the other axis is left as NaN)
- C/c: cubic curve
- S/s: smooth cubic curve (first control point left absent)
- Z/z: close

Quadratic curves and arcs are rejected with `UnsupportedCommandError`.
"""

import math
import re

from atlasify.domain import Coordinate, PathCommand
from atlasify.exceptions import PathDataError, UnsupportedCommandError

TOKEN_RE = re.compile(
    r"(?P<op>[A-Za-z])"
    r"|(?P<num>[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?)"
    r"|(?P<sep>[\s,]+)"
)

# Number of coordinates consumed by one repetition of each operator
ARITY: dict[str, int] = {"M": 2, "L": 2, "H": 1, "V": 1, "C": 6, "S": 4, "Z": 0}

UNSUPPORTED = frozenset("QqTtAa")


def tokenize(data: str) -> list[str | float]:
    """Split path data into operator letters and numbers.

    Raises:
        PathDataError: On characters that are neither operators, numbers
            nor separators
    """
    tokens: list[str | float] = []
    pos = 0
    while pos < len(data):
        match = TOKEN_RE.match(data, pos)
        if match is None:
            raise PathDataError(f"unexpected {data[pos]!r} at offset {pos}")
        if match.group("op") is not None:
            tokens.append(match.group("op"))
        elif match.group("num") is not None:
            tokens.append(float(match.group("num")))
        pos = match.end()
    return tokens


def _build(operator: str, values: list[float]) -> PathCommand:
    relative = operator.islower()
    kind = operator.upper()

    if kind == "M":
        return PathCommand.move_to(values[0], values[1], relative)
    if kind == "L":
        return PathCommand.line_to(values[0], values[1], relative)
    if kind == "H":
        return PathCommand.line_to(values[0], math.nan, relative)
    if kind == "V":
        return PathCommand.line_to(math.nan, values[0], relative)
    if kind == "C":
        return PathCommand.curve_to(
            (values[0], values[1]), (values[2], values[3]), (values[4], values[5]), relative
        )
    if kind == "S":
        return PathCommand.curve_to(None, (values[0], values[1]), (values[2], values[3]), relative)

    raise UnsupportedCommandError(operator)


def parse_path_data(data: str) -> list[PathCommand]:
    """Parse the `d` attribute of an SVG path.

    Args:
        data: Path data string

    Returns:
        Commands as written, relative ones unresolved

    Raises:
        PathDataError: If the data is malformed
        UnsupportedCommandError: If it uses quadratic curves or arcs
    """
    tokens = tokenize(data)
    commands: list[PathCommand] = []
    operator: str | None = None
    awaiting_values = False
    idx = 0

    while idx < len(tokens):
        token = tokens[idx]

        if isinstance(token, str):
            if awaiting_values:
                raise PathDataError(f"operator {operator!r} has no coordinates")
            if token in UNSUPPORTED:
                raise UnsupportedCommandError(token)
            if token.upper() not in ARITY:
                raise PathDataError(f"unknown operator {token!r}")

            operator = token
            idx += 1
            if operator in "Zz":
                commands.append(PathCommand.close())
            else:
                awaiting_values = True
            continue

        if operator is None:
            raise PathDataError("path data must start with an operator")
        if operator in "Zz":
            raise PathDataError("coordinates after close")

        arity = ARITY[operator.upper()]
        values = tokens[idx : idx + arity]
        if len(values) < arity or any(isinstance(v, str) for v in values):
            raise PathDataError(f"operator {operator!r} expects {arity} numbers")

        commands.append(_build(operator, values))  # type: ignore[arg-type]
        idx += arity
        awaiting_values = False

        # Coordinate pairs following a move are line-tos
        if operator == "M":
            operator = "L"
        elif operator == "m":
            operator = "l"

    if awaiting_values:
        raise PathDataError(f"operator {operator!r} has no coordinates")

    return commands


def parse_points(data: str) -> list[Coordinate]:
    """Parse the `points` attribute of an SVG polygon.

    Raises:
        PathDataError: If the list holds operators or an odd number of values
    """
    tokens = tokenize(data)
    if any(isinstance(t, str) for t in tokens):
        raise PathDataError("point list contains operators")
    if len(tokens) % 2:
        raise PathDataError(f"point list has an odd number of values ({len(tokens)})")

    values: list[float] = tokens  # type: ignore[assignment]
    return [Coordinate(values[i], values[i + 1]) for i in range(0, len(values), 2)]
