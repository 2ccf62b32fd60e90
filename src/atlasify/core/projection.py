"""Inverse Winkel Tripel projection.

Drawing coordinates are first rescaled from the calibration envelope into the
canonical Winkel Tripel domain, then inverted to longitude/latitude with a
Newton-Raphson solver on the forward equations.

The solver never raises on numeric trouble. Every inversion returns a
`ProjectionResult` carrying the best estimate and, when the estimate is not
trustworthy, a `Diagnostic`.
"""

import math
from dataclasses import dataclass

from atlasify.config import ProjectionConfig
from atlasify.domain import Coordinate, Diagnostic, DiagnosticCode, Envelope, Ring

# cos(phi1) for the standard parallel phi1 = acos(2/pi)
COS_PHI1 = 2.0 / math.pi

HALF_PI = math.pi / 2.0


@dataclass(frozen=True, slots=True)
class ProjectionResult:
    """Outcome of a single inversion.

    Attributes:
        coordinate: Longitude/latitude in degrees (best estimate)
        iterations: Newton steps spent (0 for the origin shortcut)
        diagnostic: Set when the solver did not converge cleanly
    """

    coordinate: Coordinate
    iterations: int
    diagnostic: Diagnostic | None = None

    @property
    def converged(self) -> bool:
        return self.diagnostic is None


class WinkelTripelProjector:
    """Maps drawing coordinates to geographic coordinates.

    Example:
        projector = WinkelTripelProjector()
        result = projector.invert(projector.normalize(point, envelope))
        lon, lat = result.coordinate.to_tuple()
    """

    DOMAIN = Envelope(
        min_x=-(math.pi + 2.0) / 2.0,
        max_x=(math.pi + 2.0) / 2.0,
        min_y=-HALF_PI,
        max_y=HALF_PI,
    )

    def __init__(self, config: ProjectionConfig | None = None) -> None:
        self.config = config or ProjectionConfig()

    def normalize(self, coordinate: Coordinate, source: Envelope) -> Coordinate:
        """Rescale a drawing coordinate into the canonical domain.

        The y axis is flipped: drawing y grows downward, latitude upward.

        Args:
            coordinate: Point in drawing units
            source: Calibration envelope of the drawing

        Returns:
            Point in the canonical Winkel Tripel domain
        """
        domain = self.DOMAIN
        x = domain.min_x + ((coordinate.x - source.min_x) / source.width) * domain.width
        y = -(domain.min_y + ((coordinate.y - source.min_y) / source.height) * domain.height)
        return Coordinate(x, y)

    def forward(self, longitude: float, latitude: float) -> Coordinate:
        """Project longitude/latitude in degrees to the canonical domain."""
        lam = math.radians(longitude)
        phi = math.radians(latitude)

        cos_alpha = math.cos(phi) * math.cos(lam / 2.0)
        alpha = math.acos(max(-1.0, min(1.0, cos_alpha)))
        sin_alpha = math.sin(alpha)
        # alpha / sin(alpha) -> 1 as alpha -> 0
        ratio = alpha / sin_alpha if sin_alpha != 0.0 else 1.0

        x = 0.5 * (2.0 * math.cos(phi) * math.sin(lam / 2.0) * ratio + lam * COS_PHI1)
        y = 0.5 * (math.sin(phi) * ratio + phi)
        return Coordinate(x, y)

    def invert(self, coordinate: Coordinate) -> ProjectionResult:
        """Invert the projection for a point of the canonical domain.

        Solves the forward equations for (lambda, phi) by Newton-Raphson,
        seeded with the target point itself.

        Args:
            coordinate: Point in the canonical domain

        Returns:
            ProjectionResult with longitude/latitude in degrees
        """
        epsilon = self.config.epsilon
        target_x, target_y = coordinate.x, coordinate.y

        if abs(target_x) < epsilon and abs(target_y) < epsilon:
            return ProjectionResult(Coordinate(0.0, 0.0), iterations=0)

        lam = target_x
        phi = target_y

        for iteration in range(self.config.max_iterations):
            sin_half_lam = math.sin(lam * 0.5)
            cos_half_lam = math.cos(lam * 0.5)
            sin_phi = math.sin(phi)
            cos_phi = math.cos(phi)

            cos_alpha = cos_phi * cos_half_lam
            alpha = math.acos(max(-1.0, min(1.0, cos_alpha)))
            sin_alpha_sq = 1.0 - cos_alpha * cos_alpha

            if sin_alpha_sq == 0.0:
                return ProjectionResult(
                    Coordinate(math.degrees(lam), math.degrees(phi)),
                    iterations=iteration,
                    diagnostic=Diagnostic(
                        DiagnosticCode.SINGULAR_JACOBIAN,
                        f"singular Jacobian inverting ({target_x}, {target_y})",
                    ),
                )

            sin_alpha = math.sqrt(sin_alpha_sq)

            x = 0.5 * ((2.0 * cos_phi * sin_half_lam * alpha) / sin_alpha + lam * COS_PHI1)
            y = 0.5 * ((alpha * sin_phi) / sin_alpha + phi)

            dx = x - target_x
            dy = y - target_y
            if abs(dx) < epsilon and abs(dy) < epsilon:
                if phi > HALF_PI:
                    phi -= 2.0 * (phi - HALF_PI)
                if phi < -HALF_PI:
                    phi -= 2.0 * (phi + HALF_PI)
                return ProjectionResult(
                    Coordinate(math.degrees(lam), math.degrees(phi)),
                    iterations=iteration,
                )

            dx_dphi = (
                sin_half_lam * cos_half_lam * sin_phi * cos_phi
                - (alpha * sin_phi * sin_half_lam) / sin_alpha
            ) / sin_alpha_sq
            dx_dlam = 0.5 * (
                (
                    cos_phi * cos_phi * sin_half_lam * sin_half_lam
                    + (alpha * cos_phi * cos_half_lam * sin_phi * sin_phi) / sin_alpha
                )
                / sin_alpha_sq
                + COS_PHI1
            )
            dy_dphi = 0.5 * (
                (
                    sin_phi * sin_phi * cos_half_lam
                    + (alpha * sin_half_lam * sin_half_lam * cos_phi) / sin_alpha
                )
                / sin_alpha_sq
                + 1.0
            )
            dy_dlam = (
                0.25
                * (
                    sin_phi * cos_phi * sin_half_lam
                    - (alpha * sin_phi * cos_phi * cos_phi * sin_half_lam * cos_half_lam)
                    / sin_alpha
                )
            ) / sin_alpha_sq

            determinant = dx_dphi * dy_dlam - dy_dphi * dx_dlam
            if determinant == 0.0:
                return ProjectionResult(
                    Coordinate(math.degrees(lam), math.degrees(phi)),
                    iterations=iteration,
                    diagnostic=Diagnostic(
                        DiagnosticCode.SINGULAR_JACOBIAN,
                        f"zero determinant inverting ({target_x}, {target_y})",
                    ),
                )

            # Cramer's rule on the 2x2 Jacobian
            delta_lam = (dy * dx_dphi - dx * dy_dphi) / determinant
            delta_phi = (dx * dy_dlam - dy * dx_dlam) / determinant

            lam -= delta_lam
            phi -= delta_phi

        return ProjectionResult(
            Coordinate(math.degrees(lam), math.degrees(phi)),
            iterations=self.config.max_iterations,
            diagnostic=Diagnostic(
                DiagnosticCode.PROJECTION_NON_CONVERGENCE,
                f"no convergence for ({target_x}, {target_y}) "
                f"after {self.config.max_iterations} iterations",
            ),
        )

    def unproject(self, coordinate: Coordinate, source: Envelope) -> ProjectionResult:
        """Normalize a drawing coordinate and invert it."""
        return self.invert(self.normalize(coordinate, source))

    def unproject_ring(self, ring: Ring, source: Envelope) -> tuple[Ring, list[Diagnostic]]:
        """Invert every coordinate of a ring.

        Args:
            ring: Ring in drawing units
            source: Calibration envelope of the drawing

        Returns:
            Tuple of (new ring in degrees, diagnostics for troubled points)
        """
        points: list[Coordinate] = []
        diagnostics: list[Diagnostic] = []

        for point in ring.points:
            result = self.unproject(point, source)
            points.append(result.coordinate)
            if result.diagnostic is not None:
                diagnostics.append(result.diagnostic)

        return Ring(points=tuple(points)), diagnostics
