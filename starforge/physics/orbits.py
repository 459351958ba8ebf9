"""Keplerian orbit propagation.

Every orbit is a fixed ellipse around its host; there is no perturbation
between bodies. Times are in seconds, positions in AU in the host frame.
"""

import math
from dataclasses import dataclass

from ..models import Orbit
from ..utils.constants import AU_M, G, SECONDS_PER_DAY

TWO_PI = 2 * math.pi
KEPLER_TOLERANCE = 1e-12
KEPLER_MAX_ITERATIONS = 30
BISECTION_ITERATIONS = 60


@dataclass
class StateVector:
    """Position (AU) and velocity (AU/s) relative to the host."""

    x: float
    y: float
    vx: float
    vy: float


def normalize_angle(angle: float) -> float:
    """Wrap an angle into [0, 2*pi)."""
    normalized = math.fmod(angle, TWO_PI)
    return normalized + TWO_PI if normalized < 0 else normalized


def solve_kepler(mean_anomaly: float, e: float) -> float:
    """Solve Kepler's equation E - e*sin(E) = M for the eccentric anomaly.

    Newton-Raphson starting from E = M (or pi when e > 0.8), with a
    bisection fallback over [0, 2*pi) if Newton fails to converge.

    Args:
        mean_anomaly: Mean anomaly M (radians, any value)
        e: Eccentricity, 0 <= e < 1

    Returns:
        Eccentric anomaly E in [0, 2*pi]
    """
    m = normalize_angle(mean_anomaly)
    if e < 1e-6:
        return m

    ecc_anomaly = math.pi if e > 0.8 else m
    for _ in range(KEPLER_MAX_ITERATIONS):
        f = ecc_anomaly - e * math.sin(ecc_anomaly) - m
        f_prime = 1 - e * math.cos(ecc_anomaly)
        if abs(f_prime) < 1e-12:
            break
        delta = f / f_prime
        ecc_anomaly -= delta
        if abs(delta) < KEPLER_TOLERANCE:
            return ecc_anomaly

    # f(E) = E - e*sin(E) - M is monotonic on [0, 2*pi]
    low, high = 0.0, TWO_PI
    for _ in range(BISECTION_ITERATIONS):
        mid = 0.5 * (low + high)
        if mid - e * math.sin(mid) - m > 0:
            high = mid
        else:
            low = mid
    return 0.5 * (low + high)


def true_anomaly(ecc_anomaly: float, e: float) -> float:
    return 2 * math.atan2(
        math.sqrt(1 + e) * math.sin(ecc_anomaly / 2),
        math.sqrt(1 - e) * math.cos(ecc_anomaly / 2),
    )


def mean_motion(orbit: Orbit) -> float:
    """Signed mean motion n (rad/s); negative for retrograde orbits."""
    if orbit.mean_motion_rad_s is not None:
        n = orbit.mean_motion_rad_s
    else:
        a_m = orbit.elements.a_au * AU_M
        n = math.sqrt(orbit.host_mu / a_m**3) if a_m > 0 and orbit.host_mu > 0 else 0.0
    return -n if orbit.retrograde else n


def mean_anomaly_at(orbit: Orbit, t: float) -> float:
    return normalize_angle(orbit.elements.mean_anomaly_rad + mean_motion(orbit) * (t - orbit.t0))


def propagate_state(orbit: Orbit | None, t: float) -> StateVector:
    """Position and velocity of an orbiting node at time ``t``.

    Args:
        orbit: Orbit to evaluate (None or degenerate orbits sit at the origin)
        t: Time in seconds on the same clock as ``orbit.t0``

    Returns:
        StateVector in the host frame, rotated by the argument of periapsis
    """
    if orbit is None or orbit.host_mu <= 0 or orbit.elements.a_au <= 0:
        return StateVector(0.0, 0.0, 0.0, 0.0)

    elements = orbit.elements
    e = elements.e
    a_m = elements.a_au * AU_M

    ecc_anomaly = solve_kepler(mean_anomaly_at(orbit, t), e)
    nu = true_anomaly(ecc_anomaly, e)
    r_m = a_m * (1 - e * math.cos(ecc_anomaly))
    x_p = r_m * math.cos(nu)
    y_p = r_m * math.sin(nu)

    p = a_m * max(1 - e * e, 1e-9)
    h = math.sqrt(orbit.host_mu * p)
    mu_over_h = orbit.host_mu / h
    vx_p = -mu_over_h * math.sin(nu)
    vy_p = mu_over_h * (e + math.cos(nu))
    if orbit.retrograde:
        vx_p, vy_p = -vx_p, -vy_p

    omega = math.radians(elements.arg_periapsis_deg)
    cos_o, sin_o = math.cos(omega), math.sin(omega)
    return StateVector(
        x=(x_p * cos_o - y_p * sin_o) / AU_M,
        y=(x_p * sin_o + y_p * cos_o) / AU_M,
        vx=(vx_p * cos_o - vy_p * sin_o) / AU_M,
        vy=(vx_p * sin_o + vy_p * cos_o) / AU_M,
    )


def position_at(orbit: Orbit | None, t: float) -> tuple[float, float]:
    state = propagate_state(orbit, t)
    return state.x, state.y


def orbital_period_days(a_au: float, host_mass_kg: float) -> float | None:
    """Kepler's third law period around a host of the given mass."""
    if a_au <= 0 or host_mass_kg <= 0:
        return None
    a_m = a_au * AU_M
    return math.sqrt(4 * math.pi**2 * a_m**3 / (G * host_mass_kg)) / SECONDS_PER_DAY
