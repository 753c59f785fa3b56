"""
Trajectory Generator
====================

Turns a comet's state vector or orbital elements into sampled trajectories,
sky positions, and a metadata record describing how they were computed.

Modes:
------
  State-vector mode : RK4 integration under the force model (trail / projection)
  Elements mode     : two-body Kepler solution sampled around perihelion

Both modes drop everything beyond the visualization cutoff, and annotate
points with a random-walk uncertainty

  uncertainty_km = sqrt(rate² * |dt_days|)

with a smaller rate backward in time than forward.
"""
import math
import warnings
import numpy as np

from datetime import datetime
from typing   import Optional, Union

from comet_orbit.input.configuration   import PropagationSettings
from comet_orbit.model.constants       import DEFAULT_CONSTANTS, PhysicalConstants
from comet_orbit.model.dynamics        import Acceleration
from comet_orbit.model.ephemeris       import EphemerisProvider
from comet_orbit.model.frame_converter import FrameConverter
from comet_orbit.model.orbit_converter import OrbitConverter
from comet_orbit.model.state           import NonGravitationalParams, OrbitalElements, SkyPosition, StateVector, TrajectoryPoint
from comet_orbit.model.time_converter  import add_days, days_between
from comet_orbit.propagation.integrator import propagate_state


INTEGRATOR_NAME = 'RK4 (4th-order Runge-Kutta)'


def auto_day_range(
  ecc : float,
) -> float:
  """
  Half-width of the elements-mode date window [day], chosen by eccentricity.

  Near-parabolic ellipses spend longer in the inner solar system, so they get
  a wider window; open orbits and ordinary ellipses get one year.
  """
  if ecc >= 1.0:
    return 365.0
  if ecc > 0.995:
    return 730.0
  if ecc > 0.99:
    return 548.0
  return 365.0


class TrajectoryGenerator:
  """
  Orchestrates the integrator and the Kepler solver into trajectory products.
  """

  def __init__(
    self,
    settings  : Optional[PropagationSettings] = None,
    ephemeris : Optional[EphemerisProvider]   = None,
    constants : PhysicalConstants             = DEFAULT_CONSTANTS,
  ):
    """
    Input:
    ------
      settings : PropagationSettings | None
        Step sizes, cutoffs, and uncertainty rates. Defaults if None.
      ephemeris : EphemerisProvider | None
        Planet position provider. Without one, integration uses solar gravity
        (plus any non-gravitational model) only, and sky positions are unavailable.
      constants : PhysicalConstants
        Physical constants record.
    """
    self.settings  = settings if settings is not None else PropagationSettings()
    self.ephemeris = ephemeris
    self.constants = constants

  # ---------------------------------------------------------------------------
  # Building blocks
  # ---------------------------------------------------------------------------

  def acceleration_model(
    self,
    nongrav : Optional[NonGravitationalParams] = None,
  ) -> Acceleration:
    enable_planetary_perturbations = self.ephemeris is not None and len(self.settings.perturbing_bodies) > 0
    return Acceleration(
      constants                      = self.constants,
      enable_planetary_perturbations = enable_planetary_perturbations,
      perturbing_bodies              = self.settings.perturbing_bodies,
      ephemeris                      = self.ephemeris,
      nongrav                        = nongrav,
      nongrav_cutoff                 = self.settings.nongrav_cutoff_au,
    )

  def uncertainty(
    self,
    elapsed_days : float,
  ) -> float:
    """
    Random-walk position uncertainty after elapsed_days [AU].

    Input:
    ------
      elapsed_days : float
        Signed time from the reference state [day]. Negative uses the backward rate.

    Output:
    -------
      uncertainty : float
        1-sigma uncertainty [AU].
    """
    if elapsed_days < 0:
      rate_km = self.settings.uncertainty_rate_backward_km
    else:
      rate_km = self.settings.uncertainty_rate_forward_km
    uncertainty_km = math.sqrt(rate_km**2 * abs(elapsed_days))
    return uncertainty_km / self.constants.km_per_au

  # ---------------------------------------------------------------------------
  # State-vector mode
  # ---------------------------------------------------------------------------

  def from_state(
    self,
    state           : StateVector,
    duration        : float,
    step            : Optional[float]                  = None,
    nongrav         : Optional[NonGravitationalParams] = None,
    output_interval : Optional[float]                  = None,
  ) -> list[TrajectoryPoint]:
    """
    Trajectory from a known state by RK4 integration.

    Input:
    ------
      state : StateVector
        Starting state. Its uncertainty, if any, is added in quadrature.
      duration : float
        Signed span [day]. Negative produces a trail, positive a projection.
      step : float | None
        Integration step magnitude [day]. Defaults to the trail or projection step.
      nongrav : NonGravitationalParams | None
        Non-gravitational model, or None for none.
      output_interval : float | None
        Output spacing [day]. Defaults to settings.output_interval_days.

    Output:
    -------
      points : list[TrajectoryPoint]
        Starting point first, then every output interval in propagation
        order, plus the last integrated state. Truncated before the first
        point beyond the visualization cutoff.
    """
    if step is None:
      step = self.settings.trail_step_days if duration < 0 else self.settings.projection_step_days
    if output_interval is None:
      output_interval = self.settings.output_interval_days

    states = propagate_state(
      initial_state = state,
      duration      = duration,
      step          = step,
      acceleration  = self.acceleration_model(nongrav),
      stop_distance = self.settings.propagation_cutoff_au,
    )

    # Down-sample the dense run
    stride  = max(1, int(round(output_interval / abs(step))))
    samples = [state] + states[stride-1::stride]
    if states and samples[-1] is not states[-1]:
      samples.append(states[-1])

    initial_uncertainty = state.uncertainty or 0.0
    points = []
    for sample in samples:
      if sample.distance_from_sun > self.settings.visualization_cutoff_au:
        break
      uncertainty = math.hypot(initial_uncertainty, self.uncertainty(days_between(state.time, sample.time)))
      points.append(TrajectoryPoint.from_position(sample.time, sample.position, uncertainty))

    return points

  def trail(
    self,
    state   : StateVector,
    days    : float,
    nongrav : Optional[NonGravitationalParams] = None,
  ) -> list[TrajectoryPoint]:
    """
    Historical trail: days backward from state, newest point first.
    """
    return self.from_state(state, -abs(days), self.settings.trail_step_days, nongrav)

  def projection(
    self,
    state   : StateVector,
    days    : float,
    nongrav : Optional[NonGravitationalParams] = None,
  ) -> list[TrajectoryPoint]:
    """
    Forward projection: days forward from state.
    """
    return self.from_state(state, abs(days), self.settings.projection_step_days, nongrav)

  # ---------------------------------------------------------------------------
  # Elements mode
  # ---------------------------------------------------------------------------

  def from_elements(
    self,
    elements       : OrbitalElements,
    num_points     : Optional[int]      = None,
    day_range      : Optional[float]    = None,
    reference_date : Optional[datetime] = None,
  ) -> list[TrajectoryPoint]:
    """
    Trajectory sampled from the Kepler solution at evenly spaced dates.

    Input:
    ------
      elements : OrbitalElements
        Orbital elements; perihelion_time is required.
      num_points : int | None
        Number of intervals; num_points + 1 dates are sampled. Defaults to
        settings.elements_num_points.
      day_range : float | None
        Half-width of the window around perihelion [day]. Chosen from the
        eccentricity when None.
      reference_date : datetime | None
        When given, each point carries the random-walk uncertainty of its
        distance in time from this date.

    Output:
    -------
      points : list[TrajectoryPoint]
        Chronological points within the visualization cutoff. Empty if the
        elements carry no perihelion time.
    """
    if elements.perihelion_time is None:
      warnings.warn(f"No perihelion time for {elements.name}; elements trajectory is empty", UserWarning)
      return []

    num_points = num_points if num_points is not None else self.settings.elements_num_points
    day_range  = day_range  if day_range  is not None else auto_day_range(elements.e)

    points = []
    for offset in np.linspace(-day_range, day_range, num_points + 1):
      date    = add_days(elements.perihelion_time, float(offset))
      pos_vec = OrbitConverter.position_at(elements, date, self.constants)
      pos_mag = float(np.linalg.norm(pos_vec))
      if not math.isfinite(pos_mag) or pos_mag > self.settings.visualization_cutoff_au:
        continue

      uncertainty = None
      if reference_date is not None:
        uncertainty = self.uncertainty(days_between(reference_date, date))
      points.append(TrajectoryPoint.from_position(date, pos_vec, uncertainty))

    return points

  def orbit_path(
    self,
    elements   : OrbitalElements,
    num_points : Optional[int] = None,
  ) -> list[np.ndarray]:
    """
    Shape of the orbit sampled in true anomaly, independent of time.

    Ellipses are traced through the full +/-180 deg; open orbits through
    +/-135 deg around perihelion. Points beyond the visualization cutoff
    are skipped.

    Output:
    -------
      pos_vecs : list[np.ndarray]
        Heliocentric ecliptic positions [AU].
    """
    num_points  = num_points if num_points is not None else self.settings.elements_num_points
    max_anomaly = 0.75 * np.pi if elements.family.is_open else np.pi

    rot_mat = FrameConverter.orbital_to_ecliptic_matrix(
      inc  = elements.i,
      argp = elements.argument_of_periapsis,
      raan = elements.ascending_node,
    )

    pos_vecs = []
    for ta in np.linspace(-max_anomaly, max_anomaly, num_points + 1):
      denominator = 1.0 + elements.e * np.cos(ta)
      if denominator <= 0.0:
        continue
      pos_mag = OrbitConverter.conic_radius(elements.q, elements.e, ta)
      if pos_mag > self.settings.visualization_cutoff_au:
        continue
      pos_vecs.append(rot_mat @ (pos_mag * np.array([np.cos(ta), np.sin(ta), 0.0])))

    return pos_vecs

  # ---------------------------------------------------------------------------
  # Sky positions and metadata
  # ---------------------------------------------------------------------------

  def sky_position(
    self,
    target : Union[OrbitalElements, StateVector, np.ndarray],
    date   : datetime,
  ) -> Optional[SkyPosition]:
    """
    Geocentric RA/Dec of an object.

    Input:
    ------
      target : OrbitalElements | StateVector | np.ndarray
        Elements (solved at date), a state, or a heliocentric ecliptic position [AU].
      date : datetime
        UTC date, used for the Earth position (and the Kepler solution).

    Output:
    -------
      sky : SkyPosition | None
        None when elements carry no perihelion time.

    Raises:
    -------
      ValueError
        If the generator has no ephemeris provider for the Earth position.
    """
    if self.ephemeris is None:
      raise ValueError("Sky positions require an ephemeris provider for the Earth position.")

    if isinstance(target, OrbitalElements):
      helio_pos_vec = OrbitConverter.position_at(target, date, self.constants)
      if helio_pos_vec is None:
        return None
    elif isinstance(target, StateVector):
      helio_pos_vec = np.array(target.position)
    else:
      helio_pos_vec = np.asarray(target, dtype=float)

    earth_pos_vec = self.ephemeris.heliocentric_position('EARTH', date)
    geo_pos_vec   = FrameConverter.heliocentric_to_geocentric(helio_pos_vec, earth_pos_vec)
    equatorial    = FrameConverter.ecliptic_to_equatorial(geo_pos_vec, self.constants.obliquity)
    ra, dec       = FrameConverter.cartesian_to_ra_dec(equatorial)

    return SkyPosition(
      ra    = ra,
      dec   = dec,
      delta = float(np.linalg.norm(geo_pos_vec)),
      date  = date,
    )

  def metadata(
    self,
    nongrav : Optional[NonGravitationalParams] = None,
  ) -> dict:
    """
    Record describing how trajectories from this generator are computed.
    """
    acceleration = self.acceleration_model(nongrav)

    if acceleration.includes_non_gravitational_forces:
      note = 'Includes outgassing rocket effect'
    else:
      note = ('Non-gravitational parameters not yet determined. '
              'Using pure gravitational dynamics (conservative approach).')

    return {
      'integrator'                        : INTEGRATOR_NAME,
      'trail_step_days'                   : self.settings.trail_step_days,
      'projection_step_days'              : self.settings.projection_step_days,
      'output_interval_days'              : self.settings.output_interval_days,
      'includes_planetary_perturbations'  : acceleration.includes_planetary_perturbations,
      'perturbing_bodies'                 : acceleration.perturbing_bodies,
      'includes_non_gravitational_forces' : acceleration.includes_non_gravitational_forces,
      'ephemeris_source'                  : self.ephemeris.source if self.ephemeris is not None else None,
      'typical_accuracy_km'               : self.settings.typical_accuracy_km,
      'visualization_cutoff_au'           : self.settings.visualization_cutoff_au,
      'propagation_cutoff_au'             : self.settings.propagation_cutoff_au,
      'note'                              : note,
    }
