import json

from datetime import datetime
from typing   import Optional

from comet_orbit.model.state          import SkyPosition, TrajectoryPoint
from comet_orbit.model.time_converter import days_between
from comet_orbit.model.vector_helper  import magnitude
from comet_orbit.utility.time_helper  import format_day_offset, format_time_iso


def print_trajectory_summary(
  points         : list[TrajectoryPoint],
  label          : str,
  reference_date : Optional[datetime] = None,
) -> None:
  """
  Print a summary of a sampled trajectory.

  Input:
  ------
    points : list[TrajectoryPoint]
      Trajectory points in the order they were produced.
    label : str
      Heading for the summary (e.g. 'Trail').
    reference_date : datetime | None
      If given, point dates are also shown as offsets from it.
  """
  print(f"\n{label} Summary")

  if not points:
    print("  No points within the visualization cutoff.")
    return

  distances = [point.distance_from_sun for point in points]
  print(f"  Points        : {len(points)}")
  print(f"  First Date    : {format_time_iso(points[0].date)}")
  print(f"  Last Date     : {format_time_iso(points[-1].date)}")
  print(f"  Min Distance  : {min(distances):>14.8f} AU")
  print(f"  Max Distance  : {max(distances):>14.8f} AU")

  print("  Samples")
  print(f"    {'Date':<22}{'Offset':<16}{'x [AU]':>14}{'y [AU]':>14}{'z [AU]':>14}{'r [AU]':>14}{'sigma [AU]':>14}")
  for point in _sample_rows(points):
    offset      = format_day_offset(days_between(reference_date, point.date)) if reference_date else ''
    uncertainty = f"{point.uncertainty:>14.3e}" if point.uncertainty is not None else f"{'-':>14}"
    print(
      f"    {format_time_iso(point.date):<22}{offset:<16}"
      f"{point.x:>14.8f}{point.y:>14.8f}{point.z:>14.8f}{point.distance_from_sun:>14.8f}{uncertainty}"
    )


def _sample_rows(
  points   : list[TrajectoryPoint],
  max_rows : int = 10,
) -> list[TrajectoryPoint]:
  # Evenly spaced subset, always keeping the last point
  if len(points) <= max_rows:
    return points
  stride = len(points) // (max_rows - 1)
  rows   = points[::stride][:max_rows - 1]
  return rows + [points[-1]]


def print_orbit_path_summary(
  pos_vecs : list,
) -> None:
  """
  Print the extent of an orbit shape sampled in true anomaly.
  """
  print("\nOrbit Path Summary")
  if not pos_vecs:
    print("  No points within the visualization cutoff.")
    return

  distances = [magnitude(pos_vec) for pos_vec in pos_vecs]
  print(f"  Points        : {len(pos_vecs)}")
  print(f"  Min Distance  : {min(distances):>14.8f} AU")
  print(f"  Max Distance  : {max(distances):>14.8f} AU")


def print_sky_position(
  sky : Optional[SkyPosition],
) -> None:
  """
  Print a geocentric sky position.
  """
  print("\nSky Position")
  if sky is None:
    print("  Unavailable (no perihelion time).")
    return

  print(f"  Date  : {format_time_iso(sky.date)}")
  print(f"  RA    : {sky.ra:>14.8f} deg")
  print(f"  Dec   : {sky.dec:>14.8f} deg")
  print(f"  Delta : {sky.delta:>14.8f} AU")


def print_metadata(
  metadata : dict,
) -> None:
  """
  Print the calculation metadata record.
  """
  print("\nCalculation Metadata")
  width = max(len(key) for key in metadata)
  for key, value in metadata.items():
    if isinstance(value, (list, tuple)):
      value = ', '.join(str(item) for item in value) or 'None'
    print(f"  {key.ljust(width)} : {value}")


def dump_json(
  result : dict,
) -> str:
  """
  Serialize a run result to JSON.

  Trajectory points, sky positions, and numpy positions are converted to
  plain mappings and lists.
  """
  def default(obj):
    if isinstance(obj, (TrajectoryPoint, SkyPosition)):
      return obj.to_dict()
    if isinstance(obj, datetime):
      return format_time_iso(obj)
    if hasattr(obj, 'tolist'):
      return obj.tolist()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")

  return json.dumps(result, default=default, indent=2)
