"""
Comet Trajectory Generator

Description:
  Produces heliocentric ecliptic J2000 trajectories for comets on open or
  near-parabolic orbits, with 3I/ATLAS as the primary object.

  The run performs the following steps:
  1. Loads the object catalog and propagation settings (YAML).
  2. Builds a planet ephemeris (analytical mean elements, SPICE kernels, or none).
  3. Computes the requested product:
     - elements   : Kepler solution sampled around perihelion
     - orbit      : orbit shape sampled in true anomaly
     - trail      : RK4 integration backward from the reference date
     - projection : RK4 integration forward from the reference date
     - sky        : geocentric RA/Dec at the reference date
  4. Prints a summary (or JSON) together with the calculation metadata.

  State-vector modes start from the two-body state at the reference date and
  then integrate under solar gravity, planetary perturbations (when an
  ephemeris is available), and the non-gravitational model (when the catalog
  defines one).

Usage:

  Argument            Required   Description
  ------------------  --------   --------------------------------------------------
  --object            Yes        Catalog key (e.g. 3I_ATLAS)
  --mode              No         elements, orbit, trail, projection, or sky
  --date              No         Reference date (default: perihelion time)
  --days              No         Span of trail/projection, or elements half-window
  --step              No         RK4 step override [day]
  --ephemeris         No         analytical, spice, or none
  --spice-kernels     No         Kernel folder (required for --ephemeris spice)
  --config            No         Alternative YAML catalog
  --log               No         Log file
  --json              No         Print JSON instead of the text summary

  Example Commands:
    python -m comet_orbit.main --object 3I_ATLAS --mode elements

    python -m comet_orbit.main \
      --object 3I_ATLAS \
      --mode trail \
      --date 2025-10-29T11:33:16 \
      --days 60 \
      --ephemeris analytical
"""
import sys

from datetime import datetime
from pathlib  import Path
from typing   import Optional

from comet_orbit.input.cli                import parse_command_line_arguments
from comet_orbit.input.configuration      import build_config, print_configuration
from comet_orbit.model.ephemeris          import AnalyticalEphemeris, SpiceEphemeris
from comet_orbit.model.orbit_converter    import OrbitConverter
from comet_orbit.propagation.propagator   import TrajectoryGenerator
from comet_orbit.utility.logger           import start_logging, stop_logging
from comet_orbit.utility.printer          import (
  dump_json,
  print_metadata,
  print_orbit_path_summary,
  print_sky_position,
  print_trajectory_summary,
)


DEFAULT_STATE_VECTOR_DAYS = 60.0


def build_ephemeris(
  ephemeris_source         : str,
  spice_kernels_folderpath : Optional[Path] = None,
):
  """
  Create the planet ephemeris provider for a run.

  Input:
  ------
    ephemeris_source : str
      'analytical', 'spice', or 'none'.
    spice_kernels_folderpath : Path | None
      Kernel folder for 'spice'.

  Output:
  -------
    ephemeris : EphemerisProvider | None
      None for 'none'.
  """
  if ephemeris_source == 'spice':
    return SpiceEphemeris(spice_kernels_folderpath)
  if ephemeris_source == 'analytical':
    return AnalyticalEphemeris()
  return None


def run_mode(
  generator : TrajectoryGenerator,
  config,
) -> dict:
  """
  Compute the product requested by config.mode.

  Output:
  -------
    result : dict
      - success  : bool
      - message  : str
      - mode     : str
      - object   : str
      - points   : list[TrajectoryPoint] (trajectory modes)
      - path     : list[np.ndarray]      (orbit mode)
      - sky      : SkyPosition | None    (sky mode)
      - metadata : dict
  """
  record   = config.record
  elements = record.elements
  result   = {
    'success'  : True,
    'message'  : 'Completed',
    'mode'     : config.mode,
    'object'   : config.object_key,
    'metadata' : generator.metadata(record.nongrav),
  }

  if config.mode == 'elements':
    result['points'] = generator.from_elements(
      elements       = elements,
      day_range      = config.days,
      reference_date = config.date,
    )
  elif config.mode == 'orbit':
    result['path'] = generator.orbit_path(elements)
  elif config.mode == 'sky':
    if generator.ephemeris is None:
      raise ValueError("Sky mode needs an Earth position; use --ephemeris analytical or spice")
    result['sky'] = generator.sky_position(elements, config.date)
  else:
    initial_state = OrbitConverter.state_at(elements, config.date, generator.constants)
    if initial_state is None:
      return dict(result, success=False, message=f"No perihelion time for {elements.name}; cannot build an initial state")

    days     = config.days if config.days is not None else DEFAULT_STATE_VECTOR_DAYS
    duration = -days if config.mode == 'trail' else days
    result['points'] = generator.from_state(
      state    = initial_state,
      duration = duration,
      step     = config.step,
      nongrav  = record.nongrav,
    )

  return result


def main(
  object_key               : str,
  mode                     : str                = 'elements',
  date                     : Optional[datetime] = None,
  days                     : Optional[float]    = None,
  step                     : Optional[float]    = None,
  ephemeris_source         : str                = 'analytical',
  spice_kernels_folderpath : Optional[str]      = None,
  config_filepath          : Optional[str]      = None,
  log_filepath             : Optional[str]      = None,
  emit_json                : bool               = False,
) -> dict:
  """
  Main function to generate a comet trajectory product.

  Input:
  ------
    object_key : str
      Catalog key of the object.
    mode : str
      'elements', 'orbit', 'trail', 'projection', or 'sky'.
    date : datetime | None
      Reference date. Defaults to the perihelion time.
    days : float | None
      Span [day] of a trail/projection, or half-window of elements mode.
    step : float | None
      RK4 step override [day].
    ephemeris_source : str
      'analytical', 'spice', or 'none'.
    spice_kernels_folderpath : str | None
      SPICE kernel folder.
    config_filepath : str | None
      Alternative YAML catalog.
    log_filepath : str | None
      Log file for the run.
    emit_json : bool
      Print JSON instead of the text summary.

  Output:
  -------
    result : dict
      Result dictionary from run_mode().
  """
  # Process inputs
  config = build_config(
    object_key               = object_key,
    mode                     = mode,
    date                     = date,
    days                     = days,
    step                     = step,
    ephemeris_source         = ephemeris_source,
    spice_kernels_folderpath = spice_kernels_folderpath,
    config_filepath          = config_filepath,
    log_filepath             = log_filepath,
  )

  # Set up logging
  logger = start_logging(config.log_filepath) if config.log_filepath is not None else None

  ephemeris = None
  try:
    if not emit_json:
      print_configuration(config)

    # Planet ephemeris and generator
    ephemeris = build_ephemeris(config.ephemeris_source, config.spice_kernels_folderpath)
    generator = TrajectoryGenerator(
      settings  = config.settings,
      ephemeris = ephemeris,
    )

    result = run_mode(generator, config)

    # Display results
    if emit_json:
      print(dump_json(result))
    else:
      if not result['success']:
        print(f"\n[ERROR] {result['message']}")
      elif config.mode == 'orbit':
        print_orbit_path_summary(result['path'])
      elif config.mode == 'sky':
        print_sky_position(result['sky'])
      else:
        print_trajectory_summary(result['points'], config.mode.capitalize(), config.date)
      print_metadata(result['metadata'])
  finally:
    # Unload SPICE kernels
    if isinstance(ephemeris, SpiceEphemeris):
      ephemeris.unload()

    # Stop logging
    stop_logging(logger)

  return result


def cli(
  argv : Optional[list[str]] = None,
) -> int:
  """
  Console entry point. Returns the process exit code.
  """
  args = parse_command_line_arguments(argv)

  try:
    result = main(
      object_key               = args.object_key,
      mode                     = args.mode,
      date                     = args.date,
      days                     = args.days,
      step                     = args.step,
      ephemeris_source         = args.ephemeris_source,
      spice_kernels_folderpath = args.spice_kernels_folderpath,
      config_filepath          = args.config_filepath,
      log_filepath             = args.log_filepath,
      emit_json                = args.emit_json,
    )
  except (ValueError, KeyError, FileNotFoundError) as error:
    print(f"[ERROR] {error}", file=sys.stderr)
    return 1

  return 0 if result['success'] else 1


if __name__ == "__main__":
  sys.exit(cli())
