import yaml

from dataclasses import dataclass
from datetime    import datetime
from pathlib     import Path
from types       import SimpleNamespace
from typing      import Optional, Union

from comet_orbit.model.state          import NonGravitationalParams, OrbitalElements
from comet_orbit.model.time_converter import ensure_utc
from comet_orbit.utility.time_helper  import parse_time


DEFAULT_CONFIG_FILEPATH = Path(__file__).parent.parent / 'data' / 'objects.yaml'


@dataclass(frozen=True)
class PropagationSettings:
  """
  Immutable propagation settings.

  Attributes:
  -----------
    trail_step_days : float
      RK4 step for backward trails [day].
    projection_step_days : float
      RK4 step for forward projections [day].
    output_interval_days : float
      Spacing of the down-sampled output [day].
    visualization_cutoff_au : float
      Output is truncated at the first point beyond this distance [AU].
    propagation_cutoff_au : float
      Integration stops beyond this distance [AU].
    nongrav_cutoff_au : float
      Non-gravitational force vanishes beyond this distance [AU].
    uncertainty_rate_backward_km : float
      Random-walk rate for trails [km/sqrt(day)].
    uncertainty_rate_forward_km : float
      Random-walk rate for projections [km/sqrt(day)].
    elements_num_points : int
      Number of dates sampled in elements mode.
    typical_accuracy_km : float
      Nominal accuracy reported in the calculation metadata [km].
    perturbing_bodies : tuple[str, ...]
      Planets included in the perturbation term.
  """
  trail_step_days              : float           = 0.25
  projection_step_days         : float           = 0.5
  output_interval_days         : float           = 2.0
  visualization_cutoff_au      : float           = 50.0
  propagation_cutoff_au        : float           = 100.0
  nongrav_cutoff_au            : float           = 10.0
  uncertainty_rate_backward_km : float           = 100.0
  uncertainty_rate_forward_km  : float           = 150.0
  elements_num_points          : int             = 120
  typical_accuracy_km          : float           = 15000.0
  perturbing_bodies            : tuple           = ('JUPITER', 'SATURN', 'EARTH')

  def __post_init__(self):
    for name in ('trail_step_days', 'projection_step_days', 'output_interval_days',
                 'visualization_cutoff_au', 'propagation_cutoff_au', 'nongrav_cutoff_au'):
      if getattr(self, name) <= 0:
        raise ValueError(f"Propagation setting '{name}' must be positive, received {getattr(self, name)}")
    if self.visualization_cutoff_au > self.propagation_cutoff_au:
      raise ValueError("visualization_cutoff_au must not exceed propagation_cutoff_au")
    if self.elements_num_points < 2:
      raise ValueError(f"elements_num_points must be at least 2, received {self.elements_num_points}")
    object.__setattr__(self, 'perturbing_bodies', tuple(body.upper() for body in self.perturbing_bodies))


@dataclass(frozen=True)
class ObjectRecord:
  """
  A catalog entry: orbital elements plus the optional non-gravitational model.
  """
  key      : str
  elements : OrbitalElements
  nongrav  : Optional[NonGravitationalParams] = None


def _to_datetime(
  value : Union[str, datetime, None],
) -> Optional[datetime]:
  if value is None:
    return None
  if isinstance(value, datetime):
    return ensure_utc(value)
  return parse_time(str(value))


def parse_nongrav(
  nongrav_data : Optional[dict],
) -> Optional[NonGravitationalParams]:
  """
  Build non-gravitational parameters from a mapping; None stays None.

  Raises:
  -------
    ValueError
      If the mapping is malformed, lacks one of a1, a2, a3, or has unknown keys.
  """
  if nongrav_data is None:
    return None
  if not isinstance(nongrav_data, dict):
    raise ValueError(f"Non-gravitational parameters must be a mapping, got {type(nongrav_data).__name__}")

  missing = [key for key in ('a1', 'a2', 'a3') if key not in nongrav_data]
  if missing:
    raise ValueError(f"Non-gravitational parameters are missing {missing}")

  unknown_keys = set(nongrav_data) - set(NonGravitationalParams.__dataclass_fields__)
  if unknown_keys:
    raise ValueError(f"Unknown non-gravitational parameters: {sorted(unknown_keys)}")

  return NonGravitationalParams(**{key: float(value) for key, value in nongrav_data.items()})


def parse_object(
  key         : str,
  object_data : dict,
) -> ObjectRecord:
  """
  Build an ObjectRecord from a catalog mapping.

  Raises:
  -------
    ValueError
      If the entry is not a mapping, or a required element is missing or invalid.
  """
  if not isinstance(object_data, dict):
    raise ValueError(f"Object '{key}' must be a mapping of orbital elements")

  required = ('epoch', 'e', 'q', 'i', 'argument_of_periapsis', 'ascending_node')
  missing  = [name for name in required if name not in object_data]
  if missing:
    raise ValueError(f"Object '{key}' is missing orbital elements {missing}")

  elements = OrbitalElements(
    name                  = str(object_data.get('name', key)),
    epoch                 = _to_datetime(object_data['epoch']),
    e                     = float(object_data['e']),
    q                     = float(object_data['q']),
    i                     = float(object_data['i']),
    argument_of_periapsis = float(object_data['argument_of_periapsis']),
    ascending_node        = float(object_data['ascending_node']),
    perihelion_time       = _to_datetime(object_data.get('perihelion_time')),
  )

  return ObjectRecord(
    key      = key,
    elements = elements,
    nongrav  = parse_nongrav(object_data.get('nongrav')),
  )


def load_configuration(
  config_filepath : Optional[Path] = None,
) -> SimpleNamespace:
  """
  Load propagation settings and the object catalog from a YAML file.

  Input:
  ------
    config_filepath : Path | None
      YAML file to load. Defaults to the packaged data/objects.yaml.

  Output:
  -------
    config : SimpleNamespace
      - config_filepath : Path
      - settings        : PropagationSettings
      - objects         : dict[str, ObjectRecord]

  Raises:
  -------
    FileNotFoundError
      If the file does not exist.
    ValueError
      If the file content is malformed.
  """
  config_filepath = Path(config_filepath) if config_filepath is not None else DEFAULT_CONFIG_FILEPATH
  if not config_filepath.exists():
    raise FileNotFoundError(f"Configuration file not found: {config_filepath}")

  with open(config_filepath, 'r') as f:
    config_data = yaml.safe_load(f) or {}

  if not isinstance(config_data, dict):
    raise ValueError(f"Configuration file {config_filepath} must contain a mapping at the top level")

  propagation_data = config_data.get('propagation') or {}
  unknown_keys     = set(propagation_data) - set(PropagationSettings.__dataclass_fields__)
  if unknown_keys:
    raise ValueError(f"Unknown propagation settings: {sorted(unknown_keys)}")
  if 'perturbing_bodies' in propagation_data:
    propagation_data = dict(propagation_data, perturbing_bodies=tuple(propagation_data['perturbing_bodies'] or ()))

  objects_data = config_data.get('objects') or {}
  objects      = {str(key): parse_object(str(key), value) for key, value in objects_data.items()}

  return SimpleNamespace(
    config_filepath = config_filepath,
    settings        = PropagationSettings(**propagation_data),
    objects         = objects,
  )


def get_object(
  config     : SimpleNamespace,
  object_key : str,
) -> ObjectRecord:
  """
  Look up a catalog object by key (case-insensitive).

  Raises:
  -------
    ValueError
      If the object is not in the catalog.
  """
  for key, record in config.objects.items():
    if key.upper() == object_key.upper():
      return record
  raise ValueError(f"Object {object_key} is not supported. Supported objects: {list(config.objects.keys())}")


def build_config(
  object_key               : str,
  mode                     : str                = 'elements',
  date                     : Optional[datetime] = None,
  days                     : Optional[float]    = None,
  step                     : Optional[float]    = None,
  ephemeris_source         : str                = 'analytical',
  spice_kernels_folderpath : Optional[Path]     = None,
  config_filepath          : Optional[Path]     = None,
  log_filepath             : Optional[Path]     = None,
) -> SimpleNamespace:
  """
  Parse, validate, and set up input parameters for a command-line run.

  Input:
  ------
    object_key : str
      Catalog key of the object (e.g. '3I_ATLAS').
    mode : str
      'elements', 'orbit', 'trail', 'projection', or 'sky'.
    date : datetime | None
      Reference date. Defaults to the object's perihelion time.
    days : float | None
      Span of a trail/projection [day], or half-span in elements mode.
    step : float | None
      RK4 step override [day].
    ephemeris_source : str
      'analytical', 'spice', or 'none'.
    spice_kernels_folderpath : Path | None
      Folder with SPICE kernels, required for ephemeris_source 'spice'.
    config_filepath : Path | None
      Alternative YAML catalog.
    log_filepath : Path | None
      Log file for the run.

  Output:
  -------
    config : SimpleNamespace
      Configuration object for main().

  Raises:
  -------
    ValueError
      For unsupported objects, modes, or inconsistent options.
  """
  mode             = mode.lower()
  ephemeris_source = ephemeris_source.lower()

  if mode not in ('elements', 'orbit', 'trail', 'projection', 'sky'):
    raise ValueError(f"Unknown mode: {mode}")
  if ephemeris_source not in ('analytical', 'spice', 'none'):
    raise ValueError(f"Unknown ephemeris source: {ephemeris_source}")
  if ephemeris_source == 'spice' and spice_kernels_folderpath is None:
    raise ValueError("--spice-kernels is required when the ephemeris source is spice")
  if days is not None and days <= 0:
    raise ValueError(f"--days must be positive, received {days}")
  if step is not None and step <= 0:
    raise ValueError(f"--step must be positive, received {step}")

  loaded = load_configuration(config_filepath)
  record = get_object(loaded, object_key)

  if date is None:
    date = record.elements.perihelion_time or record.elements.epoch

  return SimpleNamespace(
    object_key               = record.key,
    record                   = record,
    settings                 = loaded.settings,
    config_filepath          = loaded.config_filepath,
    mode                     = mode,
    date                     = ensure_utc(date),
    days                     = days,
    step                     = step,
    ephemeris_source         = ephemeris_source,
    spice_kernels_folderpath = Path(spice_kernels_folderpath) if spice_kernels_folderpath is not None else None,
    log_filepath             = Path(log_filepath) if log_filepath is not None else None,
  )


def print_configuration(
  config : SimpleNamespace,
) -> None:
  """
  Print the run configuration in a formatted table.

  Input:
  ------
    config : SimpleNamespace
      Configuration object from build_config().
  """
  elements = config.record.elements
  entries  = [
    ('object',           f"{config.object_key} ({elements.name})"),
    ('mode',             config.mode),
    ('date',             config.date.isoformat()),
    ('days',             config.days),
    ('step',             config.step),
    ('ephemeris_source', config.ephemeris_source),
    ('spice_kernels',    config.spice_kernels_folderpath),
    ('config_file',      config.config_filepath),
    ('log_file',         config.log_filepath),
  ]

  headers = ['Argument', 'Value']
  rows    = [[name, str(value) if value is not None else "None"] for name, value in entries]

  # Column widths: max of header and all values, plus spacing
  min_spacing = 4
  col_widths  = [
    max(len(headers[col_idx]), *(len(row[col_idx]) for row in rows)) + min_spacing
    for col_idx in range(len(headers))
  ]

  print("\nInput Configuration")
  print("  " + "".join(h.ljust(col_widths[i]) for i, h in enumerate(headers)))
  print("  " + "".join(("-" * (col_widths[i] - min_spacing)).ljust(col_widths[i]) for i in range(len(headers))))
  for row in rows:
    print("  " + "".join(row[col_idx].ljust(col_widths[col_idx]) for col_idx in range(len(row))))

  print("\nOrbital Elements")
  print(f"  Epoch           : {elements.epoch.isoformat()}")
  print(f"  Family          : {elements.family.value}")
  print(f"  e               : {elements.e:.8f}")
  print(f"  q               : {elements.q:.8f} AU")
  print(f"  i               : {elements.i:.8f} deg")
  print(f"  argp            : {elements.argument_of_periapsis:.8f} deg")
  print(f"  node            : {elements.ascending_node:.8f} deg")
  print(f"  Perihelion Time : {elements.perihelion_time.isoformat() if elements.perihelion_time else 'None'}")
  print(f"  Non-grav Model  : {'None' if config.record.nongrav is None else config.record.nongrav}")
