import sys
import argparse

from typing import Optional

from comet_orbit.utility.time_helper import parse_time


def parse_command_line_arguments(
  argv : Optional[list[str]] = None,
) -> argparse.Namespace:
  """
  Parse command-line arguments for the comet trajectory generator.

  Input:
  ------
    argv : list[str] | None
      Arguments to parse. Reads sys.argv when None.

  Output:
  -------
    args : argparse.Namespace
      Parsed command-line arguments.
  """
  parser = argparse.ArgumentParser(
    description     = 'Comet trajectory generator (heliocentric ecliptic J2000)',
    formatter_class = argparse.RawDescriptionHelpFormatter,
  )

  # If no arguments provided, print help and exit
  if argv is None and len(sys.argv) == 1:
    parser.print_help(sys.stderr)
    sys.exit(1)

  # Object and mode
  parser.add_argument(
    '--object',
    dest     = 'object_key',
    type     = str,
    required = True,
    help     = "Catalog key of the object (e.g. 3I_ATLAS).",
  )
  parser.add_argument(
    '--mode',
    type    = str.lower,
    choices = ['elements', 'orbit', 'trail', 'projection', 'sky'],
    default = 'elements',
    help    = "Output product (default: elements).",
  )

  # Time arguments
  parser.add_argument(
    '--date',
    type    = parse_time,
    default = None,
    help    = "Reference date in ISO format (e.g. '2025-10-29T11:33:16'). Default: perihelion time.",
  )
  parser.add_argument(
    '--days',
    type    = float,
    default = None,
    help    = "Trail/projection span, or elements-mode half-window [day].",
  )
  parser.add_argument(
    '--step',
    type    = float,
    default = None,
    help    = "RK4 step override [day].",
  )

  # Ephemeris
  parser.add_argument(
    '--ephemeris',
    dest    = 'ephemeris_source',
    type    = str.lower,
    choices = ['analytical', 'spice', 'none'],
    default = 'analytical',
    help    = "Planet ephemeris for perturbations and sky positions (default: analytical).",
  )
  parser.add_argument(
    '--spice-kernels',
    dest    = 'spice_kernels_folderpath',
    type    = str,
    default = None,
    help    = "Folder with naif0012.tls and a de*.bsp kernel. Required for --ephemeris spice.",
  )

  # Files and output
  parser.add_argument(
    '--config',
    dest    = 'config_filepath',
    type    = str,
    default = None,
    help    = "Alternative YAML object catalog.",
  )
  parser.add_argument(
    '--log',
    dest    = 'log_filepath',
    type    = str,
    default = None,
    help    = "Mirror terminal output to this log file.",
  )
  parser.add_argument(
    '--json',
    dest    = 'emit_json',
    action  = 'store_true',
    default = False,
    help    = "Print the result as JSON instead of the text summary.",
  )

  # Parse arguments
  args = parser.parse_args(argv)

  return args
