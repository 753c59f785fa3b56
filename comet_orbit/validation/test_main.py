"""
Command-Line Tests
==================

End-to-end runs through cli() and main().

Tests:
------
TestCommandLine
  - test_sanity_check_elements_json      : elements mode prints parseable JSON
  - test_sanity_check_trail_summary      : trail mode prints the text summary
  - test_sanity_check_orbit_and_sky      : orbit and sky modes succeed
  - test_sanity_check_log_file           : --log mirrors output into a file
  - test_edge_case_unknown_object        : exit code 1 for an unknown object
  - test_edge_case_malformed_catalog     : exit code 1 for an unknown non-gravitational key
  - test_edge_case_sky_without_ephemeris : exit code 1 when no Earth position is available

Usage:
------
  python -m pytest comet_orbit/validation/test_main.py -v
"""
import json

from comet_orbit.main import cli, main


class TestCommandLine:
  """Tests for the command-line entry point."""

  def test_sanity_check_elements_json(self, capsys):
    """JSON output carries points and metadata."""
    exit_code = cli(['--object', '3I_ATLAS', '--mode', 'elements', '--ephemeris', 'none', '--json'])
    output    = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert output['success'] is True
    assert output['object'] == '3I_ATLAS'
    assert len(output['points']) == 121
    assert set(output['points'][0]) >= {'date', 'x', 'y', 'z', 'distance_from_sun'}
    assert output['metadata']['includes_planetary_perturbations'] is False

  def test_sanity_check_trail_summary(self, capsys):
    """Trail mode with the analytical ephemeris prints a summary."""
    exit_code = cli(['--object', '3I_ATLAS', '--mode', 'trail', '--days', '20'])
    output    = capsys.readouterr().out

    assert exit_code == 0
    assert 'Trail Summary' in output
    assert 'Calculation Metadata' in output

  def test_sanity_check_orbit_and_sky(self):
    """Orbit and sky products are returned by main()."""
    result_orbit = main('3I_ATLAS', mode='orbit', ephemeris_source='none')
    result_sky   = main('3I_ATLAS', mode='sky', date=None, ephemeris_source='analytical')

    assert result_orbit['success'] and len(result_orbit['path']) > 0
    assert result_sky['success'] and 0.0 <= result_sky['sky'].ra < 360.0

  def test_sanity_check_log_file(self, tmp_path):
    """The log file receives the printed summary."""
    log_filepath = tmp_path / 'logs' / 'run.log'
    exit_code    = cli(['--object', 'C2025_A6_LEMMON', '--mode', 'projection', '--days', '10', '--ephemeris', 'none', '--log', str(log_filepath)])

    assert exit_code == 0
    assert 'Projection Summary' in log_filepath.read_text()

  def test_edge_case_unknown_object(self, capsys):
    """Unknown objects exit with an error message."""
    assert cli(['--object', 'NOT_A_COMET']) == 1
    assert 'not supported' in capsys.readouterr().err

  def test_edge_case_malformed_catalog(self, tmp_path, capsys):
    """An unknown non-gravitational key exits with code 1 and an error message."""
    config_filepath = tmp_path / 'catalog.yaml'
    config_filepath.write_text(
      "objects:\n"
      "  X:\n"
      "    epoch : 2026-01-01\n"
      "    e : 1.2\n"
      "    q : 1.0\n"
      "    i : 10.0\n"
      "    argument_of_periapsis : 0.0\n"
      "    ascending_node : 0.0\n"
      "    perihelion_time : 2026-01-01\n"
      "    nongrav : {a1: 0.0, a2: 0.0, a3: 0.0, alpha: 1.0}\n"
    )

    assert cli(['--object', 'X', '--config', str(config_filepath), '--json']) == 1
    assert 'alpha' in capsys.readouterr().err

  def test_edge_case_sky_without_ephemeris(self):
    """Sky mode needs an ephemeris for the Earth position."""
    assert cli(['--object', '3I_ATLAS', '--mode', 'sky', '--ephemeris', 'none']) == 1
