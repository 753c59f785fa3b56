"""
Vector Helpers
==============

Small 3-vector helpers shared by the force model and the frame conversions.
"""
import numpy as np


def magnitude(
  vec : np.ndarray,
) -> float:
  """
  Euclidean norm of a vector.
  """
  return float(np.linalg.norm(vec))


def unit_vector(
  vec : np.ndarray,
  eps : float = 1e-15,
) -> np.ndarray:
  """
  Unit vector along vec.

  Input:
  ------
    vec : np.ndarray
      Input vector.
    eps : float
      Magnitude below which vec is treated as the zero vector.

  Output:
  -------
    vec_dir : np.ndarray
      Unit vector, or the zero vector if vec has (near) zero magnitude.
  """
  vec     = np.asarray(vec, dtype=float)
  vec_mag = np.linalg.norm(vec)
  if vec_mag < eps:
    return np.zeros_like(vec)
  return vec / vec_mag


def cross(
  vec_a : np.ndarray,
  vec_b : np.ndarray,
) -> np.ndarray:
  return np.cross(np.asarray(vec_a, dtype=float), np.asarray(vec_b, dtype=float))
