"""
Comet Orbit
===========

Orbital propagation engine for comets on open and near-parabolic orbits,
with 3I/ATLAS as the primary object. Positions are heliocentric ecliptic
J2000 in AU, times are UTC.
"""
