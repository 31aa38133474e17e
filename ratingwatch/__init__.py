"""
ratingwatch: anomaly classification for pairwise rating interactions.

Maintains per-entity rating statistics over an append-only interaction log and
flags ratings that deviate from the issuing entity's baseline.
"""

__version__ = "0.1.0"
