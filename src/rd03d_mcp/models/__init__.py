"""Data models for targets and frame statistics."""

from .target import Target
from .stats import Statistics
