"""Phenopackets record models used as structured attribute payloads."""

from .records import *  # noqa: F401,F403
from .records import __all__  # noqa: F401
