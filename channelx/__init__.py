# channelx/__init__.py
"""
ChannelX: Bankfull channel geometry from hydraulic model cross sections

This package extracts channel geometry from the cross sections of 1D
hydraulic submodels and summarizes it per reach of a reference river
network.

Main Functions
-------------
extract_channels : Run the full batch, one record per reach
extract_submodel : Per cross section records of a single submodel
aggregate_reaches : Reduce per cross section records to one per reach
compute_channel_geometry : Depth, top width, area and shape ratio of a profile

"""

from loguru import logger

from .config import ChannelConfig
from .config import ProfileConfig
from .config import SourceConfig
from .config import ReferenceConfig
from .core import extract_channels
from .extract import extract_submodel
from .extract import extract_transect
from .failures import Failure
from .geometry.channel import ChannelGeometry
from .geometry.channel import compute_channel_geometry
from .profile.smooth import smooth_elevations
from .reach.aggregate import aggregate_reaches

logger.disable("channelx")

__all__ = [
    # main
    "extract_channels",
    # Configuration
    "ChannelConfig",
    "ProfileConfig",
    "SourceConfig",
    "ReferenceConfig",
    # Core data structures
    "ChannelGeometry",
    "Failure",
    # Main analytical functions
    "extract_submodel",
    "extract_transect",
    "compute_channel_geometry",
    "smooth_elevations",
    "aggregate_reaches",
]

__version__ = "0.1.0"
