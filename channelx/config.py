import json

from dataclasses import dataclass
from dataclasses import field
from dataclasses import fields
from dataclasses import asdict

from typing import Optional

import toml


@dataclass
class ProfileConfig:
    """Parameters for Cleaning Station-Elevation Profiles

    Parameters
    ----------
    outlier_threshold : float, default=100
        Elevations above this value are treated as outliers and replaced by
        their neighbours. Elevation-unit dependent.
    sequential : bool, default=True
        Replace outliers left to right so that each replacement sees the
        already replaced neighbours. If False every replacement is computed
        from the original elevations.
    min_points : int, default=3
        Minimum number of points inside the banks for a channel
    min_relief : float, default=0.25
        Minimum elevation range inside the banks for a channel
    """

    outlier_threshold: float = 100
    sequential: bool = True
    min_points: int = 3
    min_relief: float = 0.25


@dataclass
class SourceConfig:
    """Parameters for Locating and Reading Hydraulic Submodels

    Parameters
    ----------
    data_dir : str, default=None
        Root directory searched for submodel files
    pattern : str, default="**/*.gpkg"
        Glob pattern for submodel files relative to data_dir
    xs_layer : str, default="XS"
        Name of the cross section layer
    metadata_layer : str, default="metadata"
        Name of the key/value metadata layer
    units_key : str, default="units"
        Metadata key holding the model units
    """

    data_dir: Optional[str] = None
    pattern: str = "**/*.gpkg"
    xs_layer: str = "XS"
    metadata_layer: str = "metadata"
    units_key: str = "units"


@dataclass
class ReferenceConfig:
    """Parameters for the Reference Hydrologic Network

    Parameters
    ----------
    flowpaths_file : str, default=None
        Reference flowpath dataset. If None the submodel name is used as the
        flowpath id of all its cross sections
    flowpaths_layer : str, default=None
        Layer of the flowpath dataset to read
    id_column : str, default="id"
        Flowpath identifier column in the reference dataset
    classification_file : str, default=None
        CSV or Parquet table with stream order and type per flowpath
    classification_key : str, default="id"
        Flowpath identifier column in the classification table
    """

    flowpaths_file: Optional[str] = None
    flowpaths_layer: Optional[str] = None
    id_column: str = "id"
    classification_file: Optional[str] = None
    classification_key: str = "id"


@dataclass
class ChannelConfig:
    """Complete Configuration for the Channel Geometry Extraction
    Parameters
    ----------
    profile : ProfileConfig
        Run help(ProfileConfig) for details
    source : SourceConfig
        Run help(SourceConfig) for details
    reference : ReferenceConfig
        Run help(ReferenceConfig) for details
    target_crs : str, default="EPSG:5070"
        Projected equal area CRS all geometry is moved to before any
        distance or area is computed
    max_workers : int, default=1
        Number of worker processes, submodels are processed sequentially
        when <= 1
    output_file : str, default=None
        Reach table output, .parquet or any vector format geopandas writes
    failure_log : str, default=None
        CSV file listing every skipped transect and submodel

    Examples
    --------
    >>> config = ChannelConfig()
    >>> config.source.data_dir = "submodels"
    >>> config.profile.min_relief = 0.5

    """

    profile: ProfileConfig = field(default_factory=ProfileConfig)
    source: SourceConfig = field(default_factory=SourceConfig)
    reference: ReferenceConfig = field(default_factory=ReferenceConfig)
    target_crs: str = "EPSG:5070"
    max_workers: int = 1
    output_file: Optional[str] = None
    failure_log: Optional[str] = None

    @classmethod
    def from_dict(cls, params):
        """Build a config from a (possibly partial) nested dictionary"""
        nested = {
            "profile": ProfileConfig,
            "source": SourceConfig,
            "reference": ReferenceConfig,
        }
        known = {f.name for f in fields(cls)}
        unknown = set(params) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        kwargs = {}
        for key, value in params.items():
            if key in nested:
                sub_known = {f.name for f in fields(nested[key])}
                sub_unknown = set(value) - sub_known
                if sub_unknown:
                    raise ValueError(
                        f"Unknown keys in [{key}]: {', '.join(sorted(sub_unknown))}"
                    )
                kwargs[key] = nested[key](**value)
            else:
                kwargs[key] = value
        return cls(**kwargs)

    @classmethod
    def from_toml(cls, path):
        """Load a config from a TOML parameter file"""
        return cls.from_dict(toml.load(path))

    def to_dict(self):
        """Convert the entire config to a nested dictionary"""
        return asdict(self)

    def __str__(self) -> str:
        """Convert the config to a string"""
        return json.dumps(self.to_dict(), indent=4)
