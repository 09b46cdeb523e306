from pathlib import Path

import pandas as pd
from loguru import logger


def read_classification(path) -> pd.DataFrame:
    """Read a stream order / stream type lookup table from CSV or Parquet"""
    path = Path(path)
    if path.suffix.lower() in (".parquet", ".pq"):
        return pd.read_parquet(path)
    return pd.read_csv(path)


def key_text(value):
    """Text form of a reach id, an integer valued float such as 11.0 gives "11"."""
    if pd.isna(value):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return str(value)
    if number.is_integer():
        return str(int(number))
    return str(value)


def join_stream_classification(reaches, table=None, key="id"):
    """
    Left join stream classification attributes onto the reach table.

    Parameters
    ----------
    reaches : gpd.GeoDataFrame
        Reach records with a flowpath_id column
    table : str, Path or pd.DataFrame, optional
        Lookup table keyed by reach id. Nothing is joined when None
    key : str, default="id"
        Reach id column of the lookup table

    Returns
    -------
    gpd.GeoDataFrame
    """
    if table is None:
        return reaches

    if not isinstance(table, pd.DataFrame):
        table = read_classification(table)
    if key not in table.columns:
        raise ValueError(f"classification table has no {key!r} column")

    table = table.drop_duplicates(subset=key)
    attributes = [col for col in table.columns if col != key and col not in reaches.columns]
    if table[key].dtype != reaches["flowpath_id"].dtype:
        table = table.assign(**{key: table[key].map(key_text)})
        reaches = reaches.assign(flowpath_id=reaches["flowpath_id"].map(key_text))

    joined = reaches.merge(
        table[[key] + attributes], how="left", left_on="flowpath_id", right_on=key
    )
    if key != "flowpath_id" and key not in reaches.columns:
        joined = joined.drop(columns=key)

    matched = joined[attributes].notna().any(axis=1).sum() if attributes else 0
    logger.debug(f"Stream classification matched {matched} of {len(joined)} reaches")
    return joined
