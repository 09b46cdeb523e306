"""Core workflow for bankfull channel geometry extraction."""

import time
from concurrent.futures import ProcessPoolExecutor
from concurrent.futures import as_completed
from pathlib import Path
from typing import List, Tuple

import geopandas as gpd
import pandas as pd
from loguru import logger

from channelx.config import ChannelConfig
from channelx.extract import SubmodelResult
from channelx.extract import empty_records
from channelx.extract import extract_submodel
from channelx.failures import Failure
from channelx.failures import write_failure_log
from channelx.io.submodel import find_submodels
from channelx.io.submodel import submodel_name
from channelx.reach.aggregate import aggregate_reaches
from channelx.reach.aggregate import drop_mixed_units
from channelx.reach.classify import join_stream_classification


def format_time_duration(seconds):
    """
    Format seconds into a human-readable time string.
    For longer durations, shows hours and minutes; for shorter ones, shows minutes and seconds.
    """

    hours, remainder = divmod(int(seconds), 3600)
    minutes, whole_seconds = divmod(remainder, 60)

    if hours > 0:
        return f"{hours}h {minutes}m {whole_seconds}s"
    elif minutes > 0:
        return f"{minutes}m {whole_seconds}s"
    else:
        return f"{seconds:.2f}s"


def _worker_failure(path, error) -> SubmodelResult:
    model = submodel_name(path)
    logger.error(f"{model}: submodel failed: {error!r}")
    return SubmodelResult(model, None, [Failure(model, None, "worker", repr(error))])


def run_submodels(paths, config: ChannelConfig) -> List[SubmodelResult]:
    """
    Run extract_submodel over every path.

    Submodels are independent, so with config.max_workers > 1 they run in a
    process pool. An exception escaping one submodel is recorded as a
    failure of that submodel only.
    """
    results = []
    if config.max_workers <= 1:
        for path in paths:
            try:
                results.append(extract_submodel(path, config))
            except Exception as e:
                results.append(_worker_failure(path, e))
        return results

    with ProcessPoolExecutor(max_workers=config.max_workers) as executor:
        futures = {executor.submit(extract_submodel, path, config): path for path in paths}
        for future in as_completed(futures):
            try:
                results.append(future.result())
            except Exception as e:
                results.append(_worker_failure(futures[future], e))
    return results


def combine_records(results: List[SubmodelResult], crs) -> gpd.GeoDataFrame:
    frames = [r.records for r in results if r.records is not None and not r.records.empty]
    if not frames:
        return empty_records(crs)
    records = pd.concat(frames, ignore_index=True)
    return gpd.GeoDataFrame(records, geometry="geometry", crs=crs)


def write_reaches(reaches: gpd.GeoDataFrame, path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() in (".parquet", ".pq"):
        reaches.to_parquet(path, index=False)
    else:
        reaches.to_file(path)
    logger.info(f"Wrote {len(reaches)} reaches to {path}")
    return path


def extract_channels(config: ChannelConfig) -> Tuple[gpd.GeoDataFrame, List[Failure]]:
    """
    Extract one bankfull channel geometry record per reach from a directory
    of hydraulic submodels.

    Parameters
    ----------
    config : ChannelConfig
        Configuration for the workflow, config.source.data_dir is required.
        See help(ChannelConfig) for details on available parameters.

    Returns
    -------
    Tuple[gpd.GeoDataFrame, List[Failure]]
        - reaches: one row per flowpath_id with mean TW, Y and r, the
          geometry and source references of the representative cross
          section and any joined stream classification attributes
        - failures: every cross section and submodel that was skipped
    """
    if config.source.data_dir is None:
        raise ValueError("config.source.data_dir is required")

    start_time = time.time()
    logger.info("Starting channel geometry extraction")

    paths = find_submodels(config.source.data_dir, config.source.pattern)
    logger.info(f"Found {len(paths)} submodels in {config.source.data_dir}")

    extract_start_time = time.time()
    results = run_submodels(paths, config)
    extract_duration = time.time() - extract_start_time

    failures = [f for r in results for f in r.failures]
    records = combine_records(results, config.target_crs)
    logger.info(f"Extracted {len(records)} cross sections, skipped {len(failures)} items")

    logger.info("Aggregating reaches")
    records, unit_failures = drop_mixed_units(records)
    failures.extend(unit_failures)
    reaches = aggregate_reaches(records, crs=config.target_crs)
    reaches = join_stream_classification(
        reaches,
        config.reference.classification_file,
        config.reference.classification_key,
    )

    if config.output_file is not None:
        write_reaches(reaches, config.output_file)
    if config.failure_log is not None:
        write_failure_log(failures, config.failure_log)

    total_duration = time.time() - start_time
    logger.info(f"Submodel extraction time: {format_time_duration(extract_duration)}")
    logger.info(f"Total execution time: {format_time_duration(total_duration)}")
    logger.success("Channel geometry extraction completed")
    return reaches, failures
