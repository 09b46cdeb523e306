import argparse
import sys

from loguru import logger

from channelx.config import ChannelConfig
from channelx.core import extract_channels


def setup_logging(enable_logging, log_file):
    if enable_logging:
        logger.enable("channelx")
        if log_file:
            logger.remove()

            logger.add(log_file, level="DEBUG")
        else:
            logger.remove()
            logger.add(sys.stderr, level="DEBUG")
        logger.info("logging enabled")


def build_config(args):
    if args.param_file:
        config = ChannelConfig.from_toml(args.param_file)
    else:
        config = ChannelConfig()

    config.source.data_dir = args.data_dir
    config.output_file = args.output_file
    if args.reference_file:
        config.reference.flowpaths_file = args.reference_file
    if args.classification_file:
        config.reference.classification_file = args.classification_file
    if args.failure_log:
        config.failure_log = args.failure_log
    if args.max_workers is not None:
        config.max_workers = args.max_workers
    return config


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="channelx")
    parser.add_argument("--data_dir", type=str, required=True)
    parser.add_argument("--output_file", type=str, required=True)
    parser.add_argument("--param_file", type=str, default=None)
    parser.add_argument("--reference_file", type=str, default=None)
    parser.add_argument("--classification_file", type=str, default=None)
    parser.add_argument("--failure_log", type=str, default=None)
    parser.add_argument("--max_workers", type=int, default=None)
    parser.add_argument("--enable_logging", action="store_true")  # false if not set
    parser.add_argument("--log_file", type=str, default=None)
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    setup_logging(args.enable_logging, args.log_file)

    config = build_config(args)
    logger.debug(f"configuration:\n{config}")

    reaches, failures = extract_channels(config)
    logger.info(f"{len(reaches)} reaches written, {len(failures)} items skipped")


if __name__ == "__main__":
    main()
