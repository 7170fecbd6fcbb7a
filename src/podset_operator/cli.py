"""Command-line interface for the PodSet operator.

This module serves as the entrypoint for the operator.
"""

import argparse
import logging
import sys

from podset_operator import __description__, __version__
from podset_operator.config import OperatorConfig, VictimPolicy
from podset_operator.dispatcher import Dispatcher
from podset_operator.kubernetes import ClusterStore, KubernetesConnection
from podset_operator.podset.models import ReconcileKey
from podset_operator.podset.reconciler import PodSetReconciler


def setup_logging(verbose: bool = False) -> None:
    """Set up logging configuration.

    Args:
        verbose: Whether to enable verbose logging.
    """
    log_level = logging.DEBUG if verbose else logging.INFO
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(level=log_level, format=log_format, stream=sys.stdout)


def podset_key(value: str) -> ReconcileKey:
    """Parse a PodSet key given on the command line."""
    try:
        return ReconcileKey.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        args: Command-line arguments to parse. If None, sys.argv will be used.

    Returns:
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(prog="podset-operator", description=__description__)

    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    parser.add_argument("--namespace", help="Specific namespace to watch (overrides PODSET_NAMESPACE)")

    parser.add_argument("--workers", type=int, help="Number of concurrent workers (overrides PODSET_WORKERS)")

    parser.add_argument(
        "--resync-interval",
        type=int,
        help="Seconds between two full resyncs of all PodSets (overrides PODSET_RESYNC_INTERVAL)",
    )

    parser.add_argument(
        "--victim-policy",
        choices=[policy.value for policy in VictimPolicy],
        help="How pods are chosen when scaling down (overrides PODSET_VICTIM_POLICY)",
    )

    parser.add_argument(
        "--reconcile-once", action="store_true", help="Reconcile every PodSet until it converges and exit"
    )

    parser.add_argument(
        "--podset",
        dest="podsets",
        action="append",
        type=podset_key,
        metavar="NAMESPACE/NAME",
        help="With --reconcile-once, only reconcile this PodSet (can be repeated)",
    )

    parsed_args = parser.parse_args(args)
    if parsed_args.podsets and not parsed_args.reconcile_once:
        parser.error("--podset requires --reconcile-once")
    return parsed_args


def build_config(parsed_args: argparse.Namespace) -> OperatorConfig:
    """Create the configuration from the environment and apply command-line overrides.

    Raises:
        ValueError: If a value is invalid.
    """
    config = OperatorConfig.from_env()

    overrides = {}
    if parsed_args.namespace:
        overrides["namespace"] = parsed_args.namespace
    if parsed_args.workers is not None:
        overrides["workers"] = parsed_args.workers
    if parsed_args.resync_interval is not None:
        overrides["resync_interval"] = parsed_args.resync_interval
    if parsed_args.victim_policy:
        overrides["victim_policy"] = parsed_args.victim_policy

    if overrides:
        config = OperatorConfig.model_validate({**config.model_dump(), **overrides})
    return config


def main(args: list[str] | None = None) -> int:
    """Main entry point for the operator.

    Args:
        args: Command-line arguments. If None, sys.argv will be used.

    Returns:
        Exit code.
    """
    try:
        parsed_args = parse_args(args)
        setup_logging(parsed_args.verbose)
        logger = logging.getLogger(__name__)
        logger.info(f"Starting PodSet operator {__version__}")

        config = build_config(parsed_args)

        logger.info(
            f"Configuration: namespace={config.namespace or 'all'}, workers={config.workers}, "
            f"resync_interval={config.resync_interval}s, requeue_delay={config.requeue_delay}s, "
            f"victim_policy={config.victim_policy.value}, pod_image={config.pod_image}"
        )

        connection = KubernetesConnection()
        store = ClusterStore(connection, request_timeout=config.request_timeout)
        reconciler = PodSetReconciler(
            store,
            victim_policy=config.victim_policy,
            pod_image=config.pod_image,
            pod_command=config.pod_command,
        )
        dispatcher = Dispatcher(config=config, store=store, reconciler=reconciler, connection=connection)

        if parsed_args.reconcile_once:
            logger.info("Running reconciliation once")
            if dispatcher.run_once(parsed_args.podsets):
                return 1
        else:
            logger.info("Running continuous reconciliation")
            dispatcher.run()

    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Interrupted by user")
    except ValueError as e:
        logging.getLogger(__name__).error(f"Configuration error: {e}")
        return 1
    except Exception as e:
        logging.getLogger(__name__).error(f"An unexpected error occurred: {e}")
        return 1

    logging.getLogger(__name__).info("PodSet operator exiting")
    return 0


if __name__ == "__main__":
    sys.exit(main())
