#!/usr/bin/env python3
"""
healthmon - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Connects to the control plane
3. Runs the subscription and the reconciler until shutdown

All business logic is in the modules, following black box principles.
"""

import logging
import logging.config as log_config
import signal
import sys
from typing import Tuple

import yaml
from dotenv import load_dotenv

from healthmon.config.provider import ControllerConfig, EnvConfigProvider
from healthmon.logging_config import get_logging_config
from healthmon.modules.gateway import ControlPlaneConnectionError, ControlPlaneGateway, connect
from healthmon.modules.reconciler import Reconciler, ResourceSubscription
from healthmon.modules.synthesizer import WorkloadSettings

logger = logging.getLogger("healthmon.main")


def build_controller(
    controller_config: ControllerConfig, gateway: ControlPlaneGateway
) -> Tuple[Reconciler, ResourceSubscription]:
    """Wire a reconciler and the subscription that feeds it."""
    reconciler = Reconciler(
        gateway,
        settings=WorkloadSettings(
            image=controller_config.image,
            image_pull_policy=controller_config.image_pull_policy,
        ),
        skip_existing=controller_config.skip_existing,
    )
    subscription = ResourceSubscription(
        gateway,
        sink=reconciler.submit,
        namespace=controller_config.watch_namespace,
        timeout_seconds=controller_config.watch_timeout_seconds,
        retry_seconds=controller_config.watch_retry_seconds,
    )
    return reconciler, subscription


def run(controller_config: ControllerConfig, gateway: ControlPlaneGateway) -> None:
    """Run until SIGINT or SIGTERM."""
    reconciler, subscription = build_controller(controller_config, gateway)

    def shutdown(signum, _frame):
        logger.info(f"Received signal {signum}, shutting down")
        subscription.stop()
        reconciler.stop()

    signal.signal(signal.SIGINT, shutdown)
    signal.signal(signal.SIGTERM, shutdown)

    logger.info(f"Starting healthmon controller for {controller_config.resource}")
    if controller_config.skip_existing:
        logger.info("Existing deployments are skipped on create")

    subscription.start()
    reconciler.run()
    subscription.join(timeout=5)
    logger.info("healthmon controller stopped")


def main() -> None:
    """Main entry point."""
    load_dotenv()

    try:
        controller_config = EnvConfigProvider().get_controller_config()
    except (ValueError, OSError, yaml.YAMLError) as e:
        log_config.dictConfig(get_logging_config())
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    log_config.dictConfig(get_logging_config(controller_config.log_level))

    try:
        gateway = connect(controller_config)
    except ControlPlaneConnectionError as e:
        logger.error(f"Error starting controller: {e}")
        sys.exit(1)

    try:
        run(controller_config, gateway)
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
