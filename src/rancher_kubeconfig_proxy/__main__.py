"""Entry point for rancher-kubeconfig-proxy."""

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from rancher_kubeconfig_proxy import __version__
from rancher_kubeconfig_proxy.config import LogLevel, ProxyConfig
from rancher_kubeconfig_proxy.utils.errors import (
    ConfigurationError,
    EncodingError,
    FetchCancelledError,
    FetchError,
)

PROG = "rancher-kubeconfig-proxy"

logger = logging.getLogger(__name__)


def setup_logging(level: LogLevel) -> None:
    """Configure logging for the CLI."""
    logging.basicConfig(
        level=level.value,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog=PROG,
        description=(
            "Generate a merged kubeconfig for all downstream clusters "
            "managed by a Rancher instance"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    # Connection options
    parser.add_argument("--url", default=None, help="Rancher server URL (env: RANCHER_URL)")
    parser.add_argument(
        "--token",
        default=None,
        help="API token as access_key:secret_key (env: RANCHER_TOKEN)",
    )
    parser.add_argument(
        "--access-key", default=None, help="API access key (env: RANCHER_ACCESS_KEY)"
    )
    parser.add_argument(
        "--secret-key", default=None, help="API secret key (env: RANCHER_SECRET_KEY)"
    )
    parser.add_argument(
        "--insecure-skip-tls-verify",
        action="store_true",
        help="Skip TLS certificate verification (env: RANCHER_INSECURE_SKIP_TLS_VERIFY)",
    )
    parser.add_argument(
        "--ca-cert", default=None, help="Path to a CA certificate file (env: RANCHER_CA_CERT)"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-request timeout in seconds (default: 30)",
    )

    # Logging
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate", help="Generate a merged kubeconfig for all active clusters"
    )
    generate_parser.add_argument(
        "--prefix",
        default=None,
        help="Prefix for cluster, user and context names (env: RANCHER_CLUSTER_PREFIX)",
    )
    generate_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output file (default: stdout, env: RANCHER_KUBECONFIG_OUTPUT)",
    )
    generate_parser.add_argument(
        "--cluster",
        action="append",
        dest="clusters",
        default=None,
        help="Only include this cluster ID or name (repeatable)",
    )
    generate_parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Maximum concurrent kubeconfig fetches (default: 8)",
    )

    subparsers.add_parser("list", help="List clusters managed by Rancher")
    subparsers.add_parser("version", help="Print the version number")

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ProxyConfig:
    """Build config from args, falling back to environment/defaults."""
    config_kwargs: dict[str, Any] = {}

    if args.url:
        config_kwargs["url"] = args.url

    if args.token:
        config_kwargs["token"] = args.token

    if args.access_key:
        config_kwargs["access_key"] = args.access_key

    if args.secret_key:
        config_kwargs["secret_key"] = args.secret_key

    if args.insecure_skip_tls_verify:
        config_kwargs["insecure_skip_tls_verify"] = True

    if args.ca_cert:
        config_kwargs["ca_cert"] = Path(args.ca_cert)

    if args.timeout is not None:
        config_kwargs["request_timeout"] = args.timeout

    if args.log_level:
        config_kwargs["log_level"] = LogLevel(args.log_level)

    if getattr(args, "prefix", None) is not None:
        config_kwargs["cluster_prefix"] = args.prefix

    if getattr(args, "output", None):
        config_kwargs["kubeconfig_output"] = Path(args.output)

    if getattr(args, "concurrency", None) is not None:
        config_kwargs["fetch_concurrency"] = args.concurrency

    return ProxyConfig(**config_kwargs)


def write_output(text: str, output: Path | None) -> None:
    """Write the kubeconfig to a file (owner read/write only) or stdout."""
    if output is None:
        sys.stdout.write(text)
        sys.stdout.flush()
        return

    output = output.expanduser()
    output.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(output, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        # O_CREAT leaves the mode of an existing file alone
        os.fchmod(f.fileno(), 0o600)
        f.write(text)
    logger.info(f"Kubeconfig written to {output}")


def run_generate(config: ProxyConfig, args: argparse.Namespace) -> int:
    """Run the generate command."""
    from rancher_kubeconfig_proxy.service import generate_from_config

    generated = asyncio.run(generate_from_config(config, cluster_ids=args.clusters))
    result = generated.result

    for name in generated.inactive:
        logger.info(f"Skipped cluster {name}: not active")
    for warning in result.warnings:
        logger.warning(str(warning))

    if not result.merged_clusters:
        logger.error(f"No kubeconfig could be generated: {generated.summary()}")
        return 1

    write_output(generated.text, config.kubeconfig_output)
    logger.info(generated.summary())
    return 0


def run_list(config: ProxyConfig) -> int:
    """Run the list command."""
    from rancher_kubeconfig_proxy.service import list_clusters

    clusters = asyncio.run(list_clusters(config))

    rows = [("ID", "NAME", "STATE", "PROVIDER")]
    rows.extend((c.id, c.name, c.state, c.provider or "") for c in clusters)
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    for row in rows:
        print("  ".join(value.ljust(width) for value, width in zip(row, widths)).rstrip())
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.command == "version":
        print(f"{PROG} {__version__}")
        return 0

    try:
        config = build_config(args)
    except ValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(config.log_level)

    try:
        warnings = config.validate_auth_config()
        for warning in warnings:
            logger.warning(warning)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    try:
        if args.command == "list":
            return run_list(config)
        return run_generate(config, args)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
    except FetchCancelledError as e:
        logger.error(str(e))
    except FetchError as e:
        logger.error(f"Failed to reach Rancher: {e}")
    except EncodingError as e:
        logger.error(str(e))
    return 1


if __name__ == "__main__":
    sys.exit(main())
