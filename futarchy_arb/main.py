#!/usr/bin/env python3
"""
Futarchy Arbitrage - Main Entry Point
"""

import argparse
import logging
import sys

from dotenv import load_dotenv


def main(argv=None):
    """Main entry point."""
    # Load environment variables before any config module reads them
    load_dotenv()

    from futarchy_arb.cli.router import Router
    from futarchy_arb.core.context import ArbContext

    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument('--rpc', type=str, help='RPC URL for Gnosis Chain')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose output')
    bot_args, remaining_argv = parser.parse_known_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if bot_args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        context = ArbContext(rpc_url=bot_args.rpc, verbose=bot_args.verbose)
    except ValueError as e:
        print(f"❌ Invalid configuration: {e}")
        sys.exit(1)
    if not context.is_connected():
        print(f"❌ Failed to connect to {context.rpc_url}")
        sys.exit(1)

    Router().dispatch(context, remaining_argv)


if __name__ == '__main__':
    main()
