import argparse
import sys
from decimal import Decimal

from .view import View
from ..config.contracts import CONTRACT_ADDRESSES
from ..controllers.arbitrage_controller import ArbitrageController
from ..errors import ArbitrageError, TransactionFailed
from ..models.opportunity import Direction


class Router:
    """Parses CLI arguments and dispatches commands to controllers."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self):
        parser = argparse.ArgumentParser(description='Futarchy flash-loan arbitrage')
        parser.add_argument('--proposal', type=str, default=CONTRACT_ADDRESSES["proposal"],
                            help='Futarchy proposal address (default: FUTARCHY_PROPOSAL_ADDRESS)')

        subparsers = parser.add_subparsers(dest='command', help='Command to run', required=True)

        subparsers.add_parser('proposal', help='Show outcome tokens and pools of the proposal')
        subparsers.add_parser('prices', help='Show YES, NO and spot prices')

        evaluate_parser = subparsers.add_parser('evaluate', help='Marginal-price arbitrage check')
        evaluate_parser.add_argument('--amount', type=Decimal, default=Decimal(1),
                                     help='Borrow amount to evaluate')

        scan_parser = subparsers.add_parser('scan', help='Find, size and optionally execute an opportunity')
        scan_parser.add_argument('--execute', action='store_true', help='Send the transaction')
        scan_parser.add_argument('--paper', action='store_true',
                                 help='Execute against simulated copies of the pools instead of the contract')
        scan_parser.add_argument('--loop', action='store_true', help='Keep scanning')
        scan_parser.add_argument('--interval', type=int, help='Seconds between scans (default: SCAN_INTERVAL)')

        simulate_parser = subparsers.add_parser('simulate', help='Static-call executeArbitrage')
        simulate_parser.add_argument('direction', choices=['spot_split', 'merge_spot'])
        simulate_parser.add_argument('amount', type=Decimal, help='Amount of the borrow token')
        simulate_parser.add_argument('--min-profit', type=Decimal, default=Decimal(0))
        simulate_parser.add_argument('--tenderly', action='store_true', help='Simulate through Tenderly')

        return parser

    def dispatch(self, context, argv=None):
        """Parses arguments and calls the appropriate controller method."""
        if argv is None:
            argv = sys.argv[1:]
        args = self.parser.parse_args(argv)

        view = View(verbose=getattr(context, 'verbose', False))
        controller = ArbitrageController(context, view)

        try:
            if args.command == 'proposal':
                controller.show_proposal(args.proposal)
            elif args.command == 'prices':
                controller.show_prices(args.proposal)
            elif args.command == 'evaluate':
                controller.evaluate(args.proposal, args.amount)
            elif args.command == 'scan':
                controller.scan(args.proposal, execute=args.execute, paper=args.paper,
                                loop=args.loop, interval=args.interval)
            elif args.command == 'simulate':
                controller.simulate(args.proposal, Direction[args.direction.upper()],
                                    args.amount, args.min_profit, tenderly=args.tenderly)
        except (ArbitrageError, TransactionFailed, ValueError) as e:
            view.display_error(f"{type(e).__name__}: {e}")
            sys.exit(1)
        except KeyboardInterrupt:
            view.display_message("\nStopped.")
