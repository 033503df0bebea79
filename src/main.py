import sys
import logging
from typing import List, Optional

from config import EngineConfig
from csv_io import write_accounts
from errors import AmountOverflowError, ConfigurationError, InputError
from ledger_engine import LedgerEngine

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: ledger-replay <input.csv>", file=sys.stderr)
        return 2

    try:
        config = EngineConfig.from_env()
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=config.logging_level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    engine = LedgerEngine(config)
    try:
        accounts = engine.process_file(args[0])
    except (InputError, AmountOverflowError) as e:
        logger.error(f"Failed to process transactions: {e}")
        return 1

    write_accounts(accounts.values(), sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
