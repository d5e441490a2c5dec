"""Entry point: python -m atm"""

import sys

from .config import get_config
from .logging_config import setup_logging
from .session import build_atm


def main() -> int:
    """Run the ATM on stdin/stdout with environment configuration"""
    config = get_config()
    setup_logging(config.log_level, fmt=config.log_format, log_file=config.log_file)
    
    driver = build_atm(config)
    try:
        driver.run()
    except KeyboardInterrupt:
        driver.io.present_message("")
        driver.io.present_message("ATM interrupted. Goodbye.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
