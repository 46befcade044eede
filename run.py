import logging

from utils.logging_config import setup_logging

# Initialize centralized logging configuration
setup_logging()

from storefront import main

if __name__ == '__main__':
    logging.info("[run.py] Starting storefront client")
    main()
