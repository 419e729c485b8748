# main.py
import argparse
import json
import logging
import sys

from logging_setup import setup_logging
from scrapers.errors import FetchError, NoRecipeFoundError
from scrapers.recipe_extractor import extract

logger = logging.getLogger(__name__)


def main(argv=None):
    """Main entry point for the recipe extractor"""
    parser = argparse.ArgumentParser(description="Extract a recipe from a web page")
    parser.add_argument('url', help='Recipe page URL')
    parser.add_argument('--debug', action='store_true',
                        help='Include the per-strategy debug report in the output')
    parser.add_argument('--output', metavar='FILE',
                        help='Write the JSON result to FILE instead of stdout')
    parser.add_argument('--log-file', action='store_true',
                        help='Also write logs to a timestamped file under LOG_DIR')

    args = parser.parse_args(argv)

    setup_logging(log_to_file=args.log_file)
    logger.info("Starting recipe extractor")

    try:
        result = extract(args.url, {'include_debug': args.debug})
    except (FetchError, NoRecipeFoundError) as e:
        logger.error(str(e))
        print(f"Error: {str(e)}", file=sys.stderr)
        return 1

    output = json.dumps(result, indent=2, ensure_ascii=False)

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write(output)
        logger.info(f"Saved recipe to {args.output}")
    else:
        print(output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
