"""
Export the totals report for a year as JSON, one object per month.

This is useful for feeding the AWStats numbers into another system,
e.g. a spreadsheet or a billing script.

    python scripts/export_totals.py /var/lib/awstats 2024 > totals-2024.json

"""

import argparse
import json
import logging
import pathlib

from awstats_totals.config import NOT_VIEWED_MODES, Settings
from awstats_totals.export import export_year


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)-8s - [%(name)s] %(message)s",
    )

    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("data_dir", type=pathlib.Path)
    parser.add_argument("year", type=int)
    parser.add_argument("--not-viewed", choices=NOT_VIEWED_MODES, default="sum")
    args = parser.parse_args()

    settings = Settings(data_dir=args.data_dir, not_viewed=args.not_viewed)

    print(json.dumps(export_year(settings, args.year), indent=2))
