"""Storefront management CLI.

Usage:
    python src/manage.py setup-db                 # Create all tables
    python src/manage.py drop-db                  # Drop all tables
    python src/manage.py seed catalogue.json      # Load products and promo codes

The seed file holds ``{"products": [...], "discounts": [...]}`` with the
same fields as the RegisterProduct / RegisterDiscount commands.
"""

import argparse
import json
import sys


def _domain():
    from storefront.domain import storefront

    storefront.init()
    return storefront


def setup_database():
    from storefront.utils.db import setup_db

    storefront = _domain()
    print("Creating storefront database schema...")
    providers = setup_db(storefront)
    print(f"  schema ready ({', '.join(providers) or 'no SQL providers configured'}).")


def drop_database():
    from storefront.utils.db import drop_db

    storefront = _domain()
    print("Dropping storefront database schema...")
    providers = drop_db(storefront)
    print(f"  schema dropped ({', '.join(providers) or 'no SQL providers configured'}).")


def seed_catalogue(path):
    from storefront.catalogue.management import RegisterDiscount, RegisterProduct

    with open(path, encoding="utf-8") as fh:
        data = json.load(fh)

    storefront = _domain()
    with storefront.domain_context():
        for product in data.get("products", []):
            storefront.process(RegisterProduct(**product), asynchronous=False)
        for discount in data.get("discounts", []):
            storefront.process(RegisterDiscount(**discount), asynchronous=False)

    print(f"Seeded {len(data.get('products', []))} products and {len(data.get('discounts', []))} discounts.")


def main():
    parser = argparse.ArgumentParser(description="Storefront management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    seed_parser = subparsers.add_parser("seed", help="Load products and discounts from a JSON file")
    seed_parser.add_argument("path", help="Path to the seed file")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "seed":
        seed_catalogue(args.path)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
