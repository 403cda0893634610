"""Initialize database for Kindred"""
import argparse

from dating_backend import initialize_database


def main(argv=None):
    parser = argparse.ArgumentParser(description='Create Kindred tables and the admin account')
    parser.add_argument('--seed', action='store_true', help='also create demo users')
    args = parser.parse_args(argv)

    print("Creating database tables (preserving existing data)...")
    initialize_database(seed_demo=args.seed)
    print("Database initialization complete")


if __name__ == '__main__':
    main()
