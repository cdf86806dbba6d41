#!/usr/bin/env python3
"""
Local launcher for the post manager

    python app_launcher.py                  development server on 127.0.0.1:8080
    python app_launcher.py --check-config   build the app and open one database connection
    python app_launcher.py --init-db        create the posts table without migrations

Deployments serve ``wsgi:app`` instead, e.g. ``gunicorn -w 4 wsgi:app``.
"""
import argparse
import logging
import os
import sys

from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

from config import get_config
from post_manager import create_app, create_tables, db

logger = logging.getLogger('app_launcher')

ENVIRONMENTS = ('development', 'testing', 'production')


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Run the post manager locally')
    parser.add_argument('--env', choices=ENVIRONMENTS,
                        default=os.environ.get('FLASK_ENV', 'development'))
    parser.add_argument('--host', default=os.environ.get('FLASK_HOST', '127.0.0.1'))
    parser.add_argument('--port', type=int, default=int(os.environ.get('FLASK_PORT', 8080)))
    action = parser.add_mutually_exclusive_group()
    action.add_argument('--check-config', action='store_true',
                        help='verify settings and database access, then exit')
    action.add_argument('--init-db', action='store_true',
                        help='create tables with create_all, then exit')
    return parser.parse_args(argv)


def check_database(app) -> bool:
    """Open and close one connection on the configured database"""
    with app.app_context():
        url = db.engine.url.render_as_string(hide_password=True)
        try:
            with db.engine.connect():
                pass
        except SQLAlchemyError as e:
            logger.error(f"Cannot connect to {url}: {e}")
            return False
    logger.info(f"Database reachable at {url}")
    return True


def main(argv=None) -> int:
    load_dotenv(os.environ.get('ENV_PATH', '.env'))
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')
    args = parse_args(argv)

    try:
        app = create_app(config_class=get_config(args.env))
    except ValueError as e:
        logger.error(f"Invalid {args.env} configuration: {e}")
        return 1

    if args.check_config:
        return 0 if check_database(app) else 1
    if args.init_db:
        create_tables(app)
        return 0

    app.run(host=args.host, port=args.port, debug=app.debug, use_reloader=app.debug)
    return 0


if __name__ == '__main__':
    sys.exit(main())
