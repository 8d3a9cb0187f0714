import argparse
import asyncio
import json
import logging
import sys

from pydantic import ValidationError

from core.config_loader import load_config
from database import database

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def run_init_db(config) -> None:
    """Create the schema without wiring scrapers or the LLM client."""
    database.configure(config.database.url, echo=config.database.echo)
    try:
        await database.init_db()
    finally:
        await database.dispose()


def build_request(config, args):
    """
    DiscoveryRequest from CLI arguments, with the limit capped like the API caps it.

    Raises:
        pydantic.ValidationError: No usable search terms, bad limit
    """
    from pipeline.stages import DiscoveryRequest

    platforms = ['instagram', 'tiktok'] if args.platforms == 'both' else [args.platforms]
    return DiscoveryRequest(
        platforms=platforms,
        search_type=args.search_type,
        search_query=args.query,
        limit=min(args.limit or config.discovery.default_limit, config.discovery.max_limit),
        street_casting_mode=args.street_casting,
    )


async def run_discovery(config, args, request) -> dict:
    """Run one discovery job to completion and return its outcome."""
    from core.app_context import AppContext

    ctx = AppContext.build(config)
    try:
        await database.init_db()
        outcome = await ctx.orchestrator.run(args.user_id, request)
    finally:
        await ctx.close()
    return outcome.to_dict()


def main(argv=None):
    parser = argparse.ArgumentParser(description="TalentScout Main Driver")
    parser.add_argument('--config', type=str, default='config.yaml', help='Path to config.yaml')
    subparsers = parser.add_subparsers(dest='command', required=True)

    subparsers.add_parser('init-db', help='Create database tables')

    discover = subparsers.add_parser('discover', help='Run a single discovery job')
    discover.add_argument('--user-id', required=True, help='Owner of the discovered candidates')
    discover.add_argument('--platforms', choices=['instagram', 'tiktok', 'both'], default='instagram')
    discover.add_argument('--search-type', choices=['hashtag', 'location', 'profile', 'followers'],
                          default='hashtag')
    discover.add_argument('--query', required=True,
                          help='Hashtags, a location, or usernames (comma or space separated)')
    discover.add_argument('--limit', type=int, default=None)
    discover.add_argument('--street-casting', action='store_true', help='Use the street-casting rubric')

    subparsers.add_parser('serve', help='Run the web API')

    args = parser.parse_args(argv)
    config = load_config(args.config)

    if args.command == 'init-db':
        asyncio.run(run_init_db(config))
    elif args.command == 'discover':
        try:
            request = build_request(config, args)
        except ValidationError as e:
            messages = "; ".join(err.get('msg', '') for err in e.errors())
            parser.error(f"invalid discovery request: {messages}")
        logger.info(f"Discovery starting: {args.platforms} / {args.search_type} / '{args.query}'")
        result = asyncio.run(run_discovery(config, args, request))
        print(json.dumps(result, indent=2))
        if not result.get('success'):
            sys.exit(1)
    elif args.command == 'serve':
        from web.backend.app import main as serve
        serve(config)


if __name__ == "__main__":
    main()
