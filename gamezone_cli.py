#!/usr/bin/env python3
"""
GameZone - browse the game catalog, keep favourites, and post reviews.

All account, favourite and review data lives in a local data directory that
several terminals can share; ``watch`` shows review changes made from other
terminals as they happen.
"""

import argparse
import asyncio
import logging
import sys
from typing import Dict, Iterable, List, Optional

from colorama import init, Fore, Style

from catalog_client import RawgCatalogClient
from gamezone.context import GameZoneContext
from gamezone.exceptions import ConfigError, GameZoneError
from gamezone.models import ReviewRecord
from gamezone.repositories import ReviewRepository
from gamezone.services import sort_newest_first
from gamezone.settings import load_settings

# Initialize colorama for cross-platform colored terminal output
init(autoreset=True)


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def setup_logging(level: str = 'WARNING') -> logging.Logger:
    """Configure the root GameZone logger.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to WARNING so normal use is quiet.

    Returns:
        Configured logger instance.
    """
    numeric = getattr(logging, level.upper(), logging.WARNING)
    logger = logging.getLogger('gamezone')
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('[%(levelname)s] %(name)s: %(message)s'))
        logger.addHandler(handler)
    logger.setLevel(numeric)
    return logger


logger = logging.getLogger('gamezone.cli')


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------

def _stars(rating: int) -> str:
    return '★' * rating + '☆' * (5 - rating)


def print_reviews(reviews: Iterable[ReviewRecord], show_item: bool = False) -> None:
    reviews = list(reviews)
    if not reviews:
        print(f"{Fore.YELLOW}No reviews yet.")
        return
    for review in reviews:
        subject = review.item_name if show_item else review.author_name
        print(f"{Fore.YELLOW}{_stars(review.rating)} {Fore.CYAN}{subject}"
              f" {Style.DIM}({review.id}, {review.created_at[:10]})")
        if review.comment:
            print(f"    {review.comment}")


def print_games(games: List[Dict]) -> None:
    if not games:
        print(f"{Fore.YELLOW}No games found.")
        return
    for game in games:
        genres = ', '.join(g.get('name', '') for g in game.get('genres') or [])
        print(f"{Fore.CYAN}{game.get('id'):>7}  {Fore.WHITE}{game.get('name', 'Unknown')}"
              f" {Style.DIM}({game.get('released') or 'n/a'}; rating {game.get('rating', 0)}"
              f"{'; ' + genres if genres else ''})")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

async def _signed_in(ctx: GameZoneContext):
    user = await ctx.auth.restore()
    if user is None:
        raise GameZoneError("Not signed in. Use 'login' or 'signup' first.")
    return user


async def cmd_signup(ctx, catalog, args) -> int:
    user = await ctx.auth.signup(args.username, args.email, args.password)
    print(f"{Fore.GREEN}Welcome, {user.username}! You are signed in.")
    return 0


async def cmd_login(ctx, catalog, args) -> int:
    user = await ctx.auth.login(args.email, args.password)
    print(f"{Fore.GREEN}Signed in as {user.username}.")
    return 0


async def cmd_sso(ctx, catalog, args) -> int:
    user = await ctx.auth.login_with_sso()
    print(f"{Fore.GREEN}Signed in as {user.username} via single sign-on.")
    return 0


async def cmd_logout(ctx, catalog, args) -> int:
    ctx.auth.logout()
    print(f"{Fore.GREEN}Signed out.")
    return 0


async def cmd_whoami(ctx, catalog, args) -> int:
    user = await ctx.auth.restore()
    if user is None:
        print(f"{Fore.YELLOW}Not signed in.")
        return 1
    print(f"{Fore.CYAN}{user.username} {Style.DIM}<{user.email}> ({user.id})")
    print(f"Favourites: {', '.join(str(i) for i in sorted(ctx.auth.favorites)) or 'none'}")
    return 0


async def cmd_fav(ctx, catalog, args) -> int:
    user = await _signed_in(ctx)
    if args.fav_command == 'add':
        favorites = await ctx.favorites_service.add(user.id, args.item_id)
    elif args.fav_command == 'remove':
        favorites = await ctx.favorites_service.remove(user.id, args.item_id)
    elif args.fav_command == 'games':
        print_games(await ctx.favorites_service.favorite_games(user.id, catalog))
        return 0
    else:
        favorites = await ctx.favorites_service.list(user.id)
    print(f"{Fore.CYAN}Favourites: {', '.join(str(i) for i in sorted(favorites)) or 'none'}")
    return 0


async def cmd_review(ctx, catalog, args) -> int:
    sub = args.review_command
    if sub == 'list':
        print_reviews(sort_newest_first(await ctx.review_service.list_by_item(args.item_id)))
        return 0
    if sub == 'by':
        print_reviews(sort_newest_first(await ctx.review_service.list_by_author(args.author_id)),
                      show_item=True)
        return 0

    user = await _signed_in(ctx)
    if sub == 'mine':
        print_reviews(sort_newest_first(await ctx.review_service.list_by_author(user.id)),
                      show_item=True)
        return 0
    if sub == 'post':
        name = args.name
        if not name:
            loop = asyncio.get_running_loop()
            details = await loop.run_in_executor(None, catalog.get_game_details, args.item_id)
            name = (details or {}).get('name') or f"Game {args.item_id}"
        board = ctx.review_board(args.item_id, name)
        await board.refresh()
        review = await board.submit(args.rating, args.comment)
        print(f"{Fore.GREEN}Posted review {review.id} for {review.item_name}.")
        return 0

    existing = await ctx.review_service.get(args.review_id)
    board = ctx.review_board(existing.item_id, existing.item_name)
    await board.refresh()
    if sub == 'edit':
        current = await board.begin_edit(args.review_id)
        comment = current.comment if args.comment is None else args.comment
        review = await board.submit(args.rating, comment)
        print(f"{Fore.GREEN}Updated review {review.id}.")
    else:
        await board.delete(args.review_id)
        print(f"{Fore.GREEN}Deleted review {args.review_id}.")
    return 0


async def cmd_search(ctx, catalog, args) -> int:
    print_games(catalog.search(args.query, genre=args.genre,
                               platform=args.platform, year=args.year))
    return 0


async def cmd_popular(ctx, catalog, args) -> int:
    print_games(catalog.get_popular())
    return 0


async def cmd_trending(ctx, catalog, args) -> int:
    print_games(catalog.get_trending())
    return 0


async def cmd_watch(ctx, catalog, args) -> int:
    """Print an item's reviews, then reprint whenever another context changes them."""
    loop = asyncio.get_running_loop()
    board = ctx.review_board(args.item_id, '', loop=loop)

    async def show(event=None) -> None:
        reviews = await board.refresh()
        if event is not None:
            print(f"{Fore.MAGENTA}-- reviews changed ({event.source}) --")
        print_reviews(reviews)

    notifier = ctx.notifier(ReviewRepository.KEY, show, loop=loop)
    watcher = ctx.watcher(args.interval)
    await show()
    notifier.start()
    watcher.start()
    try:
        if args.duration:
            await asyncio.sleep(args.duration)
        else:
            while True:
                await asyncio.sleep(3600)
    finally:
        watcher.stop()
        notifier.stop()
        board.close()
    return 0


COMMANDS = {
    'signup': cmd_signup,
    'login': cmd_login,
    'sso': cmd_sso,
    'logout': cmd_logout,
    'whoami': cmd_whoami,
    'fav': cmd_fav,
    'review': cmd_review,
    'search': cmd_search,
    'popular': cmd_popular,
    'trending': cmd_trending,
    'watch': cmd_watch,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='GameZone - game catalog, favourites and reviews',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python3 gamezone_cli.py signup Nova nova@x.com secret1
  python3 gamezone_cli.py fav add 3498
  python3 gamezone_cli.py review post 3498 5 --comment "Still great"
  python3 gamezone_cli.py watch 3498          # live updates from other terminals
        """
    )
    parser.add_argument('--config', '-c', default=None,
                        help='Path to a JSON settings file')
    parser.add_argument('--data-dir', default=None,
                        help='Data directory shared by all GameZone contexts')
    parser.add_argument('--log-level', default=None,
                        help='DEBUG, INFO, WARNING (default), ERROR')

    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('signup', help='Create an account and sign in')
    p.add_argument('username')
    p.add_argument('email')
    p.add_argument('password')

    p = sub.add_parser('login', help='Sign in with email and password')
    p.add_argument('email')
    p.add_argument('password')

    sub.add_parser('sso', help='Sign in with the single sign-on demo account')
    sub.add_parser('logout', help='Sign out')
    sub.add_parser('whoami', help='Show the signed-in user')

    p = sub.add_parser('fav', help='Manage favourites')
    fav = p.add_subparsers(dest='fav_command', required=True)
    fav.add_parser('list', help='List favourite item ids')
    fav.add_parser('games', help='List favourites with catalog details')
    for name in ('add', 'remove'):
        f = fav.add_parser(name)
        f.add_argument('item_id', type=int)

    p = sub.add_parser('review', help='Read and write reviews')
    rev = p.add_subparsers(dest='review_command', required=True)
    r = rev.add_parser('list', help='Reviews for a game')
    r.add_argument('item_id', type=int)
    r = rev.add_parser('by', help='Reviews written by a user id')
    r.add_argument('author_id')
    rev.add_parser('mine', help='Your reviews')
    r = rev.add_parser('post', help='Review a game')
    r.add_argument('item_id', type=int)
    r.add_argument('rating', type=int)
    r.add_argument('--comment', default='')
    r.add_argument('--name', default=None, help='Game name (looked up if omitted)')
    r = rev.add_parser('edit', help='Change one of your reviews')
    r.add_argument('review_id')
    r.add_argument('rating', type=int)
    r.add_argument('--comment', default=None,
                   help='New comment (keeps the current one if omitted)')
    r = rev.add_parser('delete', help='Delete one of your reviews')
    r.add_argument('review_id')

    p = sub.add_parser('search', help='Search the catalog')
    p.add_argument('query', nargs='?', default='')
    p.add_argument('--genre')
    p.add_argument('--platform')
    p.add_argument('--year')

    sub.add_parser('popular', help='Top-rated games')
    sub.add_parser('trending', help='Popular releases from the past year')

    p = sub.add_parser('watch', help='Follow a game\'s reviews live')
    p.add_argument('item_id', type=int)
    p.add_argument('--interval', type=float, default=None,
                   help='Seconds between checks for changes from other processes')
    p.add_argument('--duration', type=float, default=None,
                   help='Stop after this many seconds (default: run until Ctrl-C)')
    return parser


async def run(args, settings: Dict) -> int:
    ctx = GameZoneContext.from_settings(settings)
    logger.debug("Running %s in context %s", args.command, ctx.context_id)
    catalog_cfg = settings.get('catalog', {})
    catalog = RawgCatalogClient(catalog_cfg.get('api_key', ''),
                                base_url=catalog_cfg.get('base_url'),
                                timeout=catalog_cfg.get('timeout', 10))
    return await COMMANDS[args.command](ctx, catalog, args)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        print(f"{Fore.RED}Error: {e}")
        return 1
    if args.data_dir:
        settings['data_dir'] = args.data_dir
    setup_logging(args.log_level or settings.get('log_level', 'WARNING'))

    try:
        return asyncio.run(run(args, settings))
    except GameZoneError as e:
        print(f"{Fore.RED}{e}")
        return 1
    except KeyboardInterrupt:
        print(f"\n{Fore.YELLOW}Interrupted.")
        return 130


if __name__ == '__main__':
    sys.exit(main())
