"""Command-line entry point for the product gallery."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import Iterable, Sequence

from .carousel import Carousel
from .config import DEFAULT_DISPLAY_SIZE, GalleryConfig
from .grid import ProductGrid, load_products
from .images import HttpImageProbe
from .render import render_grid
from .scheduler import IdleQueue, ImageProbe, PrefetchScheduler, select_deferrer

logger = logging.getLogger("product_gallery.cli")


def _ensure_command_prefix(argv: Sequence[str], commands: Iterable[str]) -> Sequence[str]:
    if not argv:
        return argv
    first = argv[0]
    if first in commands or first.startswith("-"):
        return argv
    return ("render", *argv)


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("products", type=Path, help="JSON file holding a list of products")
    parser.add_argument(
        "--display-size",
        type=int,
        default=DEFAULT_DISPLAY_SIZE,
        help="Square pixel size of the variant shown on each card",
    )
    parser.add_argument(
        "--widths",
        type=lambda value: tuple(int(part) for part in value.split(",")),
        default=None,
        help="Comma-separated ascending breakpoint widths for srcset candidates",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Render product grids with responsive image carousels and warm their image variants.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    render_parser = subparsers.add_parser("render", help="Write the product grid as HTML")
    _add_common_arguments(render_parser)
    render_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="File to write the HTML to (default: STDOUT)",
    )

    warm_parser = subparsers.add_parser(
        "warm", help="Mount the grid and prefetch every non-displayed image over HTTP"
    )
    _add_common_arguments(warm_parser)
    warm_parser.add_argument(
        "--defer",
        choices=("idle", "delay"),
        default="idle",
        help="Run prefetches at the next idle point or after the fixed fallback delay",
    )
    warm_parser.add_argument(
        "--timeout",
        type=float,
        default=15.0,
        help="HTTP timeout in seconds for each prefetch",
    )

    argv = list(sys.argv[1:] if argv is None else argv)
    argv = list(_ensure_command_prefix(argv, subparsers.choices.keys()))
    return parser.parse_args(argv)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def _build_config(args: argparse.Namespace) -> GalleryConfig:
    overrides = {"display_size": args.display_size}
    if args.widths:
        overrides["widths"] = args.widths
    if getattr(args, "timeout", None) is not None:
        overrides["probe_timeout"] = args.timeout
    return GalleryConfig(**overrides)


class _NullProbe:
    """Probe used when rendering: prefetches are queued but never run."""

    def warm(self, request) -> None:
        return None


def build_grid(config: GalleryConfig, host: object, probe: ImageProbe) -> ProductGrid:
    scheduler = PrefetchScheduler(select_deferrer(host, config), probe, config)
    return ProductGrid(Carousel(scheduler, config))


def _run_render(args: argparse.Namespace, config: GalleryConfig) -> None:
    grid = build_grid(config, IdleQueue(), _NullProbe())
    grid.mount(load_products(args.products))
    html = render_grid(grid)
    if args.output:
        args.output.write_text(html + "\n", encoding="utf-8")
        logger.info("Saved grid HTML to %s", args.output)
    else:
        sys.stdout.write(html + "\n")
        sys.stdout.flush()


def _run_warm(args: argparse.Namespace, config: GalleryConfig) -> None:
    probe = HttpImageProbe(timeout=config.probe_timeout, user_agent=config.user_agent)
    products = load_products(args.products)
    overall_start = time.perf_counter()

    if args.defer == "idle":
        queue = IdleQueue()
        grid = build_grid(config, queue, probe)
        grid.mount(products)
        queue.run_idle()
    else:
        loop = asyncio.new_event_loop()
        try:
            grid = build_grid(config, loop, probe)
            grid.mount(products)
            # Prefetch timers were armed before this sleep, so they fire first.
            loop.run_until_complete(asyncio.sleep(config.fallback_delay))
        finally:
            loop.close()

    scheduler = grid.scheduler
    logger.info(
        "Warmed %d/%d images in %.2fs (%d failed)",
        scheduler.probes_issued - scheduler.probes_failed,
        len(scheduler.cache),
        time.perf_counter() - overall_start,
        scheduler.probes_failed,
    )


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    _configure_logging(args.verbose)
    try:
        config = _build_config(args)
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        raise SystemExit(2) from exc

    try:
        if args.command == "render":
            _run_render(args, config)
        else:
            _run_warm(args, config)
    except (OSError, ValueError) as exc:
        logger.error("Could not read products from %s: %s", args.products, exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
