#!/usr/bin/env python3
"""
Spotify setlist enricher.
- Reads a Spotify playlist or track link and fetches its tracks.
- Looks up BPM, key, duration and energy on Tunebat in paced, concurrent batches.
- Writes a CSV setlist with one row per track; missing data is marked N/A.

Credentials are read from SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET.
"""

import argparse
import asyncio
import logging
import os
import sys

import requests

from config.settings import BATCH_DELAY_SECONDS, BATCH_SIZE, DEFAULT_OUTPUT_PATH
from engine.batch import process_tracks_in_batches
from engine.fetcher import TunebatFetcher
from input.intent_router import detect_intent
from playlist.export import write_setlist_csv
from spotify.client import SpotifyClient, load_tracks
from tunebat.client import TunebatClient

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def configure_logging(verbose=False, log_file=None):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    if log_file:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.setLevel(level)
        logging.getLogger("").addHandler(handler)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def build_parser():
    parser = argparse.ArgumentParser(description="Build a CSV setlist with Tunebat BPM/key/energy data.")
    parser.add_argument("-l", "--link", required=True, help="Spotify playlist or track link")
    parser.add_argument("-o", "--output", default=DEFAULT_OUTPUT_PATH, help="CSV file to write")
    parser.add_argument("--batch-size", type=int, default=BATCH_SIZE, help="Tracks looked up concurrently per batch")
    parser.add_argument(
        "--batch-delay",
        type=float,
        default=BATCH_DELAY_SECONDS,
        help="Seconds to wait between batches",
    )
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log candidate scores")
    return parser


def run(args, spotify_client=None, search_service=None):
    """Execute one enrichment run. Returns the process exit code."""
    try:
        intent = detect_intent(args.link)
    except ValueError as exc:
        logging.error("%s", exc)
        return 1
    logging.info("Parsed %s ID: %s", intent.type.value, intent.identifier)

    spotify_client = spotify_client or SpotifyClient()
    try:
        spotify_client.authenticate()
    except (RuntimeError, requests.RequestException) as exc:
        logging.error("Failed to retrieve Spotify access token: %s", exc)
        return 1

    tracks = load_tracks(spotify_client, intent)
    if not tracks:
        logging.error("No tracks found.")
        return 1
    logging.info("Total tracks to process: %s", len(tracks))

    fetcher = TunebatFetcher(search_service or TunebatClient())
    rows = asyncio.run(
        process_tracks_in_batches(
            tracks,
            fetcher,
            batch_size=args.batch_size,
            batch_delay=args.batch_delay,
        )
    )

    output_path = write_setlist_csv(rows, args.output)
    matched = sum(1 for row in rows if row.is_available)
    logging.info(
        "CSV file '%s' generated successfully (%s matched, %s unavailable).",
        output_path,
        matched,
        len(rows) - matched,
    )
    return 0


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.batch_size < 1:
        parser.error("--batch-size must be >= 1")
    configure_logging(args.verbose, args.log_file)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
