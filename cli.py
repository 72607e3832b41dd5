import argparse
import time
import requests
from colorama import Fore
import utils
from utils import log_with_time, vlog

import dawg_io
from dawg import DAWG

REQUEST_TIMEOUT = 30


def parse_wordlist(text, upper=False):
    """
    Turn a word list into (key, value) pairs. Each non-blank line is either
    ``key`` (stored as True) or ``key<TAB>value``; integer values are kept as int.
    """
    pairs = []
    for line in text.splitlines():
        if not line.strip():
            continue
        if "\t" in line:
            key, raw = line.split("\t", 1)
            try:
                value = int(raw)
            except ValueError:
                value = raw
        else:
            key, value = line.strip(), True
        if upper:
            key = key.upper()
        pairs.append((key, value))
    return pairs


def load_wordlist(source, from_url=False, upper=False):
    t0 = time.time()
    if from_url:
        log_with_time(f"⟳ Downloading word list from {source}…")
        resp = requests.get(source, timeout=REQUEST_TIMEOUT)
        resp.raise_for_status()
        text = resp.text
    else:
        with open(source, "r", encoding="utf-8") as f:
            text = f.read()
    pairs = parse_wordlist(text, upper=upper)
    vlog(f"Word list loaded ({len(pairs)} entries)", t0)
    return pairs


def cmd_build(args):
    pairs = load_wordlist(args.source, from_url=args.url, upper=args.upper)
    d = DAWG.from_list(pairs)
    dawg_io.save(d, args.output)
    log_with_time(f"✅ {len(pairs)} keys, {d.size()} states → {args.output}", color=Fore.GREEN)
    return 0


def cmd_query(args):
    d = dawg_io.load(args.dawg)
    for key in args.keys:
        value = d.lookup(key)
        if value is None:
            print(f"{key}\t-")
        else:
            print(f"{key}\t{value}")
    return 0


def cmd_stats(args):
    d = dawg_io.load(args.dawg)
    n_keys = sum(1 for _ in d.keys())
    print(f"States: {d.size()}")
    print(f"Keys:   {n_keys}")
    return 0


def cmd_delete(args):
    d = dawg_io.load(args.dawg)
    before = d.size()
    for key in args.keys:
        d.delete(key)
    out = args.output or args.dawg
    dawg_io.save(d, out)
    log_with_time(f"States: {before} → {d.size()}, saved to {out}", color=Fore.GREEN)
    return 0


def build_parser():
    parser = argparse.ArgumentParser(description="Incremental DAWG builder")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("build", help="Build a DAWG from a word list and save it as JSON")
    p.add_argument("source", help="Word list file, or a URL with --url")
    p.add_argument("-o", "--output", required=True, help="Where to write the DAWG JSON")
    p.add_argument("--url", action="store_true", help="Treat SOURCE as a URL and download it")
    p.add_argument("--upper", action="store_true", help="Uppercase every key")
    p.set_defaults(func=cmd_build)

    p = sub.add_parser("query", help="Look up keys in a saved DAWG")
    p.add_argument("dawg", help="DAWG JSON file")
    p.add_argument("keys", nargs="+")
    p.set_defaults(func=cmd_query)

    p = sub.add_parser("stats", help="Print state and key counts of a saved DAWG")
    p.add_argument("dawg", help="DAWG JSON file")
    p.set_defaults(func=cmd_stats)

    p = sub.add_parser("delete", help="Delete keys from a saved DAWG")
    p.add_argument("dawg", help="DAWG JSON file")
    p.add_argument("keys", nargs="+")
    p.add_argument("-o", "--output", default=None, help="Output file (default: overwrite input)")
    p.set_defaults(func=cmd_delete)
    return parser


def run_cli(argv=None):
    args = build_parser().parse_args(argv)
    utils.start_time = time.time()
    utils.VERBOSE = args.verbose
    try:
        return args.func(args)
    except FileNotFoundError as e:
        log_with_time(f"Could not find file: {e.filename}", color=Fore.RED)
    except requests.RequestException as e:
        log_with_time(f"Download failed: {e}", color=Fore.RED)
    except ValueError as e:
        log_with_time(f"Error: {e}", color=Fore.RED)
    return 1
