import argparse, logging, sys
from goa_divelog.config import load_config, log_level
from goa_divelog.dump import run


def main():
    ap = argparse.ArgumentParser(description="Decode Cressi Goa dive dumps to NDJSON")
    ap.add_argument("--config", help="YAML config (defaults apply when omitted)")
    ap.add_argument("paths", nargs="+", help="dump files or directories")
    args = ap.parse_args()

    cfg = load_config(args.config)
    logging.basicConfig(
        level=log_level(cfg.logging.level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    failed = run(cfg, args.paths)
    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
