"""OpenRange — application entry point.

Boots the FastAPI internal server and provides the CLI entry point for
printing a report from a CSV of bars or serving the API.
"""

import logging

from fastapi import FastAPI

from openrange.api.routers import router

app = FastAPI(title="OpenRange Internal API", version="0.1.0")
app.include_router(router)

logger = logging.getLogger("openrange")


@app.get("/health")
async def health():
    return {"status": "ok"}


# ── CLI ──────────────────────────────────────────────────────────────────


def _run_cli(argv: list[str] | None = None) -> int:
    """Parse CLI arguments and dispatch to the requested command."""
    import argparse

    from openrange.config import load_config

    parser = argparse.ArgumentParser(description="OpenRange opening-range level analysis")
    parser.add_argument("--env", help="Path to a .env file (default: ./.env)")
    sub = parser.add_subparsers(dest="command", required=True)

    report = sub.add_parser("report", help="Analyse a CSV of bars and print a report")
    report.add_argument("--csv", required=True, help="CSV with time,open,high,low,close[,volume]")
    report.add_argument("--tz", help="IANA timezone (default: OPENRANGE_TIMEZONE)")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, help="Port (default: API_PORT)")

    args = parser.parse_args(argv)
    config = load_config(env_path=args.env)

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.command == "report":
        from openrange.cli.report import print_report
        from openrange.data.loader import load_bars_csv
        from openrange.pipeline import run_analysis

        bars = load_bars_csv(args.csv)
        result = run_analysis(bars, args.tz or config.timezone, config.analysis)
        print_report(result)
        return 0

    import uvicorn

    from openrange.api.routers import configure_routers

    configure_routers(config)
    port = args.port or config.api_port
    logger.info("Starting OpenRange API on %s:%d", args.host, port)
    uvicorn.run(app, host=args.host, port=port, log_level=config.log_level.lower())
    return 0


if __name__ == "__main__":
    raise SystemExit(_run_cli())
