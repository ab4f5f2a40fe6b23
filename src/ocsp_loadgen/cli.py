from __future__ import annotations

import argparse
import asyncio
import json
import logging
import uuid
from pathlib import Path
from typing import Any, Sequence

from ocsp_loadgen.config import RunConfig
from ocsp_loadgen.errors import ConfigError, LoadGenError
from ocsp_loadgen.loadgen import RunReport, StopToken, install_signal_handlers, run_load
from ocsp_loadgen.metrics import format_summary, summarize
from ocsp_loadgen.ocsp import RequestPool, build_pool, load_issuer, load_serials
from ocsp_loadgen.storage import DEFAULT_DB_PATH, LatencyStore

logger = logging.getLogger(__name__)

_FLAG_TO_FIELD = {
    "ocsp_base": "ocsp_base",
    "get_rate": "get_rate",
    "post_rate": "post_rate",
    "runtime": "duration_sec",
    "timeout": "timeout_sec",
    "seed": "seed",
    "notes": "notes",
}


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="OCSP responder load generator")
    parser.add_argument("--config", type=Path, help="JSON file with run settings")
    parser.add_argument("--ocsp-base", help="Responder base URL")
    parser.add_argument("--issuer", type=Path, help="Issuer certificate (PEM or DER)")
    parser.add_argument("--serials", type=Path, help="File with one hex serial per line")
    parser.add_argument("--get-rate", type=float, help="GET requests per second (0 disables)")
    parser.add_argument("--post-rate", type=float, help="POST requests per second (0 disables)")
    parser.add_argument("--runtime", type=float, help="Run duration in seconds")
    parser.add_argument("--timeout", type=float, help="Per-call timeout in seconds (default: none)")
    parser.add_argument("--latency-db", type=Path, help="DuckDB file for latency samples")
    parser.add_argument("--seed", type=int)
    parser.add_argument("--notes")
    parser.add_argument("--log-level", default="info")
    return parser


def _load_settings(path: Path | None) -> dict[str, Any]:
    if path is None:
        return {}
    try:
        data = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as exc:
        msg = f"cannot read config file {path}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"config file {path} must contain a JSON object"
        raise ConfigError(msg)
    return data


def _resolve(args: argparse.Namespace) -> tuple[RunConfig, Path, Path, Path]:
    settings = _load_settings(args.config)
    issuer = args.issuer or settings.pop("issuer_path", None)
    serials = args.serials or settings.pop("serials_path", None)
    latency_db = args.latency_db or settings.pop("latency_db", None) or DEFAULT_DB_PATH
    # file paths are not RunConfig fields; drop any the flags overrode
    for key in ("issuer_path", "serials_path", "latency_db"):
        settings.pop(key, None)
    for flag, name in _FLAG_TO_FIELD.items():
        value = getattr(args, flag)
        if value is not None:
            settings[name] = value
    if issuer is None or serials is None:
        raise ConfigError("both an issuer certificate and a serials file are required")
    settings.setdefault("run_id", uuid.uuid4().hex)
    return RunConfig.from_mapping(settings), Path(issuer), Path(serials), Path(latency_db)


async def _run(config: RunConfig, pool: RequestPool, store: LatencyStore) -> RunReport:
    token = StopToken()
    install_signal_handlers(token)
    return await run_load(config, pool, store, stop=token)


def main(argv: Sequence[str] | None = None) -> None:
    args = _parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config, issuer_path, serials_path, db_path = _resolve(args)
        issuer = load_issuer(issuer_path)
        try:
            serials = load_serials(serials_path)
        except OSError as exc:
            msg = f"cannot read serials file {serials_path}: {exc}"
            raise ConfigError(msg) from exc
        store = LatencyStore(db_path, config.run_id or "")
        pool = build_pool(serials, issuer)
        store.start_run(config)
    except LoadGenError as exc:
        logger.error("fatal: %s", exc)
        raise SystemExit(1) from exc

    try:
        report = asyncio.run(_run(config, pool, store))
    finally:
        store.close()
    print(format_summary(summarize(store.iter_samples())))
    reason = report.reason.value
    if report.signal_name:
        reason = f"{reason}, {report.signal_name}"
    print(f"Run complete: {report.run_id} ({reason})")


if __name__ == "__main__":
    main()
