"""
CLI entry point. Usage: mapmeasure distance|area LAT,LNG LAT,LNG ... [--file points.txt]
Replays the points as clicks in a measurement session and prints the final label.
Use "--" before the points when the first latitude is negative.
"""
import argparse
import logging
import os
import sys
from pathlib import Path

from mapmeasure.core.config import ENV_LOG_LEVEL, build_measure_config, load_config
from mapmeasure.core.events import CLICK, DOUBLE_CLICK, MapEvent
from mapmeasure.core.exceptions import MapMeasureError, InvalidInput
from mapmeasure.core.logger import setup_logging
from mapmeasure.geodesy.engine import CRS_PRESETS
from mapmeasure.geodesy.units import UNIT_SYSTEMS
from mapmeasure.tools.registry import SessionRegistry
from mapmeasure.tools.renderer import LoggingRenderer

CLI_MAP_ID = "cli"


def parse_point(text: str):
    """'lat,lng' -> (lat, lng) floats."""
    parts = [p for p in text.replace(";", ",").split(",") if p.strip()]
    if len(parts) != 2:
        raise InvalidInput("expected LAT,LNG, got %r" % text)
    try:
        return float(parts[0]), float(parts[1])
    except ValueError as e:
        raise InvalidInput("expected LAT,LNG numbers, got %r" % text) from e


def read_points(path: Path) -> list:
    """One LAT,LNG per line; blank lines and # comments are skipped."""
    points = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.split("#", 1)[0].strip()
            if line:
                points.append(parse_point(line))
    return points


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mapmeasure", description="MapMeasure: distance and area of a clicked path")
    subparsers = parser.add_subparsers(dest="command", required=True)
    for mode, help_text in (("distance", "Length of the path through the points"),
                            ("area", "Area enclosed by the ring through the points")):
        sub = subparsers.add_parser(mode, help=help_text)
        sub.add_argument("points", nargs="*", help="Points as LAT,LNG")
        sub.add_argument("--file", "-f", type=str, default=None, help="Read points from file (one LAT,LNG per line)")
        sub.add_argument("--crs", type=str, choices=sorted(CRS_PRESETS), default=None,
                         help="Coordinate system (default: from config, earth)")
        sub.add_argument("--units", type=str, choices=sorted(UNIT_SYSTEMS), default=None,
                         help="Unit system (default: from config, metric)")
        sub.add_argument("--config", "-c", type=str, default=None,
                         help="Path to YAML config (default: mapmeasure/core/config/default.yaml + MAPMEASURE_CONFIG)")
        sub.add_argument("--log-level", type=str, default=None, choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                         help="Log level (default: WARNING or MAPMEASURE_LOG_LEVEL)")
    return parser


def run(args) -> str:
    """Measure per parsed args; returns the formatted result."""
    raw = dict(load_config(override_path=args.config))
    if args.crs:
        raw["crs"] = args.crs
        raw["radius"] = None
    if args.units:
        raw["unit_system"] = args.units
        raw["distance_units"] = raw["area_units"] = None
    config = build_measure_config(raw)

    points = [parse_point(p) for p in args.points]
    if args.file:
        points += read_points(Path(args.file))
    if len(points) < 2:
        raise InvalidInput("need at least two points, got %d" % len(points))

    registry = SessionRegistry(config, renderer_factory=lambda map_id: LoggingRenderer())
    registry.start_session(CLI_MAP_ID, args.command)
    for point in points:
        registry.dispatch(CLI_MAP_ID, MapEvent(CLICK, point))
    result = registry.dispatch(CLI_MAP_ID, MapEvent(DOUBLE_CLICK, points[-1]))
    if result is None:
        raise InvalidInput("need at least two distinct points")
    return result.text


def main(argv=None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    # quiet by default so stdout is just the measurement
    level = args.log_level or (None if os.environ.get(ENV_LOG_LEVEL) else logging.WARNING)
    setup_logging(level=level)

    try:
        text = run(args)
    except (MapMeasureError, OSError) as e:
        print("ERROR:", e)
        sys.exit(1)
    print(text)


if __name__ == "__main__":
    main()
