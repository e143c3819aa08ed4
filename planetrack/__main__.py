"""
planetrack Command Line Interface

Usage:
    planetrack <command> [options]

Commands:
    track       Run plane tracking over a recorded video
    config      Write or show tracker settings

Examples:
    planetrack track walk.mp4 -out overlay -out poses
    planetrack track walk.mp4 -c settings.json --orientation 90,10,0 --show
    planetrack config --write settings.json
"""

import argparse
import json
import logging
import sys

from planetrack import __version__


logger = logging.getLogger("planetrack")


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog='planetrack',
        description='Markerless planar surface tracking',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        '-V', '--version',
        action='version',
        version=f'planetrack {__version__}',
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging',
    )
    parser.add_argument(
        '-q', '--quiet',
        action='store_true',
        help='Only log warnings and errors',
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    track_parser = subparsers.add_parser(
        'track',
        help='Run plane tracking over a recorded video',
    )
    track_parser.add_argument('input', help='Input video file')
    track_parser.add_argument(
        '-c', '--config',
        help='JSON settings file (any subset of tunables)',
    )
    track_parser.add_argument(
        '-out', '--output',
        action='append',
        dest='outputs',
        metavar='SPEC',
        help='Output specification (can be used multiple times)',
    )
    track_parser.add_argument(
        '-fs', '--first-frame',
        type=int,
        default=1,
        help='First frame to process (default: 1)',
    )
    track_parser.add_argument(
        '-fe', '--frame-end',
        type=int,
        default=None,
        help='Last frame to process (default: end of video)',
    )
    track_parser.add_argument(
        '--orientation',
        default=None,
        metavar='ALPHA,BETA,GAMMA',
        help='Fixed device orientation in degrees',
    )
    track_parser.add_argument(
        '--show',
        action='store_true',
        help='Show frames with the diagnostics overlay',
    )

    config_parser = subparsers.add_parser(
        'config',
        help='Write or show tracker settings',
    )
    config_parser.add_argument(
        '--write',
        metavar='PATH',
        help='Write default settings to PATH',
    )
    config_parser.add_argument(
        '-c', '--config',
        help='Settings file to show merged with defaults',
    )

    args = parser.parse_args(argv)
    _configure_logging(args.verbose, args.quiet)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == 'track':
        return run_track(args)
    elif args.command == 'config':
        return run_config(args)
    else:
        parser.print_help()
        return 1


def _configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.INFO
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s [%(name)s] %(message)s',
    )


def parse_orientation(value: str) -> tuple[float, float, float]:
    """Parse 'alpha,beta,gamma' in degrees."""
    parts = [p.strip() for p in value.split(',')]
    if len(parts) != 3:
        raise ValueError(f"Orientation needs three comma-separated angles: {value!r}")
    alpha, beta, gamma = (float(p) for p in parts)
    return alpha, beta, gamma


def _load_settings(path: str | None):
    from planetrack.core.config import TrackerSettings, load_settings, settings_from_env

    base = load_settings(path) if path else TrackerSettings()
    return settings_from_env(base)


def run_track(args) -> int:
    """Run plane tracking over a video file."""
    from planetrack.core.errors import PlanetrackError
    from planetrack.core.video import VideoReader
    from planetrack.outputs import parse_output_specs
    from planetrack.tracking import TrackingEngine, composite

    try:
        settings = _load_settings(args.config)
        orientation = parse_orientation(args.orientation) if args.orientation else None
        output_manager = parse_output_specs(args.outputs or [], args.input)
    except (PlanetrackError, ValueError, FileNotFoundError) as e:
        logger.error("%s", e)
        return 2

    tracked_frames = 0
    total_frames = 0

    with TrackingEngine(settings) as engine, \
            VideoReader(args.input, args.first_frame, args.frame_end) as reader:
        engine.initialize()
        engine.set_debug_visible(args.show)
        if orientation is not None:
            engine.update_orientation(*orientation)

        output_manager.initialize_all(reader.properties.to_dict())

        with output_manager:
            for frame_num, frame in reader:
                result = engine.process_frame(frame)
                total_frames += 1
                tracked_frames += int(result.is_tracking)

                output_manager.process_frame(frame_num, frame, {
                    'result': result,
                    'overlay': engine.last_overlay,
                    'confidence': engine.confidence,
                })

                if engine.debug_visible and engine.last_overlay is not None:
                    import cv2

                    cv2.imshow('planetrack', composite(frame, engine.last_overlay))
                    if cv2.waitKey(1) & 0xFF == ord('q'):
                        break

        if args.show:
            import cv2

            cv2.destroyAllWindows()

    print(f"Processed {total_frames} frames, tracking in {tracked_frames}")
    for path in output_manager.get_output_paths():
        print(f"  wrote {path}")
    return 0


def run_config(args) -> int:
    """Write default settings or print the effective settings."""
    from planetrack.core.config import TrackerSettings, save_settings
    from planetrack.core.errors import PlanetrackError

    if args.write:
        save_settings(TrackerSettings(), args.write)
        print(f"Wrote default settings to {args.write}")
        return 0

    try:
        settings = _load_settings(args.config)
    except (PlanetrackError, FileNotFoundError) as e:
        logger.error("%s", e)
        return 2

    print(json.dumps(settings.to_dict(), indent=2))
    return 0


if __name__ == '__main__':
    sys.exit(main())
