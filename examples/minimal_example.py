#!/usr/bin/env python3
"""
Minimal example: run the plane tracker over a webcam or video file.

Usage:
    python minimal_example.py            # default camera
    python minimal_example.py walk.mp4   # recorded clip

Press 'r' to reset tracking, 'q' to quit.
"""

import logging
import sys

import cv2

from planetrack import TrackingEngine, TrackerSettings
from planetrack.tracking import composite


def main():
    logging.basicConfig(level=logging.INFO)

    source = sys.argv[1] if len(sys.argv) > 1 else 0
    cap = cv2.VideoCapture(source)
    if not cap.isOpened():
        print(f"Error: could not open {source}")
        return 1

    settings = TrackerSettings(max_corners=150)

    with TrackingEngine(settings) as engine:
        engine.initialize()

        while True:
            ok, frame = cap.read()
            if not ok:
                break

            result = engine.process_frame(frame)
            if result.is_tracking:
                x, y, z = result.pose.position
                print(f"\rpose x={x:+.3f} y={y:+.3f} z={z:.1f} "
                      f"confidence={engine.confidence:.2f}", end='')

            if engine.last_overlay is not None:
                cv2.imshow('planetrack', composite(frame, engine.last_overlay))
            key = cv2.waitKey(1) & 0xFF
            if key == ord('q'):
                break
            if key == ord('r'):
                engine.reset()

    cap.release()
    cv2.destroyAllWindows()
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
