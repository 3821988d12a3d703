"""CLI for handpose: ``handpose run`` and ``handpose info``."""

import argparse
import logging
import sys

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="handpose",
        description="Real-time 3-D hand pose estimation",
    )
    sub = parser.add_subparsers(dest="command")

    # handpose run
    run_p = sub.add_parser("run", help="Track a hand in a video or camera stream")
    run_p.add_argument(
        "--input", "-i",
        required=True,
        help="Input source: file path or camera index (int)",
    )
    run_p.add_argument(
        "--models-dir",
        default=None,
        help="Directory with handdetector.onnx, handskeleton.onnx, anchors.json",
    )
    run_p.add_argument(
        "--config", "-c",
        default=None,
        help="YAML configuration file",
    )
    run_p.add_argument(
        "--device",
        default=None,
        help="Runtime device (cpu, cuda, cuda:0)",
    )
    run_p.add_argument(
        "--max-frames",
        type=int,
        default=None,
        help="Stop after N processed frames",
    )
    run_p.add_argument(
        "--flip",
        action="store_true",
        help="Mirror results horizontally (for selfie cameras)",
    )
    run_p.add_argument(
        "--viz",
        choices=["text", "live", "save"],
        default="text",
        help="Visualization mode (default: text)",
    )
    run_p.add_argument(
        "-o", "--output",
        default=None,
        help="Output path for --viz=save",
    )
    run_p.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output",
    )

    # handpose info
    info_p = sub.add_parser("info", help="Show effective configuration and model paths")
    info_p.add_argument(
        "--config", "-c",
        default=None,
        help="YAML configuration file",
    )
    info_p.add_argument(
        "--models-dir",
        default=None,
        help="Directory with the model files",
    )

    return parser


def _resolve_input(input_str: str):
    """Resolve --input to a source path or camera index."""
    try:
        return int(input_str)
    except ValueError:
        return input_str


def _load_config(path):
    from handpose.config import HandPoseConfig

    if path is None:
        return HandPoseConfig()
    return HandPoseConfig.from_yaml(path)


def _format_hand(frame_id: int, hand, timings) -> str:
    timing_str = " ".join(f"{k}={v:.1f}ms" for k, v in timings.items())
    if hand is None:
        return f"  frame={frame_id} hand=none {timing_str}"
    wrist = hand.landmarks[0]
    return (
        f"  frame={frame_id} hand=1 conf={hand.confidence:.3f} "
        f"wrist=({wrist[0]:.1f},{wrist[1]:.1f},{wrist[2]:.1f}) {timing_str}"
    )


def _cmd_info(args: argparse.Namespace) -> None:
    """Handle ``handpose info``."""
    from handpose.paths import ModelFiles, get_models_dir

    config = _load_config(args.config)
    models_dir = args.models_dir or get_models_dir()

    print("Configuration:")
    for key, value in config.to_dict().items():
        print(f"  {key:24s} {value}")

    print(f"\nModels ({models_dir}):")
    for name, present in ModelFiles.in_dir(models_dir).status().items():
        print(f"  {name:24s} {'ok' if present else 'missing'}")


def _cmd_run(args: argparse.Namespace) -> None:
    """Handle ``handpose run``."""
    import cv2

    import handpose
    from handpose.errors import InferenceError
    from handpose.viz import FrameDisplay, HandOverlay, VideoSaver

    if args.viz == "save" and not args.output:
        print("--output / -o is required with --viz=save", file=sys.stderr)
        sys.exit(1)

    try:
        hand_pose = handpose.load(
            config=args.config,
            models_dir=args.models_dir,
            device=args.device,
        )
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    source = _resolve_input(args.input)
    cap = cv2.VideoCapture(source)
    if not cap.isOpened():
        hand_pose.cleanup()
        print(f"Error: cannot open input {args.input}", file=sys.stderr)
        sys.exit(1)

    overlay = HandOverlay()
    display = FrameDisplay() if args.viz == "live" else None
    saver = None
    frame_count = 0
    tracked = 0

    try:
        while args.max_frames is None or frame_count < args.max_frames:
            ok, frame = cap.read()
            if not ok:
                break

            rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            try:
                hands = hand_pose.estimate_hands(rgb, flip_horizontal=args.flip)
            except InferenceError as e:
                logger.error("Frame %d: %s", frame_count, e)
                hands = []
            frame_count += 1
            hand = hands[0] if hands else None
            tracked += hand is not None

            if args.viz == "text":
                print(_format_hand(frame_count - 1, hand, hand_pose.step_timings))
                continue

            canvas = cv2.flip(frame, 1) if args.flip else frame
            annotated = overlay.draw(canvas, hand)
            if display is not None:
                if not display.show(annotated):
                    break
            else:
                if saver is None:
                    h, w = annotated.shape[:2]
                    fps = cap.get(cv2.CAP_PROP_FPS) or 30.0
                    saver = VideoSaver(args.output, fps=fps, width=w, height=h)
                saver.write(annotated)
    finally:
        cap.release()
        if display is not None:
            display.close()
        if saver is not None:
            saver.close()
        hand_pose.cleanup()

    print(f"\nDone: {frame_count} frames, hand found in {tracked}")
    if saver is not None:
        print(f"Saved to {args.output}")


def main(argv=None):
    """Entry point for ``handpose`` CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    level = logging.DEBUG if getattr(args, "verbose", False) else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    if args.command == "info":
        _cmd_info(args)
    elif args.command == "run":
        _cmd_run(args)


if __name__ == "__main__":
    main()
