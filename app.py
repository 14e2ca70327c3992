import argparse
import logging
import os
import sys
from typing import List, Optional

from utils.config_manager import ConfigManager
from utils.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def configure_qt_environment() -> None:
    """
    Ensure Qt uses the correct plugin path (avoid OpenCV's bundled plugins).
    Must be called before importing modules that might load cv2/Qt.
    """
    try:
        os.environ.pop("QT_PLUGIN_PATH", None)  # remove paths injected by other libs (e.g., cv2)
        from PyQt5.QtCore import QLibraryInfo

        plugin_path = QLibraryInfo.location(QLibraryInfo.PluginsPath)
        os.environ["QT_QPA_PLATFORM_PLUGIN_PATH"] = plugin_path
        os.environ["QT_PLUGIN_PATH"] = plugin_path
    except Exception as exc:  # pragma: no cover - defensive
        logging.warning("Could not adjust Qt plugin path: %s", exc)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Detect and pair light bars in a video stream")
    p.add_argument("--config", default="config/config.yaml", help="Path to YAML config")
    p.add_argument("--source", default=None, help="Video file, camera index or stream URL")
    p.add_argument("--headless", action="store_true", help="Run without the GUI and log detections")
    p.add_argument("--max-frames", type=int, default=0, help="0 means no limit (headless only)")
    return p.parse_args(argv)


def run_headless(config: ConfigManager, max_frames: Optional[int] = None) -> int:
    from core.pipeline import LightBarPipeline
    from core.video_capture import iter_frames

    uri = config.get_value("source.uri", "")
    if not uri:
        logger.error("No video source configured (use --source or source.uri)")
        return 2

    pipeline = LightBarPipeline(config.detector_config())
    total_pairs = 0
    processed = 0
    try:
        for index, frame in iter_frames(uri, max_frames=max_frames):
            detections = pipeline.process(frame, frame_index=index)
            total_pairs += len(detections.pairs)
            processed += 1
            logger.info(
                "frame %d: candidates=%d bars=%d pairs=%d",
                index, len(detections.candidates), len(detections.bars), len(detections.pairs),
            )
    except RuntimeError as exc:
        logger.error("%s", exc)
        return 1

    logger.info("Processed %d frames, %d pairs in total", processed, total_pairs)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    config = ConfigManager(args.config)
    setup_logging(level=config.get_value("logging.level", "INFO"), log_file=config.get_value("logging.log_file", ""))
    if args.source is not None:
        config.set_value("source.uri", args.source)

    if args.headless:
        return run_headless(config, max_frames=args.max_frames or None)

    configure_qt_environment()

    from PyQt5 import QtWidgets
    from ui.main_window import MainWindow

    logging.info("Starting Light Bar Detector application")
    app = QtWidgets.QApplication(sys.argv[:1])
    window = MainWindow(config)
    window.show()
    return app.exec_()


if __name__ == "__main__":
    sys.exit(main())
