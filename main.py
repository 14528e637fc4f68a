# main.py
import logging
import signal
import sys

from PyQt6.QtCore import QCoreApplication, QTimer

from barreplay import config
from barreplay.data.loader import load_csv, sample_bars
from barreplay.replay.controller import ReplayController
from barreplay.session import ReplaySession

log = logging.getLogger("barreplay")


def _setup_logging():
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


def main():
    _setup_logging()
    app = QCoreApplication(sys.argv)

    if config.REPLAY_CSV:
        bars = load_csv(config.REPLAY_CSV)
    else:
        bars = sample_bars(config.SAMPLE_BARS, seed=config.SAMPLE_SEED)
        log.info("Generated %d sample bars", len(bars))

    controller = ReplayController(config.REPLAY_MS_PER_BAR, config.REPLAY_WINDOW_SIZE)
    session = ReplaySession(controller)
    session.load(bars)
    session.add_study("bollinger", {"period": config.BB_PERIOD, "width": config.BB_WIDTH})

    def _on_frame(cursor: int):
        bands = {o.id: o.points[-1].value for o in session.study_outputs("bollinger") if o.points}
        visible = controller.visible_bars()
        if not visible:
            return
        last = visible[-1]
        log.info("bar %d/%d t=%d close=%.2f bb=%s", cursor, len(bars), last.time, last.close,
                 {k: round(v, 2) for k, v in bands.items()} or "-")
    session.frameChanged.connect(_on_frame)

    controller.finished.connect(app.quit)
    app.aboutToQuit.connect(session.close)

    # Ctrl+C: Python ne reçoit le signal que si la boucle Qt lui rend la main
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    wake = QTimer()
    wake.timeout.connect(lambda: None)
    wake.start(200)

    QTimer.singleShot(0, controller.start)
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
