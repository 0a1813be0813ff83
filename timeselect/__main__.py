import logging
import sys

from PySide6.QtCore import QSettings
from PySide6.QtWidgets import QApplication, QLabel, QMainWindow, QVBoxLayout, QWidget

from timeselect.models import SelectorSettings, TimeInterval
from timeselect.ui import TimeIntervalSelector
from timeselect.utils import now


class DemoWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Time Interval Selector")

        self.qs = QSettings("timeselect", "TimeIntervalSelector")
        settings = SelectorSettings.from_qsettings(self.qs)
        settings.display_minutes = 8 * 60

        today = now()
        interval = TimeInterval(
            today.replace(hour=8, minute=30, second=0, microsecond=0),
            today.replace(hour=10, minute=0, second=0, microsecond=0),
        )

        self.selector = TimeIntervalSelector()
        self.selector.apply_settings(settings)
        self.selector.set_interval(interval)

        self.summary = QLabel()
        self.selector.intervalChanged.connect(self._update_summary)
        self._update_summary(interval)

        central = QWidget()
        layout = QVBoxLayout(central)
        layout.addWidget(self.selector)
        layout.addWidget(self.summary)
        self.setCentralWidget(central)

    def _update_summary(self, interval: TimeInterval):
        fmt = "%d/%m/%Y %H:%M"
        self.summary.setText(f"{interval.start.strftime(fmt)} - {interval.end.strftime(fmt)}")

    def closeEvent(self, event):
        self.selector.settings().to_qsettings(self.qs)
        super().closeEvent(event)


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = QApplication(sys.argv)
    app.setStyle("Fusion")
    win = DemoWindow()
    win.resize(640, 90)
    win.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
