"""pymole - Main Textual application."""

import logging
from queue import Empty, Queue

from textual import events, work
from textual.app import App, ComposeResult
from textual.widgets import Static

from pymole.config import ViewConfig
from pymole.layout import compose_view
from pymole.models import MetricsSnapshot
from pymole.monitor import SystemMonitor

logger = logging.getLogger(__name__)


class Dashboard(Static):
    """Widget showing the rendered dashboard for the latest snapshot."""

    DEFAULT_CSS = """
    Dashboard {
        height: auto;
        padding: 0 1;
    }
    """

    def __init__(self, config: ViewConfig, *args, **kwargs) -> None:
        """Initialize Dashboard."""
        super().__init__(*args, **kwargs)
        self._config = config
        self._snapshot = MetricsSnapshot.empty()
        self._error = ""
        self._frame = 0

    @property
    def snapshot(self) -> MetricsSnapshot:
        """The snapshot currently on screen."""
        return self._snapshot

    @property
    def frame(self) -> int:
        """The current animation frame."""
        return self._frame

    def update_snapshot(self, snapshot: MetricsSnapshot) -> None:
        """Show a new snapshot."""
        self._snapshot = snapshot
        self._refresh_display()

    def set_error(self, error: str) -> None:
        """Show an error in the header, or clear it with ''."""
        if error != self._error:
            self._error = error
            self._refresh_display()

    def advance(self) -> None:
        """Step the mascot animation by one frame."""
        self._frame += 1
        self._refresh_display()

    def _refresh_display(self) -> None:
        """Re-render at the current width."""
        width = self.size.width or self.app.size.width
        view = compose_view(self._snapshot, self._error, self._frame, width, self._config)
        view.no_wrap = True
        self.update(view)

    def on_resize(self, event: events.Resize) -> None:
        """Re-layout the grid for the new width."""
        self._refresh_display()


class MoleApp(App):
    """Main pymole application."""

    TITLE = "pymole"
    SUB_TITLE = "Mole Status"

    CSS = """
    Screen {
        overflow-y: auto;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "refresh", "Refresh"),
    ]

    def __init__(self, config: ViewConfig | None = None) -> None:
        """Initialize the MoleApp."""
        super().__init__()
        self._config = config or ViewConfig()
        self._update_queue: Queue[MetricsSnapshot] = Queue()
        self._monitor = SystemMonitor(
            self._update_queue,
            poll_rate=self._config.refresh_interval,
            top_n=self._config.top_processes,
        )

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield Dashboard(self._config, id="dashboard")

    def on_mount(self) -> None:
        """Start the system monitor when the app is mounted."""
        self._monitor.start()
        # Poll the queue for snapshots and step the animation
        self.set_interval(self._config.refresh_interval / 2, self._check_for_updates)
        self.set_interval(self._config.frame_interval, self._advance_frame)

    def _check_for_updates(self) -> None:
        """Check the queue for snapshots and refresh the dashboard."""
        # Drain the queue to get the most recent snapshot
        snapshot = None
        while True:
            try:
                snapshot = self._update_queue.get_nowait()
            except Empty:
                break

        dashboard = self.query_one("#dashboard", Dashboard)
        dashboard.set_error(self._monitor.last_error)
        if snapshot is not None:
            dashboard.update_snapshot(snapshot)

    def _advance_frame(self) -> None:
        """Advance the mascot animation."""
        self.query_one("#dashboard", Dashboard).advance()

    def action_refresh(self) -> None:
        """Collect a snapshot right away instead of waiting for the next poll."""
        logger.debug("Manual refresh requested")
        self._refresh_in_background()

    @work(thread=True, exclusive=True, group="refresh", exit_on_error=False)
    def _refresh_in_background(self) -> None:
        """Collect in a worker thread so the UI keeps animating."""
        self._monitor.refresh()
        self.call_from_thread(self._check_for_updates)

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._monitor.stop()
        self.exit()


def configure_logging(config: ViewConfig) -> None:
    """Send logs to the configured file, or nowhere so they never draw over the UI."""
    if config.log_file:
        logging.basicConfig(
            filename=config.log_file,
            level=config.log_level,
            format="%(asctime)s %(levelname)s %(name)s %(message)s",
        )
    else:
        logging.basicConfig(handlers=[logging.NullHandler()], level=config.log_level)


def main(argv: list[str] | None = None) -> None:
    """Entry point for pymole application."""
    config = ViewConfig.from_args(argv)
    configure_logging(config)
    app = MoleApp(config)
    app.run()


if __name__ == "__main__":
    main()
