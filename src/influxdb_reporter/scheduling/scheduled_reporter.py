"""Periodic driver running report cycles on a SimPy environment."""

import logging
from typing import Any, Dict, Optional

import simpy

from ..reporting import InfluxDbReporter
from ..utils.config_validator import ConfigurationError, ScheduleConfigValidator

logger = logging.getLogger(__name__)


class ScheduledReporter:
    """Runs ``reporter.report_now()`` every ``period_s`` of environment time.

    With a plain ``simpy.Environment`` the schedule advances in simulated time,
    which is what tests and simulations want. Pass a
    ``simpy.rt.RealtimeEnvironment`` to report on the wall clock.

    Cycles are run one after another from a single process, so a slow cycle
    delays the next tick rather than overlapping it.
    """

    def __init__(
        self,
        reporter: InfluxDbReporter,
        env: simpy.Environment,
        period_s: float,
        initial_delay_s: Optional[float] = None,
        report_on_stop: bool = False,
    ):
        """Initialize the schedule.

        Args:
            reporter: Reporter to drive
            env: SimPy environment providing time and the event loop
            period_s: Time between cycles, in environment seconds
            initial_delay_s: Time before the first cycle (default: one period)
            report_on_stop: Run one final cycle when stopped
        """
        if initial_delay_s is None:
            initial_delay_s = period_s
        if period_s <= 0:
            raise ValueError(f"period_s must be positive, got {period_s}")
        if initial_delay_s < 0:
            raise ValueError(f"initial_delay_s must not be negative, got {initial_delay_s}")

        self.reporter = reporter
        self.env = env
        self.period_s = period_s
        self.initial_delay_s = initial_delay_s
        self.report_on_stop = report_on_stop
        self.cycles_run = 0
        self._process: Optional[simpy.Process] = None
        self._stop_event: Optional[simpy.Event] = None

        logger.info(f"ScheduledReporter initialized (period: {period_s}s, initial delay: {initial_delay_s}s)")

    @classmethod
    def from_config(
        cls, reporter: InfluxDbReporter, env: simpy.Environment, config: Dict[str, Any]
    ) -> "ScheduledReporter":
        """Create a schedule from a ``schedule`` configuration section.

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        config = dict(config or {})
        errors = ScheduleConfigValidator.validate(config)
        if errors:
            raise ConfigurationError("; ".join(errors))

        return cls(
            reporter,
            env,
            period_s=config["period_s"],
            initial_delay_s=config["initial_delay_s"],
            report_on_stop=config["report_on_stop"],
        )

    @property
    def is_running(self) -> bool:
        return (
            self._process is not None
            and self._process.is_alive
            and not self._stop_event.triggered
        )

    def start(self) -> simpy.Process:
        """Schedule the reporting process on the environment.

        Raises:
            RuntimeError: If the schedule is already running
        """
        if self.is_running:
            raise RuntimeError("ScheduledReporter is already running")

        self._stop_event = self.env.event()
        self._process = self.env.process(self._run(self._stop_event))
        logger.debug(f"Scheduled reporting process at time {self.env.now}")
        return self._process

    def stop(self) -> None:
        """Stop scheduling cycles, optionally reporting one last time.

        Does nothing when the schedule is not running, so stopping twice or
        before ``start`` never triggers the final report.
        """
        if not self.is_running:
            logger.debug(f"ScheduledReporter already stopped at time {self.env.now}")
            return

        self._stop_event.succeed()
        if self.report_on_stop:
            self._run_cycle()

        logger.info(f"ScheduledReporter stopped at time {self.env.now} after {self.cycles_run} cycles")

    def _run(self, stop_event: simpy.Event):
        delay = self.initial_delay_s
        while True:
            yield self.env.timeout(delay) | stop_event
            if stop_event.triggered:
                logger.debug(f"Reporting process stopped at time {self.env.now}")
                return
            self._run_cycle()
            delay = self.period_s

    def _run_cycle(self) -> None:
        self.cycles_run += 1
        logger.debug(f"Report cycle {self.cycles_run} at time {self.env.now}")
        self.reporter.report_now()
