"""
Once-a-day trigger for the auto-assign batch.

ScheduleTrigger.tick() is called at a fixed cadence (every minute by the
django-q schedule or by ScheduleTicker). A tick runs the batch when the
schedule is enabled, today has not run yet, and the local time is within
WINDOW_MINUTES of the configured time of day.

A day whose window passes without a tick (process down, interval coarser
than the window) is skipped. There is no catch-up.
"""

import enum
import logging
import threading

from django.conf import settings
from django.db import close_old_connections
from django.utils import timezone

from . import engine
from .exceptions import BatchInProgress, NoEligibleUsers
from .models import AssignmentRun
from .services import get_auto_assign_config, get_schedule_config, mark_schedule_ran

logger = logging.getLogger(__name__)


class TriggerState(str, enum.Enum):
    IDLE = 'idle'
    DUE_TO_RUN = 'due_to_run'
    RAN_TODAY = 'ran_today'


class ScheduleTrigger:
    """
    Decides on each tick whether the scheduled batch should run.

    Ticks are serialized; the persisted ScheduleConfig is re-read on every
    tick so configuration changes apply from the next one.
    """

    def __init__(self, runner=None, window_minutes=None):
        self._runner = runner
        if window_minutes is None:
            window_minutes = settings.AUTO_ASSIGN['WINDOW_MINUTES']
        self.window_minutes = window_minutes
        self.state = TriggerState.IDLE
        self.last_result = None
        self._lock = threading.Lock()

    def tick(self, now=None):
        """
        Check the schedule once.

        Args:
            now: Current time (defaults to timezone.now())

        Returns:
            TriggerState after the check
        """
        with self._lock:
            self.state = self._check(timezone.localtime(now))
            return self.state

    def _check(self, now):
        schedule = get_schedule_config()

        if not schedule.enabled:
            return TriggerState.IDLE

        today = now.date()
        if schedule.last_run_date is not None and schedule.last_run_date >= today:
            return TriggerState.RAN_TODAY

        now_minutes = now.hour * 60 + now.minute
        if abs(now_minutes - schedule.scheduled_minutes) > self.window_minutes:
            logger.debug(
                f'Scheduled auto-assign not due: now {now:%H:%M}, '
                f'scheduled {schedule.time_of_day:%H:%M}'
            )
            return TriggerState.IDLE

        self.state = TriggerState.DUE_TO_RUN
        logger.info(f'Scheduled auto-assign due at {schedule.time_of_day:%H:%M}, running')

        options = get_auto_assign_config().to_options()
        runner = self._runner or engine.run_daily_auto_assign

        try:
            self.last_result = runner(
                options,
                trigger=AssignmentRun.Trigger.SCHEDULED,
                now=now,
            )
        except BatchInProgress:
            # Nothing ran; a later tick inside the window tries again
            logger.warning('Scheduled auto-assign deferred: a batch is already in progress')
            return TriggerState.IDLE
        except NoEligibleUsers:
            logger.warning('Scheduled auto-assign ran with no eligible users')
            self.last_result = None

        mark_schedule_ran(today)
        return TriggerState.RAN_TODAY


class ScheduleTicker:
    """
    Background thread that ticks a ScheduleTrigger at a fixed interval.

    Checks once immediately on start. stop() ends the loop at the next
    wake-up; a batch already running finishes first.
    """

    def __init__(self, trigger=None, interval=None):
        self.trigger = trigger or ScheduleTrigger()
        if interval is None:
            interval = settings.AUTO_ASSIGN['TICK_INTERVAL_SECONDS']
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread = None

    @property
    def is_running(self):
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._loop,
            name='auto-assign-scheduler',
            daemon=True,
        )
        self._thread.start()
        logger.info(f'Auto-assign scheduler started (every {self.interval}s)')

    def stop(self, timeout=None):
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info('Auto-assign scheduler stopped')

    def run_forever(self):
        """Tick in the calling thread until stop() is called from elsewhere."""
        self._stop_event.clear()
        self._loop()

    def _loop(self):
        self._tick()
        while not self._stop_event.wait(self.interval):
            self._tick()

    def _tick(self):
        close_old_connections()
        try:
            self.trigger.tick()
        except Exception:
            logger.exception('Scheduled auto-assign check failed')
        finally:
            close_old_connections()
