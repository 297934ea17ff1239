from auto_messenger.messaging.application.worker.scheduler import Scheduler, SchedulerState

__all__ = ["Scheduler", "SchedulerState"]
