from .scheduler import IScheduler, ScheduledTask

__all__ = ["IScheduler", "ScheduledTask"]
