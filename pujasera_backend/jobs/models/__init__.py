from .queue_entry import JobType, QueueEntry

__all__ = ["JobType", "QueueEntry"]
