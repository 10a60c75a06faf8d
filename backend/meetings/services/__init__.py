from meetings.services.deps import MeetingDeps

__all__ = ["MeetingDeps"]
