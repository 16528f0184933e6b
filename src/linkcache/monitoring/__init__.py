from .recorder import EventRecorder

__all__ = ["EventRecorder"]
