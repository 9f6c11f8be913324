# display/animations/__init__.py

from .spinner import LoadingIndicator, FRAMES


class DisplayAnimations:
    """Creates animations bound to a display sink."""
    def __init__(self, sink, on_frame):
        self.sink = sink
        self.on_frame = on_frame

    def create_loading_indicator(self, lock=None, interval: float = 0.1) -> LoadingIndicator:
        """Create a loading indicator that writes frames to the loading line."""
        return LoadingIndicator(self.sink, self.on_frame, lock=lock, interval=interval)


__all__ = ['DisplayAnimations', 'LoadingIndicator', 'FRAMES']
