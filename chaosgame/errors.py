class ChaosGameError(Exception):
    """Base class for all errors raised by the chaos game animator."""


class InvalidConfiguration(ChaosGameError, ValueError):
    """Raised at setup when the animation parameters cannot produce a run."""


class RenderFailure(ChaosGameError, RuntimeError):
    """Raised when a frame cannot be rasterized or written. Aborts the run."""

    def __init__(self, frame_index, message):
        super().__init__(f"Frame {frame_index}: {message}")
        self.frame_index = frame_index
        self.message = message

    def __reduce__(self):  # rebuilt from its arguments when raised inside a worker process
        return self.__class__, (self.frame_index, self.message)


class EncodingFailure(ChaosGameError, RuntimeError):
    """Raised when the external encoder fails. The frames on disk stay valid, so encoding can be retried."""

    def __init__(self, message, returncode=None, stderr=""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr
