# Exception hierarchy shared by the pipeline stages

class QuadplaneError(RuntimeError):
    """Base class for all analysis failures."""
    pass


class InputFormatError(QuadplaneError, ValueError):
    """Raised when an input file is malformed or incomplete."""
    pass


class KernelError(QuadplaneError, ValueError):
    """Raised when an element kernel is given degenerate geometry."""
    pass


class SingularSystemError(QuadplaneError):
    """Raised when the reduced stiffness matrix is singular or ill-conditioned."""
    pass


class DegenerateScaleError(QuadplaneError, ZeroDivisionError):
    """Raised when no displacement occurs, so a plot scale cannot be computed."""
    pass
