class PixelSortError(Exception):
    """
    Base class for all errors raised by the sorting engine.
    """


class InvalidThresholdError(PixelSortError, ValueError):
    """
    Threshold band is empty or outside the 8-bit range.
    """

    def __init__(self, t_min: int, t_max: int, reason: str = "min > max"):
        self.t_min = t_min
        self.t_max = t_max
        super().__init__(f"Invalid threshold [{t_min}, {t_max}]: {reason}")


class UnsupportedPixelFormatError(PixelSortError, TypeError):
    """
    Buffer cannot be represented as 8-bit-per-channel RGBA.
    """
