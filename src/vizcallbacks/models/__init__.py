from vizcallbacks.models.callbacks import Callback, CustomCallback
from vizcallbacks.models.ranges import Range1d

__all__ = ["Callback", "CustomCallback", "Range1d"]
