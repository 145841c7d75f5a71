from .connectivity import ConnectivityMonitor
from .directory_state import DirectoryState, describe_error
from .observable import Observable

__all__ = ["ConnectivityMonitor", "DirectoryState", "Observable", "describe_error"]
