from enum import Enum


class HookStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"  # node-local, the engine continues
    FATAL = "fatal"  # the engine must stop


class NodeState(str, Enum):
    WAITING = "waiting"
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"


class FileType(str, Enum):
    GLOBAL = "global"
    INTERMEDIATE = "intermediate"
    TEMP = "temp"


class FileState(str, Enum):
    UNKNOWN = "unknown"
    EXPECT = "expect"
    EXISTS = "exists"


class AllocationLabel(str, Enum):
    FIRST = "first"
    MAX = "max"
    ERROR = "error"


class CategoryMode(str, Enum):
    FIXED = "fixed"
    MAX = "max"
    MIN_WASTE = "min_waste"
    MAX_THROUGHPUT = "max_throughput"


class FailureKind(str, Enum):
    DISK_EXHAUSTED = "disk_exhausted"
    RESOURCE_OVERFLOW = "resource_overflow"
    UNRELATED = "unrelated"


class RetryDecision(str, Enum):
    NOT_HANDLED = "not_handled"
    RESUBMIT = "resubmit"
    TERMINAL = "terminal"


class QueueFeature(str, Enum):
    REMOTE_RENAME = "remote_rename"
    OUTPUT_DIRECTORIES = "output_directories"
    ABSOLUTE_PATH = "absolute_path"
    BATCH_LOG_NAME = "batch_log_name"
