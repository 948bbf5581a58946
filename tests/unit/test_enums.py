from resmon.models.enums import (
    AllocationLabel,
    CategoryMode,
    FailureKind,
    FileState,
    FileType,
    HookStatus,
    NodeState,
    QueueFeature,
    RetryDecision,
)


def test_hook_status_values():
    assert len(HookStatus) == 3
    assert HookStatus.SUCCESS == "success"
    assert HookStatus.FAILURE == "failure"
    assert HookStatus.FATAL == "fatal"


def test_allocation_labels():
    assert [label.value for label in AllocationLabel] == ["first", "max", "error"]


def test_category_modes():
    assert CategoryMode("fixed") is CategoryMode.FIXED
    assert CategoryMode("min_waste") is CategoryMode.MIN_WASTE
    assert len(CategoryMode) == 4


def test_queue_features_match_backend_names():
    assert QueueFeature.REMOTE_RENAME == "remote_rename"
    assert QueueFeature.OUTPUT_DIRECTORIES == "output_directories"


def test_misc_enums():
    assert NodeState.WAITING == "waiting"
    assert FileType.INTERMEDIATE == "intermediate"
    assert FailureKind.DISK_EXHAUSTED == "disk_exhausted"
    assert RetryDecision.RESUBMIT == "resubmit"


def test_states_in_use():
    assert [s.value for s in NodeState] == ["waiting", "running", "complete", "failed"]
    assert [s.value for s in FileState] == ["unknown", "expect", "exists"]
