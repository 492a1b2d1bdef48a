import pytest

from kfilesync.errors import InvalidStateTransition
from kfilesync.transfer import (
    Active,
    Cancelled,
    Checkpoint,
    Completed,
    Failed,
    FileRequest,
    Paused,
    Pending,
    TransferError,
    TransferItemStatus,
    TransferJob,
    TransferType,
    Verifying,
)


def make_job_with_two_files():
    files = [
        FileRequest("test1.txt", 100_000, "hash1"),
        FileRequest("test2.bin", 200_000, "hash2"),
    ]
    return TransferJob.create_from_files(TransferType.SEND, "peer1", files)


def test_creation_builds_manifests():
    job = make_job_with_two_files()
    assert isinstance(job.state, Pending)
    assert len(job.items) == 2
    assert len(job.items[0].chunk_manifest.chunks) == 1
    assert len(job.items[1].chunk_manifest.chunks) == 2
    assert job.items[1].chunk_manifest.chunk_size == 131_072
    assert job.items[0].sha256 == "hash1"
    assert job.peer_device_id == "peer1"


@pytest.mark.parametrize("size", [0, 100_000, 200_000, 300_000, 1_000_000])
def test_chunks_cover_file_contiguously(size):
    job = TransferJob.create_from_files(
        TransferType.SEND, "peer", [FileRequest("f", size, "")]
    )
    chunks = job.items[0].chunk_manifest.chunks
    assert sum(c.size for c in chunks) == size
    assert [c.index for c in chunks] == list(range(len(chunks)))
    offset = 0
    for chunk in chunks:
        assert chunk.offset == offset
        offset += chunk.size


def test_ids_are_unique():
    a = make_job_with_two_files()
    b = make_job_with_two_files()
    assert a.job_id != b.job_id
    assert a.items[0].file_id != a.items[1].file_id


def test_state_machine_to_completion():
    job = make_job_with_two_files().accept()
    assert isinstance(job.state, Active)

    file1 = job.items[0].file_id
    job = job.record_chunk_done(file1, 0)
    assert isinstance(job.state, Active)
    assert job.items[0].status is TransferItemStatus.VERIFYING

    file2 = job.items[1].file_id
    job = job.record_chunk_done(file2, 0)
    assert isinstance(job.state, Active)
    assert job.items[1].status is TransferItemStatus.TRANSFERRING

    job = job.record_chunk_done(file2, 1)
    assert isinstance(job.state, Verifying)

    job = job.complete()
    assert isinstance(job.state, Completed)
    assert all(i.status is TransferItemStatus.COMPLETED for i in job.items)


def test_transitions_do_not_change_original():
    job = make_job_with_two_files()
    active = job.accept()
    assert isinstance(job.state, Pending)
    assert active.job_id == job.job_id
    done = active.record_chunk_done(active.items[0].file_id, 0)
    assert active.items[0].chunks_done == 0
    assert done.items[0].chunks_done == 1


def test_invalid_transitions():
    job = make_job_with_two_files()
    with pytest.raises(InvalidStateTransition):
        job.complete()
    with pytest.raises(InvalidStateTransition):
        job.accept().accept()
    with pytest.raises(InvalidStateTransition):
        job.pause(None)
    with pytest.raises(InvalidStateTransition):
        job.accept().resume()
    with pytest.raises(InvalidStateTransition):
        job.record_chunk_done(job.items[0].file_id, 0)
    with pytest.raises(InvalidStateTransition):
        job.begin_verify()


def test_pause_and_resume_keeps_checkpoint():
    job = make_job_with_two_files().accept()
    checkpoint = Checkpoint(job.items[0].file_id, 1)
    paused = job.pause(checkpoint)
    assert paused.state == Paused(checkpoint)
    resumed = paused.resume()
    assert isinstance(resumed.state, Active)


def test_begin_verify_then_complete():
    original = make_job_with_two_files()
    job = original.accept().begin_verify()
    assert isinstance(job.state, Verifying)
    done = job.complete()
    assert isinstance(done.state, Completed)
    assert done.job_id == original.job_id
    assert [i.status for i in done.items] == [
        TransferItemStatus.COMPLETED,
        TransferItemStatus.COMPLETED,
    ]
    assert done.progress().completed_files == 2


def test_fail_and_retry_count():
    job = make_job_with_two_files().accept()
    failed = job.fail(TransferError.CONNECTION_LOST)
    assert failed.state == Failed(TransferError.CONNECTION_LOST, 0)
    again = failed.fail(TransferError.TIMEOUT)
    assert again.state.retries == failed.state.retries + 1
    assert again.state.error == TransferError.TIMEOUT


def test_fail_from_pending_or_completed_rejected():
    job = make_job_with_two_files()
    with pytest.raises(InvalidStateTransition):
        job.fail(TransferError.TIMEOUT)
    done = job.accept().begin_verify().complete()
    with pytest.raises(InvalidStateTransition):
        done.fail(TransferError.TIMEOUT)


@pytest.mark.parametrize("advance", [0, 1, 2])
def test_cancel_from_any_state(advance):
    job = make_job_with_two_files()
    if advance >= 1:
        job = job.accept()
    if advance >= 2:
        job = job.fail(TransferError.STORAGE_ERROR)
    assert job.cancel().state == Cancelled()


def test_progress_calculation():
    files = [FileRequest("big.bin", 300_000, "hash")]
    job = TransferJob.create_from_files(TransferType.SEND, "peer1", files).accept()
    progress = job.progress()
    assert progress.total_bytes == 300_000
    assert progress.transferred_bytes == 0
    assert progress.total_files == 1

    job = job.record_chunk_done(job.items[0].file_id, 0)
    assert job.progress().transferred_bytes == 131_072

    for index in range(len(job.items[0].chunk_manifest.chunks)):
        job = job.record_chunk_done(job.items[0].file_id, index)
    assert job.progress().transferred_bytes == 300_000
    done = job.complete().progress()
    assert done.completed_files == done.total_files
    assert done.transferred_bytes == done.total_bytes


def test_progress_unchunked_file_counts_whole():
    job = TransferJob.create_from_files(
        TransferType.SEND, "peer1", [FileRequest("small", 100_000, "")]
    ).accept()
    assert job.progress().transferred_bytes == 0
    job = job.record_chunk_done(job.items[0].file_id, 0)
    assert job.progress().transferred_bytes == 100_000


def test_transfer_error_unknown_detail():
    err = TransferError.unknown("disk exploded")
    assert err.detail == "disk exploded"
    assert "disk exploded" in str(err)
    with pytest.raises(ValueError):
        TransferError("bogus")
    with pytest.raises(ValueError):
        TransferError("unknown")