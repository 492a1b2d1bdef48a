from kfilesync.file_entry import EntryType, FileEntry, ResolutionKind
from kfilesync.share import SharePermission
from kfilesync.sync_plan import generate

LOCAL_DEV = "local_dev"
REMOTE_DEV = "remote_dev"


def setup_entries():
    base = FileEntry.create("s1", "file.txt", EntryType.FILE, LOCAL_DEV)
    return LOCAL_DEV, SharePermission.READ_WRITE, base, base


def test_only_local_has_it():
    local_dev, perm, local, _ = setup_entries()
    plan = generate([local], [], local_dev, perm)
    assert len(plan.to_push) == 1
    assert len(plan.to_pull) == 0
    assert len(plan.conflicts) == 0
    assert len(plan.unchanged) == 0
    assert plan.to_push[0].path == "file.txt"


def test_only_remote_has_it():
    local_dev, perm, _, remote = setup_entries()
    plan = generate([], [remote], local_dev, perm)
    assert len(plan.to_push) == 0
    assert len(plan.to_pull) == 1
    assert len(plan.conflicts) == 0
    assert len(plan.unchanged) == 0
    assert plan.to_pull[0].path == "file.txt"


def test_equal_versions():
    local_dev, perm, local, remote = setup_entries()
    plan = generate([local], [remote], local_dev, perm)
    assert len(plan.to_push) == 0
    assert len(plan.to_pull) == 0
    assert len(plan.conflicts) == 0
    assert plan.unchanged == ["file.txt"]


def test_local_newer():
    local_dev, perm, local, remote = setup_entries()
    local = local.update_content(100, "hash1", [], local_dev)
    plan = generate([local], [remote], local_dev, perm)
    assert len(plan.to_push) == 1
    assert len(plan.to_pull) == 0
    assert len(plan.conflicts) == 0


def test_remote_newer():
    local_dev, perm, local, remote = setup_entries()
    remote = remote.update_content(100, "hash1", [], REMOTE_DEV)
    plan = generate([local], [remote], local_dev, perm)
    assert len(plan.to_push) == 0
    assert len(plan.to_pull) == 1
    assert len(plan.conflicts) == 0


def test_conflict():
    local_dev, perm, local, remote = setup_entries()
    local = local.update_content(100, "hashL", [], local_dev)
    remote = remote.update_content(200, "hashR", [], REMOTE_DEV)
    plan = generate([local], [remote], local_dev, perm)
    assert len(plan.to_push) == 0
    assert len(plan.to_pull) == 0
    assert len(plan.conflicts) == 1
    assert plan.conflicts[0].resolution.kind is ResolutionKind.KEEP_BOTH
    assert plan.conflicts[0].local == local
    assert plan.conflicts[0].remote == remote


def test_permissions():
    local_dev, _, local, remote = setup_entries()

    local_newer = local.update_content(100, "hashL", [], local_dev)
    plan_ro = generate([local_newer], [remote], local_dev, SharePermission.READ_ONLY)
    assert len(plan_ro.to_push) == 0

    remote_newer = remote.update_content(200, "hashR", [], REMOTE_DEV)
    plan_so = generate([local], [remote_newer], local_dev, SharePermission.SEND_ONLY)
    assert len(plan_so.to_pull) == 0


def test_tombstone_not_resurrected():
    local_dev, perm, local, remote = setup_entries()
    tombstone = local.mark_deleted(local_dev)
    plan = generate([tombstone], [], local_dev, perm)
    assert len(plan.to_push) == 0

    remote_tombstone = remote.mark_deleted(REMOTE_DEV)
    plan2 = generate([], [remote_tombstone], local_dev, perm)
    assert len(plan2.to_pull) == 0


def test_paths_are_visited_in_sorted_order():
    perm = SharePermission.READ_WRITE
    entries = [
        FileEntry.create("s1", name, EntryType.FILE, LOCAL_DEV)
        for name in ("c.txt", "a.txt", "b.txt")
    ]
    plan = generate(entries, [], LOCAL_DEV, perm)
    assert [action.path for action in plan.to_push] == ["a.txt", "b.txt", "c.txt"]


def test_every_path_lands_in_at_most_one_bucket():
    perm = SharePermission.READ_WRITE
    shared = FileEntry.create("s1", "same.txt", EntryType.FILE, LOCAL_DEV)
    local_only = FileEntry.create("s1", "mine.txt", EntryType.FILE, LOCAL_DEV)
    remote_only = FileEntry.create("s1", "theirs.txt", EntryType.FILE, REMOTE_DEV)
    plan = generate([shared, local_only], [shared, remote_only], LOCAL_DEV, perm)
    assert [a.path for a in plan.to_push] == ["mine.txt"]
    assert [a.path for a in plan.to_pull] == ["theirs.txt"]
    assert plan.unchanged == ["same.txt"]