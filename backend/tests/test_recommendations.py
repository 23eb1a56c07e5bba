import pytest

from preptrack.config import settings
from preptrack.exceptions import NotFoundError, ValidationError
from preptrack.services.recommendation_service import (
    APPROVED,
    PENDING,
    REJECTED,
    RecommendationService,
)
from preptrack.services.sheet_service import SheetService


@pytest.fixture
async def trio(db, make_user):
    return [await make_user(name) for name in ("alice", "bob", "carol")]


async def test_approval_needs_every_user(db, trio):
    alice, bob, carol = trio
    service = RecommendationService(db)
    rec = await service.create(alice.id, "physics", "Optics")

    rec = await service.approve(rec.id, alice.id)
    assert rec.status == PENDING
    rec = await service.approve(rec.id, bob.id)
    assert rec.status == PENDING
    rec = await service.approve(rec.id, carol.id)

    assert rec.status == APPROVED
    assert sorted(rec.approvals) == sorted(u.id for u in trio)


async def test_repeated_approval_is_counted_once(db, trio):
    alice, bob, carol = trio
    service = RecommendationService(db)
    rec = await service.create(alice.id, "chemistry", "Alcohols")

    await service.approve(rec.id, alice.id)
    await service.approve(rec.id, alice.id)
    rec = await service.approve(rec.id, alice.id)

    assert rec.approvals == [alice.id]
    assert rec.status == PENDING


async def test_single_rejection_is_final(db, trio):
    alice, bob, carol = trio
    service = RecommendationService(db)
    rec = await service.create(alice.id, "biology", "Ecology")

    await service.approve(rec.id, alice.id)
    rec = await service.reject(rec.id, bob.id)
    assert rec.status == REJECTED
    assert rec.rejections == [bob.id]

    await service.approve(rec.id, bob.id)
    rec = await service.approve(rec.id, carol.id)
    assert rec.status == REJECTED
    assert rec.approvals == [alice.id]


async def test_approved_recommendation_cannot_be_rejected(db, make_user):
    solo = await make_user("solo")
    service = RecommendationService(db)
    rec = await service.create(solo.id, "physics", "Waves")

    rec = await service.approve(rec.id, solo.id)
    rec = await service.reject(rec.id, solo.id)

    assert rec.status == APPROVED


async def test_approval_adds_chapter_once(db, make_user):
    solo = await make_user("solo")
    service = RecommendationService(db)

    for _ in range(2):
        rec = await service.create(solo.id, "physics", "Magnetism")
        await service.approve(rec.id, solo.id)

    config = await SheetService(db).get_chapters()
    assert config.physics == settings.DEFAULT_CHAPTERS["physics"] + ["Magnetism"]
    assert config.chemistry == settings.DEFAULT_CHAPTERS["chemistry"]


async def test_pending_list_excludes_decided(db, trio):
    alice, bob, carol = trio
    service = RecommendationService(db)
    open_rec = await service.create(alice.id, "physics", "Optics")
    closed = await service.create(alice.id, "physics", "Sound")
    await service.reject(closed.id, bob.id)

    assert [r.id for r in await service.list_pending()] == [open_rec.id]


async def test_create_validates_input(db, make_user):
    alice = await make_user("alice")
    service = RecommendationService(db)

    with pytest.raises(ValidationError):
        await service.create(alice.id, "history", "Rome")
    with pytest.raises(ValidationError):
        await service.create(alice.id, "physics", "   ")


async def test_vote_on_missing_recommendation(db, make_user):
    alice = await make_user("alice")
    with pytest.raises(NotFoundError):
        await RecommendationService(db).approve(42, alice.id)


async def test_failed_chapter_append_leaves_recommendation_pending(db, session_factory, make_user, monkeypatch):
    solo = await make_user("solo")
    rec = await RecommendationService(db).create(solo.id, "biology", "Genetics")

    async def broken_stage(self, subject, chapter_name):
        raise RuntimeError("chapters table unavailable")

    monkeypatch.setattr(SheetService, "stage_chapter", broken_stage)
    with pytest.raises(RuntimeError):
        await RecommendationService(db).approve(rec.id, solo.id)

    async with session_factory() as session:
        stored = await RecommendationService(session).get(rec.id)
        assert stored.status == PENDING
        assert stored.approvals == []
