"""
Review creation, rating aggregation and booking linkage.
"""

import threading

import pytest
from sqlalchemy import delete, func
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import (
    BookingNotFoundError,
    BookingNotReviewableError,
    DuplicateReviewError,
    ProviderNotFoundError,
    ServiceNotFoundError,
    StorageError,
    ValidationError,
)
from app.db.models.booking import Booking
from app.db.models.review import Review
from app.db.models.service import Service
from app.db.models.user import User
from app.services import review_service


def _review(db, booking, rating=5, comment="Fixed it in twenty minutes", **overrides):
    fields = dict(
        customer_id=booking.customer_id,
        provider_id=booking.provider_id,
        booking_id=booking.id,
        rating=rating,
        comment=comment,
    )
    fields.update(overrides)
    return review_service.create_review(db, **fields)


def _provider(db, provider_id):
    db.expire_all()
    return db.query(User).filter(User.id == provider_id).one()


def _assert_aggregate_consistent(db, provider_id):
    provider = _provider(db, provider_id)
    total = db.query(func.coalesce(func.sum(Review.rating), 0)).filter(
        Review.provider_id == provider_id
    ).scalar()
    count = db.query(func.count(Review.id)).filter(Review.provider_id == provider_id).scalar()
    assert provider.total_reviews == count
    assert provider.rating * provider.total_reviews == pytest.approx(total, abs=1e-9)


def test_create_review_returns_persisted_review(db, completed_booking):
    review = _review(db, completed_booking, rating=4, comment="  Neat work  ")

    assert review.id is not None
    assert review.rating == 4
    assert review.comment == "Neat work"
    assert review.booking_id == completed_booking.id
    assert review.service_id == completed_booking.service_id
    assert review.created_at is not None


def test_aggregate_is_average_of_all_ratings(db, provider, make_booking):
    ratings = [5, 3, 4, 1, 5, 2]
    for r in ratings:
        _review(db, make_booking(), rating=r)

    p = _provider(db, provider.id)
    assert p.total_reviews == len(ratings)
    assert p.rating == pytest.approx(sum(ratings) / len(ratings), abs=1e-9)
    assert sorted(rv.rating for rv in p.reviews) == sorted(ratings)
    _assert_aggregate_consistent(db, provider.id)


def test_running_average_from_seeded_aggregate(db, make_provider, make_booking):
    provider = make_provider(rating=4.0, total_reviews=2)
    booking = make_booking(provider_id=provider.id)

    _review(db, booking, rating=5)

    p = _provider(db, provider.id)
    assert p.total_reviews == 3
    assert p.rating == pytest.approx((4.0 * 2 + 5) / 3, abs=1e-9)


def test_average_is_not_rounded(db, provider, make_booking):
    for r in (5, 4, 4):
        _review(db, make_booking(), rating=r)

    p = _provider(db, provider.id)
    assert p.rating == pytest.approx(13 / 3, abs=1e-9)
    assert p.rating != 4.3


def test_booking_marked_reviewed(db, completed_booking):
    review = _review(db, completed_booking, rating=5)

    db.expire_all()
    booking = db.query(Booking).filter(Booking.id == completed_booking.id).one()
    assert booking.is_reviewed is True
    assert booking.review_id == review.id
    assert booking.review.id == review.id


def test_duplicate_review_rejected(db, provider, completed_booking):
    _review(db, completed_booking, rating=5)

    with pytest.raises(DuplicateReviewError):
        _review(db, completed_booking, rating=1)

    p = _provider(db, provider.id)
    assert p.total_reviews == 1
    assert p.rating == pytest.approx(5.0)
    assert db.query(Review).filter(Review.booking_id == completed_booking.id).count() == 1


def test_review_row_without_booking_marker_is_duplicate(db, session_factory, provider, completed_booking):
    # a review row that bypassed the service; the booking does not know about it
    other = session_factory()
    other.add(Review(
        booking_id=completed_booking.id,
        customer_id=completed_booking.customer_id,
        provider_id=provider.id,
        rating=3,
        comment="Written elsewhere",
    ))
    other.commit()
    other.close()

    with pytest.raises(DuplicateReviewError):
        _review(db, completed_booking, rating=5)

    assert _provider(db, provider.id).total_reviews == 0


@pytest.mark.parametrize("rating", [0, 6, -1, 4.5, "5", True])
def test_rating_out_of_range_rejected(db, provider, completed_booking, rating):
    with pytest.raises(ValidationError) as exc_info:
        _review(db, completed_booking, rating=rating)

    assert any(e["field"] == "rating" for e in exc_info.value.errors)
    assert db.query(Review).count() == 0
    assert _provider(db, provider.id).total_reviews == 0


@pytest.mark.parametrize("rating", [1, 5])
def test_rating_bounds_accepted(db, completed_booking, rating):
    assert _review(db, completed_booking, rating=rating).rating == rating


@pytest.mark.parametrize("comment", ["", "   ", "a" * 501])
def test_comment_bounds_rejected(db, completed_booking, comment):
    with pytest.raises(ValidationError) as exc_info:
        _review(db, completed_booking, comment=comment)

    assert any(e["field"] == "comment" for e in exc_info.value.errors)
    assert db.query(Review).count() == 0


def test_comment_of_max_length_accepted(db, completed_booking):
    review = _review(db, completed_booking, comment="a" * 500)
    assert len(review.comment) == 500


@pytest.mark.parametrize("missing", ["customer_id", "provider_id", "booking_id"])
def test_missing_reference_rejected(db, completed_booking, missing):
    with pytest.raises(ValidationError):
        _review(db, completed_booking, **{missing: None})


def test_unknown_booking(db, provider, customer):
    with pytest.raises(BookingNotFoundError):
        review_service.create_review(
            db,
            customer_id=customer.id,
            provider_id=provider.id,
            booking_id=9999,
            rating=4,
            comment="Never happened",
        )


@pytest.mark.parametrize("status", ["pending", "confirmed", "in-progress", "cancelled", "no-show"])
def test_only_completed_bookings_reviewable(db, provider, make_booking, status):
    booking = make_booking(status=status)

    with pytest.raises(BookingNotReviewableError):
        _review(db, booking)

    assert db.query(Review).count() == 0
    assert _provider(db, provider.id).total_reviews == 0


def test_booking_must_belong_to_customer(db, completed_booking):
    with pytest.raises(BookingNotReviewableError):
        _review(db, completed_booking, customer_id=completed_booking.customer_id + 100)


def test_booking_must_belong_to_provider(db, completed_booking, make_provider):
    other = make_provider()
    with pytest.raises(BookingNotReviewableError):
        _review(db, completed_booking, provider_id=other.id)


def test_missing_provider_leaves_no_orphan_review(db, provider, completed_booking):
    db.execute(delete(User).where(User.id == provider.id))
    db.commit()

    with pytest.raises(ProviderNotFoundError):
        _review(db, completed_booking)

    db.expire_all()
    assert db.query(Review).count() == 0
    booking = db.query(Booking).filter(Booking.id == completed_booking.id).one()
    assert booking.is_reviewed is False
    assert booking.review_id is None


def test_stale_provider_snapshot_does_not_lose_update(session_factory, provider, make_booking):
    first, second = make_booking(), make_booking()
    a, b = session_factory(), session_factory()
    try:
        # both sessions hold the provider at 0 reviews before either write
        assert a.get(User, provider.id).total_reviews == 0
        assert b.get(User, provider.id).total_reviews == 0

        _review(a, first, rating=2)
        _review(b, second, rating=4)
    finally:
        a.close()
        b.close()

    check = session_factory()
    p = check.query(User).filter(User.id == provider.id).one()
    assert p.total_reviews == 2
    assert p.rating == pytest.approx(3.0)
    check.close()


def test_concurrent_reviews_for_same_provider(session_factory, provider, make_booking):
    # Smoke check only: SQLite's database lock already serializes the two
    # writers. The atomic UPDATE itself is covered by
    # test_stale_provider_snapshot_does_not_lose_update.
    bookings = [make_booking(), make_booking()]
    ratings = [5, 2]
    barrier = threading.Barrier(len(bookings))
    errors = []

    def submit(booking, rating):
        session = session_factory()
        try:
            barrier.wait()
            _review(session, booking, rating=rating)
        except Exception as e:  # surfaced through `errors`
            errors.append(e)
        finally:
            session.close()

    threads = [
        threading.Thread(target=submit, args=(bk, r)) for bk, r in zip(bookings, ratings)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert errors == []
    check = session_factory()
    p = check.query(User).filter(User.id == provider.id).one()
    assert p.total_reviews == 2
    assert p.rating == pytest.approx(3.5, abs=1e-9)
    _assert_aggregate_consistent(check, provider.id)
    check.close()


def test_concurrent_duplicate_counts_once(session_factory, provider, completed_booking):
    barrier = threading.Barrier(2)
    outcomes = []

    def submit(rating):
        session = session_factory()
        try:
            barrier.wait()
            _review(session, completed_booking, rating=rating)
            outcomes.append("ok")
        except DuplicateReviewError:
            outcomes.append("duplicate")
        finally:
            session.close()

    threads = [threading.Thread(target=submit, args=(r,)) for r in (5, 1)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert sorted(outcomes) == ["duplicate", "ok"]
    check = session_factory()
    assert check.query(User).filter(User.id == provider.id).one().total_reviews == 1
    _assert_aggregate_consistent(check, provider.id)
    check.close()


def test_recalculate_provider_rating_repairs_drift(db, provider, make_booking):
    for r in (3, 4):
        _review(db, make_booking(), rating=r)
    db.query(User).filter(User.id == provider.id).update({"rating": 1.0, "total_reviews": 7})
    db.commit()

    p = review_service.recalculate_provider_rating(db, provider.id)

    assert p.total_reviews == 2
    assert p.rating == pytest.approx(3.5)


def test_recalculate_unknown_provider(db, customer):
    with pytest.raises(ProviderNotFoundError):
        review_service.recalculate_provider_rating(db, customer.id)


def test_list_reviews_filters(db, make_booking, make_provider):
    _review(db, make_booking(), rating=2, comment="Late and messy")
    _review(db, make_booking(), rating=5, comment="Spotless work")
    other = make_provider(name="Ravi Electricals")
    _review(db, make_booking(provider_id=other.id), rating=4, comment="Good")

    assert review_service.list_reviews(db)["total"] == 3
    assert review_service.list_reviews(db, min_rating=4)["total"] == 2

    by_comment = review_service.list_reviews(db, search="spotless")
    assert [r.comment for r in by_comment["items"]] == ["Spotless work"]

    by_name = review_service.list_reviews(db, search="Ravi")
    assert [r.comment for r in by_name["items"]] == ["Good"]

    page = review_service.list_reviews(db, page=1, limit=2)
    assert len(page["items"]) == 2
    assert page["has_more"] is True


def test_unknown_service_rejected(db, provider, completed_booking):
    with pytest.raises(ServiceNotFoundError):
        _review(db, completed_booking, service_id=987654)

    assert db.query(Review).count() == 0
    assert _provider(db, provider.id).total_reviews == 0


def test_service_must_match_booking(db, completed_booking):
    other = Service(name="Carpentry")
    db.add(other)
    db.commit()

    with pytest.raises(ValidationError) as exc_info:
        _review(db, completed_booking, service_id=other.id)

    assert any(e["field"] == "service_id" for e in exc_info.value.errors)
    assert db.query(Review).count() == 0


def test_matching_service_id_accepted(db, completed_booking):
    review = _review(db, completed_booking, service_id=completed_booking.service_id)
    assert review.service_id == completed_booking.service_id


def test_non_duplicate_integrity_error_is_storage_error(db, provider, completed_booking, monkeypatch):
    def failing_flush(*args, **kwargs):
        raise IntegrityError("INSERT INTO reviews", {}, Exception("FOREIGN KEY constraint failed"))

    monkeypatch.setattr(db, "flush", failing_flush)

    with pytest.raises(StorageError):
        _review(db, completed_booking)

    monkeypatch.undo()
    db.expire_all()
    assert db.query(Review).count() == 0
    assert _provider(db, provider.id).total_reviews == 0
    booking = db.query(Booking).filter(Booking.id == completed_booking.id).one()
    assert booking.is_reviewed is False
