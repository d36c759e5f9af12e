from airdrop.services import ReferralTracker


def test_no_referrals(session, make_user):
    user = make_user()
    tracker = ReferralTracker(session)

    assert tracker.stats(user) == {"count": 0, "totalEarned": 0}
    assert tracker.list_referrals(user) == []


def test_referrals_newest_first_with_profiles(session, make_user):
    referrer = make_user(username="boss")
    code = referrer.referral_code
    first = make_user(username="first", referral_code=code)
    second = make_user(username="second", referral_code=code)
    make_user(username="stranger")

    tracker = ReferralTracker(session)
    rows = tracker.list_referrals(referrer)

    assert [referred.username for _, referred in rows] == ["second", "first"]
    assert [referral.referred_id for referral, _ in rows] == [second.id, first.id]
    assert all(referral.reward_earned == 40 for referral, _ in rows)
    assert tracker.stats(referrer) == {"count": 2, "totalEarned": 80}
    assert tracker.stats(first) == {"count": 0, "totalEarned": 0}


def test_referral_link(session, make_user):
    user = make_user()
    link = ReferralTracker(session, bot_username="mybot").referral_link(user)
    assert link == f"https://t.me/mybot?start={user.referral_code}"
