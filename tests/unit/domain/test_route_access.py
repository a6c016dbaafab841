from itertools import product

import pytest

from src.domain.entities import RouteClass, SessionState, Verdict
from src.domain.route_access import RoutePolicy, evaluate


def _all_states():
    for authenticated, required, verified, complete in product([True, False], repeat=4):
        yield SessionState(
            authenticated=authenticated,
            two_factor_required=required,
            two_factor_verified=verified,
            profile_complete=complete,
        )


def _expected(route_class: RouteClass, state: SessionState) -> Verdict:
    """Rule table written out as a single first-match chain"""
    needs_profile = not state.profile_complete
    needs_2fa = state.two_factor_required and not state.two_factor_verified

    if route_class == RouteClass.protected and not state.authenticated:
        return Verdict.redirect_login
    if route_class == RouteClass.protected and needs_profile:
        return Verdict.redirect_profile_completion
    if route_class == RouteClass.profile_completion and state.profile_complete:
        return Verdict.redirect_profile
    if route_class == RouteClass.protected and needs_2fa:
        return Verdict.redirect_two_factor
    if route_class == RouteClass.two_factor_challenge and (
        not state.two_factor_required or state.two_factor_verified
    ):
        return Verdict.redirect_profile
    if route_class == RouteClass.auth_entry and state.authenticated:
        if needs_profile:
            return Verdict.redirect_profile_completion
        if needs_2fa:
            return Verdict.redirect_two_factor
        return Verdict.redirect_profile
    return Verdict.allow


@pytest.mark.parametrize("route_class", list(RouteClass))
def test_evaluate_matches_rule_table_for_every_state(route_class):
    for state in _all_states():
        assert evaluate(route_class, state) == _expected(route_class, state), state


def test_public_routes_always_allowed():
    assert all(evaluate(RouteClass.public, state) == Verdict.allow for state in _all_states())


def test_anonymous_on_protected_goes_to_login():
    assert evaluate(RouteClass.protected, SessionState.anonymous()) == Verdict.redirect_login


def test_incomplete_profile_wins_over_pending_2fa():
    state = SessionState(
        authenticated=True,
        two_factor_required=True,
        two_factor_verified=False,
        profile_complete=False,
    )

    assert evaluate(RouteClass.protected, state) == Verdict.redirect_profile_completion
    assert evaluate(RouteClass.auth_entry, state) == Verdict.redirect_profile_completion


def test_pending_2fa_on_protected():
    state = SessionState(
        authenticated=True,
        two_factor_required=True,
        two_factor_verified=False,
        profile_complete=True,
    )

    assert evaluate(RouteClass.protected, state) == Verdict.redirect_two_factor
    assert evaluate(RouteClass.two_factor_challenge, state) == Verdict.allow


def test_fully_authenticated_user():
    state = SessionState(
        authenticated=True,
        two_factor_required=True,
        two_factor_verified=True,
        profile_complete=True,
    )

    assert evaluate(RouteClass.protected, state) == Verdict.allow
    assert evaluate(RouteClass.auth_entry, state) == Verdict.redirect_profile
    assert evaluate(RouteClass.two_factor_challenge, state) == Verdict.redirect_profile
    assert evaluate(RouteClass.profile_completion, state) == Verdict.redirect_profile


def test_anonymous_on_auth_entry_is_allowed():
    assert evaluate(RouteClass.auth_entry, SessionState.anonymous()) == Verdict.allow


@pytest.mark.parametrize(
    "path, route_class",
    [
        ("/", RouteClass.auth_entry),
        ("", RouteClass.auth_entry),
        ("/?next=1", RouteClass.auth_entry),
        ("/complete-profile", RouteClass.profile_completion),
        ("/verify-2fa", RouteClass.two_factor_challenge),
        ("/verify-2fa/", RouteClass.two_factor_challenge),
        ("/game", RouteClass.protected),
        ("/game/42", RouteClass.protected),
        ("/profile", RouteClass.protected),
        ("/settings/security", RouteClass.protected),
        ("/leaderboard", RouteClass.protected),
        ("/chat/abc", RouteClass.protected),
        ("/channel", RouteClass.protected),
        ("/gameover", RouteClass.public),
        ("/about", RouteClass.public),
        ("/img/baner.webp", RouteClass.public),
    ],
)
def test_classify(path, route_class):
    assert RoutePolicy().classify(path) == route_class


def test_location_for_allow_is_none():
    assert RoutePolicy().location(Verdict.allow, "/game") is None


def test_location_keeps_origin_for_challenges():
    policy = RoutePolicy()

    assert policy.location(Verdict.redirect_login, "/game/42") == "/?redirect=%2Fgame%2F42"
    assert (
        policy.location(Verdict.redirect_profile_completion, "/chat")
        == "/complete-profile?redirect=%2Fchat"
    )
    assert policy.location(Verdict.redirect_two_factor, "/settings") == "/verify-2fa?redirect=%2Fsettings"


def test_location_to_profile_drops_origin():
    assert RoutePolicy().location(Verdict.redirect_profile, "/verify-2fa") == "/profile"


def test_location_to_same_page_has_no_redirect_param():
    policy = RoutePolicy()

    assert policy.location(Verdict.redirect_two_factor, "/verify-2fa") == "/verify-2fa"


def test_policy_from_config():
    class Config:
        AUTH_ENTRY_ROUTE = "/login"
        PROFILE_COMPLETION_ROUTE = "/onboarding"
        TWO_FACTOR_ROUTE = "/2fa"
        PROFILE_ROUTE = "/me"
        PROTECTED_ROUTE_PREFIXES = ["/me", "/arena"]

    policy = RoutePolicy.from_config(Config)

    assert policy.classify("/login") == RouteClass.auth_entry
    assert policy.classify("/") == RouteClass.public
    assert policy.classify("/arena/1") == RouteClass.protected
    assert policy.classify("/onboarding") == RouteClass.profile_completion
    assert policy.location(Verdict.redirect_login, "/arena") == "/login?redirect=%2Farena"
