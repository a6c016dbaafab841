"""
Route Access Rules

Pure decision function evaluated per request by the edge layer. Given the
class of the requested route and the resolved session state, decide whether
to serve it or where to send the user instead.

Rules (first match wins):
1. protected, not authenticated           -> redirect_login
2. protected, profile incomplete          -> redirect_profile_completion
3. profile_completion, profile complete   -> redirect_profile
4. protected, 2FA required, not verified  -> redirect_two_factor
5. two_factor_challenge, 2FA not required
   or already verified                    -> redirect_profile
6. auth_entry, authenticated              -> first of rules 2/4 that would
                                             apply, else redirect_profile
7. otherwise                              -> allow
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple
from urllib.parse import urlencode

from .entities import RouteClass, SessionState, Verdict


def _needs_profile_completion(state: SessionState) -> bool:
    return not state.profile_complete


def _needs_two_factor(state: SessionState) -> bool:
    return state.two_factor_required and not state.two_factor_verified


def _evaluate_protected(state: SessionState) -> Verdict:
    if not state.authenticated:
        return Verdict.redirect_login
    if _needs_profile_completion(state):
        return Verdict.redirect_profile_completion
    if _needs_two_factor(state):
        return Verdict.redirect_two_factor
    return Verdict.allow


def _evaluate_profile_completion(state: SessionState) -> Verdict:
    if state.profile_complete:
        return Verdict.redirect_profile
    return Verdict.allow


def _evaluate_two_factor_challenge(state: SessionState) -> Verdict:
    if not state.two_factor_required or state.two_factor_verified:
        return Verdict.redirect_profile
    return Verdict.allow


def _evaluate_auth_entry(state: SessionState) -> Verdict:
    if not state.authenticated:
        return Verdict.allow
    if _needs_profile_completion(state):
        return Verdict.redirect_profile_completion
    if _needs_two_factor(state):
        return Verdict.redirect_two_factor
    return Verdict.redirect_profile


def _evaluate_public(state: SessionState) -> Verdict:
    return Verdict.allow


_RULES = {
    RouteClass.public: _evaluate_public,
    RouteClass.auth_entry: _evaluate_auth_entry,
    RouteClass.profile_completion: _evaluate_profile_completion,
    RouteClass.two_factor_challenge: _evaluate_two_factor_challenge,
    RouteClass.protected: _evaluate_protected,
}

if set(_RULES) != set(RouteClass):
    raise RuntimeError("route access rules do not cover every RouteClass")


def evaluate(route_class: RouteClass, state: SessionState) -> Verdict:
    """Return the access verdict for a route class under a session state"""
    return _RULES[route_class](state)


@dataclass(frozen=True)
class RoutePolicy:
    """
    Maps request paths onto route classes and verdicts onto locations.

    Prefix matching is segment-aware: "/game" matches "/game" and
    "/game/42" but not "/gameover".
    """

    auth_entry: str = "/"
    profile_completion: str = "/complete-profile"
    two_factor: str = "/verify-2fa"
    profile: str = "/profile"
    protected_prefixes: Tuple[str, ...] = (
        "/game",
        "/profile",
        "/settings",
        "/leaderboard",
        "/chat",
        "/channel",
    )

    @classmethod
    def from_config(cls, config) -> "RoutePolicy":
        return cls(
            auth_entry=config.AUTH_ENTRY_ROUTE,
            profile_completion=config.PROFILE_COMPLETION_ROUTE,
            two_factor=config.TWO_FACTOR_ROUTE,
            profile=config.PROFILE_ROUTE,
            protected_prefixes=tuple(config.PROTECTED_ROUTE_PREFIXES),
        )

    def classify(self, path: str) -> RouteClass:
        path = _normalize(path)
        if path == _normalize(self.auth_entry):
            return RouteClass.auth_entry
        if _matches(path, self.profile_completion):
            return RouteClass.profile_completion
        if _matches(path, self.two_factor):
            return RouteClass.two_factor_challenge
        if any(_matches(path, prefix) for prefix in self.protected_prefixes):
            return RouteClass.protected
        return RouteClass.public

    def location(self, verdict: Verdict, path: str) -> Optional[str]:
        """Redirect target for a verdict, or None when the request is allowed"""
        targets: Dict[Verdict, Tuple[str, bool]] = {
            Verdict.redirect_login: (self.auth_entry, True),
            Verdict.redirect_profile_completion: (self.profile_completion, True),
            Verdict.redirect_two_factor: (self.two_factor, True),
            Verdict.redirect_profile: (self.profile, False),
        }
        if verdict not in targets:
            return None
        target, keep_origin = targets[verdict]
        if keep_origin and path != target:
            return f"{target}?{urlencode({'redirect': path})}"
        return target


def _normalize(path: str) -> str:
    path = path.split("?", 1)[0] or "/"
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/")
    return path


def _matches(path: str, prefix: str) -> bool:
    prefix = _normalize(prefix)
    return path == prefix or path.startswith(prefix + "/")
