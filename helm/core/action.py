"""
Action — What a logbook entry records as done

Two families of outcome, one closed union:
- Mutations: collaborative state was changed (commit, push, PR, issue, comment)
- Log: a state was recorded with no external mutation

One action = one kind. The logbook captures what happened, not what was
attempted: callers record an action only after it succeeded.

Also carries the provenance vocabularies stored beside each entry:
- Role: who was acting (human or agent)
- Method: how the reasoning was produced (manual or model)
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional, Tuple, Type

from .errors import SerializationError
from .variant import TaggedVariant


class Role(Enum):
    """Acting role recorded on each logbook entry."""
    HUMAN = "human"
    AGENT = "agent"


class Method(Enum):
    """Reasoning method recorded on each logbook entry."""
    MANUAL = "manual"
    MODEL = "model"


class PullRequestActKind(Enum):
    CREATE = "create"
    MERGE = "merge"
    COMMENT = "comment"
    REPLY = "reply"  # distinct from comment: "addressed review feedback"
    REQUESTED_REVIEW = "requestedReview"


class IssueActKind(Enum):
    CREATE = "create"
    CLOSE = "close"
    COMMENT = "comment"


class CommentTarget(Enum):
    """Where a comment lands."""
    ISSUE = "issue"
    PULL_REQUEST = "pullRequest"
    REVIEW_FEEDBACK = "reviewFeedback"


def _coerce_enum(enum_cls, value: Any, what: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        valid = ", ".join(e.value for e in enum_cls)
        raise SerializationError(f"unknown {what} {value!r}. Valid: {valid}") from None


def _require_text(value: Any, what: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise SerializationError(f"{what} must be a non-empty string")
    return value


def _require_number(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise SerializationError(f"{what} must be a positive integer, got {value!r}")
    return value


class Action(TaggedVariant):
    """Base for all action variants."""

    family: ClassVar[str] = "action"
    registry: ClassVar[Dict[str, Type['Action']]] = {}

    @property
    def is_mutation(self) -> bool:
        """True when collaborative or external state was changed."""
        return True

    def describe(self) -> str:
        return self.kind


@Action.register
@dataclass(frozen=True, eq=False)
class Log(Action):
    """A state recorded without mutation."""
    kind: ClassVar[str] = "log"

    status: str

    def __post_init__(self):
        _require_text(self.status, "log status")

    @property
    def is_mutation(self) -> bool:
        return False

    def describe(self) -> str:
        return f"logged: {self.status}"


@Action.register
@dataclass(frozen=True, eq=False)
class Commit(Action):
    kind: ClassVar[str] = "commit"

    sha: str

    def __post_init__(self):
        _require_text(self.sha, "commit sha")

    def describe(self) -> str:
        return f"committed {self.sha[:8]}"


@Action.register
@dataclass(frozen=True, eq=False)
class Push(Action):
    kind: ClassVar[str] = "push"

    branch: str
    sha: str

    def __post_init__(self):
        _require_text(self.branch, "branch")
        _require_text(self.sha, "commit sha")

    def describe(self) -> str:
        return f"pushed {self.sha[:8]} to {self.branch}"


@Action.register
@dataclass(frozen=True, eq=False)
class PullRequestAct(Action):
    kind: ClassVar[str] = "pullRequest"

    number: int
    act: PullRequestActKind
    reviewers: Tuple[str, ...] = ()

    def __post_init__(self):
        _require_number(self.number, "pull request number")
        object.__setattr__(self, 'act', _coerce_enum(PullRequestActKind, self.act, "pull request act"))
        if isinstance(self.reviewers, str):
            raise SerializationError("reviewers must be a collection of names")
        # Order of requested reviewers carries no meaning
        object.__setattr__(self, 'reviewers', tuple(sorted(set(self.reviewers))))
        if self.act == PullRequestActKind.REQUESTED_REVIEW and not self.reviewers:
            raise SerializationError("requestedReview needs at least one reviewer")

    def describe(self) -> str:
        if self.reviewers:
            return f"PR #{self.number}: {self.act.value} ({', '.join(self.reviewers)})"
        return f"PR #{self.number}: {self.act.value}"


@Action.register
@dataclass(frozen=True, eq=False)
class IssueAct(Action):
    kind: ClassVar[str] = "issue"

    number: int
    act: IssueActKind

    def __post_init__(self):
        _require_number(self.number, "issue number")
        object.__setattr__(self, 'act', _coerce_enum(IssueActKind, self.act, "issue act"))

    def describe(self) -> str:
        return f"issue #{self.number}: {self.act.value}"


@Action.register
@dataclass(frozen=True, eq=False)
class Comment(Action):
    """
    A comment on an issue or PR, or a reply to an inline review comment.

    The body lives on GitHub and can be observed later; only the location
    is recorded here.
    """
    kind: ClassVar[str] = "comment"

    number: int
    target: CommentTarget
    comment_id: Optional[int] = field(default=None, metadata={'wire': 'commentId'})

    def __post_init__(self):
        _require_number(self.number, "issue or PR number")
        object.__setattr__(self, 'target', _coerce_enum(CommentTarget, self.target, "comment target"))
        if self.target == CommentTarget.REVIEW_FEEDBACK:
            _require_number(self.comment_id, "review comment id")
        elif self.comment_id is not None:
            raise SerializationError("comment_id only applies to review feedback replies")

    def describe(self) -> str:
        if self.target == CommentTarget.REVIEW_FEEDBACK:
            return f"replied to review comment {self.comment_id} on PR #{self.number}"
        where = "issue" if self.target == CommentTarget.ISSUE else "PR"
        return f"commented on {where} #{self.number}"


def parse_action(value: Any) -> Action:
    """Accept an Action, a canonical key, or a canonical dict."""
    if isinstance(value, Action):
        return value
    if isinstance(value, str):
        return Action.from_key(value)
    if isinstance(value, dict):
        return Action.from_dict(value)
    raise SerializationError(f"cannot interpret {type(value).__name__} as an action")
