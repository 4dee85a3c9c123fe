"""
SteerCommand — Act on GitHub, then record the act

The act runs first through the acting identity's `gh` config. Only when it
succeeds is the slate sealed under the matching action, so the logbook
holds what happened, never what was attempted.

Acts:
- comment N --on issue        comment on an issue
- comment N --on pr           comment on a pull request
- comment N --on review --reply-to ID   reply to an inline review comment
"""

from ..commands.base import BaseCommand
from ..core.action import Comment, CommentTarget
from ..presentation.symbols import safe_print
from ..presentation.template import OutputTemplate


# CLI spelling -> comment location
COMMENT_TARGETS = {
    'issue': CommentTarget.ISSUE,
    'pr': CommentTarget.PULL_REQUEST,
    'review': CommentTarget.REVIEW_FEEDBACK,
}


class SteerCommand(BaseCommand):
    """Command for acting on GitHub and sealing the slate under the act."""

    def comment(self, query: str, number: int, body: str, on: str,
                summary: str, reply_to: int = None):
        """
        Post a comment and seal the slate under it.

        Args:
            query: Voyage ID, prefix, or intent keyword
            number: Issue or pull request number
            body: Comment text
            on: 'issue', 'pr' or 'review'
            summary: Why the comment was posted (logbook summary)
            reply_to: Review comment ID (required with --on review)
        """
        action = Comment(number=number, target=COMMENT_TARGETS[on], comment_id=reply_to)
        identity = self.identity

        store = self.open_voyage(query)
        if store is None:
            return 1

        with store:
            voyage = store.voyage()
            self._cli.github_client().comment(number, body, action.target, action.comment_id)
            result = store.seal(identity, action, summary, self.role, self.method)

        symbols = self.symbols
        template = OutputTemplate(symbols=symbols)
        template.header("HELM STEER", f"[{voyage.short_id}] {voyage.intent}")
        template.section("ENTRY", f"{symbols.mutation} #{result.entry_id} {action.describe()}\n    {summary}")
        template.footer(
            f"{symbols.check_pass} Sealed {result.sealed} observation(s) as {identity}",
            f"Review with: helm logbook {query}"
        )
        safe_print(template.render())
        return None


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'steer'


def register_parser(subparsers):
    """Register steer command parser."""
    p = subparsers.add_parser('steer', help='Act on GitHub and seal the slate under the act')
    p.add_argument('voyage', help='Voyage ID, ID prefix, or intent keyword')

    acts = p.add_subparsers(dest='act', metavar='{comment}')
    acts.required = True

    p_comment = acts.add_parser('comment', help='Comment on an issue or PR, or reply to review feedback')
    p_comment.add_argument('number', type=int, help='Issue or pull request number')
    p_comment.add_argument('--body', '-b', required=True, help='Comment text')
    p_comment.add_argument('--on', choices=sorted(COMMENT_TARGETS), default='pr',
                           help='Where to comment (default: pr)')
    p_comment.add_argument('--reply-to', type=int, metavar='ID',
                           help='Review comment ID to reply to (with --on review)')
    p_comment.add_argument('--summary', '-s', required=True,
                           help='Why this comment was posted')
    return p


def handle(cli, args):
    """Handle steer command dispatch."""
    if args.act == 'comment':
        return cli._steer_cmd.comment(
            args.voyage, args.number, args.body, args.on,
            summary=args.summary, reply_to=args.reply_to,
        )
    return None
